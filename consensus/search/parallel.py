"""Multi-threaded single-model consensus."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from consensus.config import ConsensusConfig, ParallelConfig
from consensus.estimation.base import Estimator
from consensus.sampling.sampler import UniformSampler
from consensus.search.ransac import RANSAC, check_data
from consensus.search.result import Candidate, ConsensusResult
from consensus.search.stopping import StoppingCriterion
from consensus.utils.metrics import PerformanceMetrics, empty_run_stats

logger = logging.getLogger(__name__)


class SharedBest:
    """Best candidate and trial counter shared by all workers."""

    def __init__(self, stopping: StoppingCriterion, pool_size: int):
        self.lock = threading.Lock()
        self.stopping = stopping
        self.pool_size = pool_size
        self.best = None
        self.trials = 0
        self.reason = None
        self.failed = False

    def next_trial(self) -> Optional[int]:
        """Claim the next global trial number, None once the search must stop."""
        with self.lock:
            if self.failed:
                return None
            support = self.best.support if self.best else 0
            reason = self.stopping.stop_reason(self.trials, support, self.pool_size)
            if reason is not None:
                if self.reason is None:
                    self.reason = reason
                return None
            self.trials += 1
            return self.trials

    def offer(self, candidate: Candidate) -> bool:
        with self.lock:
            if not candidate.beats(self.best):
                return False
            self.best = candidate
            self.stopping.update(candidate.support, self.pool_size)
            return True

    def fail(self):
        """Stop handing out trials after a worker raised."""
        with self.lock:
            self.failed = True


class ParallelRANSAC:
    """
    RANSAC with trials spread over a thread pool.

    Every worker owns a RANSAC engine with its own random stream spawned from
    the master seed. Workers claim global trial numbers from a shared record,
    which also holds the best candidate and the adaptive trial bound. Ties
    between equal candidates go to the lower trial number, but which trials
    run depends on thread scheduling when ``workers > 1``.
    """

    def __init__(self, config: Optional[ConsensusConfig] = None, seed=None,
                 workers: int = 4, scoring_workers: int = 1,
                 scoring_chunk_size: int = 4096, **overrides):
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.workers = [
            RANSAC(config, seed=sampler, scoring_workers=scoring_workers,
                   scoring_chunk_size=scoring_chunk_size, **overrides)
            for sampler in UniformSampler(seed).spawn(workers)
        ]
        self.config = self.workers[0].config
        self.stats = empty_run_stats()

    @classmethod
    def from_config(cls, config: Dict[str, Any], seed=None) -> 'ParallelRANSAC':
        parallel = ParallelConfig.from_dict(config)
        return cls(ConsensusConfig.from_dict(config), seed=seed,
                   workers=parallel.workers,
                   scoring_workers=parallel.scoring_workers,
                   scoring_chunk_size=parallel.scoring_chunk_size)

    def find_model(self, estimator: Estimator, data: Sequence) -> Optional[Any]:
        result = self.run(estimator, data)
        return result.model if result is not None else None

    def find_model_with_inliers(self, estimator: Estimator,
                                data: Sequence) -> Optional[Tuple[Any, np.ndarray]]:
        result = self.run(estimator, data)
        return result.as_pair() if result is not None else None

    estimate = find_model

    def run(self, estimator: Estimator, data: Sequence) -> Optional[ConsensusResult]:
        check_data(estimator, data)
        pool = np.arange(len(data))

        stopping = StoppingCriterion(estimator.min_samples, self.config.confidence,
                                     self.config.max_trials, self.config.time_budget)
        shared = SharedBest(stopping, len(pool))
        metrics = PerformanceMetrics()
        metrics.start_timer('search')
        stopping.start()

        for engine in self.workers:
            engine.stats = empty_run_stats()

        def work(engine: RANSAC):
            try:
                while True:
                    trial = shared.next_trial()
                    if trial is None:
                        return
                    for candidate in engine.trial(estimator, data, pool, None, trial):
                        if shared.offer(candidate):
                            logger.debug(f"Trial {trial}: new best with {candidate.support} inliers")
            except BaseException:
                shared.fail()
                raise

        with ExitStack() as stack:
            for engine in self.workers:
                stack.enter_context(engine.scoring())
            with ThreadPoolExecutor(max_workers=len(self.workers),
                                    thread_name_prefix='consensus-trial') as executor:
                futures = [executor.submit(work, engine) for engine in self.workers]
                for future in futures:
                    future.result()

        best = shared.best
        if best is not None and self.config.refine:
            best = self.workers[0].refine(estimator, data, best)

        self.stats = empty_run_stats()
        for engine in self.workers:
            self.stats['candidates_evaluated'] += engine.stats['candidates_evaluated']
            self.stats['degenerate_samples'] += engine.stats['degenerate_samples']
        self.stats.update({
            'trials': shared.trials,
            'best_support': best.support if best else 0,
            'required_trials': stopping.bound,
            'stop_reason': shared.reason,
            'elapsed_ms': metrics.stop_timer('search'),
        })

        if best is None:
            logger.warning(f"No consensus after {shared.trials} trials")
            return None
        logger.info(f"Consensus: {best.support}/{len(data)} inliers after "
                    f"{shared.trials} trials on {len(self.workers)} workers ({shared.reason})")
        return ConsensusResult.from_candidate(best)

    def get_stats(self) -> Dict:
        return self.stats.copy()
