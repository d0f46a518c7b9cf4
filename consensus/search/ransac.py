"""RANSAC implementation for robust estimation."""

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from consensus.config import ConsensusConfig, ParallelConfig
from consensus.errors import InsufficientDataError
from consensus.estimation.base import Estimator, count_distinct, take
from consensus.sampling.sampler import make_sampler
from consensus.search.result import Candidate, ConsensusResult
from consensus.search.scoring import ResidualScorer
from consensus.search.stopping import StoppingCriterion
from consensus.utils.metrics import PerformanceMetrics, empty_run_stats

logger = logging.getLogger(__name__)


class RANSAC:
    """
    Single-model random sample consensus.

    Repeatedly draws a minimal sample, lets the estimator fit candidate
    models to it and scores every candidate against the whole dataset. The
    candidate with the most inliers wins; equal support is decided by the
    lower mean inlier residual, then by which was found first. The number of
    trials adapts to the best inlier ratio seen so far.

    One instance owns one random stream and must not be shared between
    threads; see ParallelRANSAC for multi-threaded search.
    """

    def __init__(self, config: Optional[ConsensusConfig] = None, seed=None,
                 scoring_workers: int = 1, scoring_chunk_size: int = 4096, **overrides):
        """
        Initialize the engine

        Args:
            config: Search settings (defaults when omitted)
            seed: Integer seed, numpy SeedSequence or a ready sampler
            scoring_workers: Threads used to score large datasets in chunks
            scoring_chunk_size: Points per scoring chunk
            **overrides: Individual ConsensusConfig fields, e.g. inlier_threshold=0.5
        """
        if config is None:
            config = ConsensusConfig(**overrides)
        elif overrides:
            config = ConsensusConfig(**{**config.__dict__, **overrides})
        self.config = config
        self.sampler = make_sampler(seed)
        self.scoring_workers = scoring_workers
        self._executor = None
        self.scorer = ResidualScorer(
            threshold=config.inlier_threshold,
            precision=config.precision,
            chunk_size=scoring_chunk_size,
        )
        self.stats = empty_run_stats()

    @classmethod
    def from_config(cls, config: Dict[str, Any], seed=None) -> 'RANSAC':
        """Build from a full config dict such as ``load_config()`` returns."""
        parallel = ParallelConfig.from_dict(config)
        return cls(ConsensusConfig.from_dict(config), seed=seed,
                   scoring_workers=parallel.scoring_workers,
                   scoring_chunk_size=parallel.scoring_chunk_size)

    def find_model(self, estimator: Estimator, data: Sequence) -> Optional[Any]:
        """Best model found, or None if no model could be estimated."""
        result = self.run(estimator, data)
        return result.model if result is not None else None

    def find_model_with_inliers(self, estimator: Estimator,
                                data: Sequence) -> Optional[Tuple[Any, np.ndarray]]:
        """Best model and the sorted indices of the points supporting it."""
        result = self.run(estimator, data)
        return result.as_pair() if result is not None else None

    # Consensus protocol
    estimate = find_model

    def run(self, estimator: Estimator, data: Sequence) -> Optional[ConsensusResult]:
        """
        Run a full search over ``data``.

        Raises:
            InsufficientDataError: if ``data`` cannot yield a minimal sample
        """
        check_data(estimator, data)
        with self.scoring():
            best = self.search(estimator, data, np.arange(len(data)))

        if best is None:
            logger.warning(f"No consensus after {self.stats['trials']} trials "
                           f"({self.stats['degenerate_samples']} degenerate samples)")
            return None

        logger.info(f"Consensus: {best.support}/{len(data)} inliers after "
                    f"{self.stats['trials']} trials ({self.stats['stop_reason']})")
        return ConsensusResult.from_candidate(best)

    def search(self, estimator: Estimator, data: Sequence,
               pool: np.ndarray) -> Optional[Candidate]:
        """
        Search for the best candidate, sampling only from ``pool``.

        Residuals are evaluated over the full dataset but support only counts
        inliers inside ``pool``. Fewer than ``min_samples`` pool entries yields
        None.
        """
        k = estimator.min_samples
        self.stats = empty_run_stats()
        if len(pool) < k:
            self.stats['stop_reason'] = 'insufficient_pool'
            return None

        pool_mask = None
        if len(pool) != len(data):
            pool_mask = np.zeros(len(data), dtype=bool)
            pool_mask[pool] = True

        stopping = StoppingCriterion(k, self.config.confidence, self.config.max_trials,
                                     self.config.time_budget)
        metrics = PerformanceMetrics()
        metrics.start_timer('search')
        stopping.start()

        best = None
        trials = 0
        while True:
            reason = stopping.stop_reason(trials, best.support if best else 0, len(pool))
            if reason is not None:
                break
            trials += 1
            for candidate in self.trial(estimator, data, pool, pool_mask, trials):
                if candidate.beats(best):
                    best = candidate
                    stopping.update(best.support, len(pool))
                    logger.debug(f"Trial {trials}: new best with {best.support} inliers, "
                                 f"mean residual {best.mean_residual:.4g}, "
                                 f"bound {stopping.bound:.1f}")

        if best is not None and self.config.refine:
            best = self.refine(estimator, data, best, pool_mask)

        self.stats.update({
            'trials': trials,
            'best_support': best.support if best else 0,
            'required_trials': stopping.bound,
            'stop_reason': reason,
            'elapsed_ms': metrics.stop_timer('search'),
        })
        return best

    def trial(self, estimator: Estimator, data: Sequence, pool: np.ndarray,
              pool_mask: Optional[np.ndarray], trial: int) -> List[Candidate]:
        """Sample, estimate and score once; returns candidates with enough support."""
        indices = pool[self.sampler.sample(len(pool), estimator.min_samples)]
        models = list(estimator.estimate(take(data, indices)) or [])

        min_inliers = self.min_inliers(estimator)
        scored = []
        for model in models:
            candidate = self.scorer.score(model, data, pool_mask, trial=trial)
            self.stats['candidates_evaluated'] += 1
            if candidate.support >= min_inliers and candidate.support > 0:
                scored.append(candidate)
        if not models:
            self.stats['degenerate_samples'] += 1
        return scored

    def refine(self, estimator: Estimator, data: Sequence, best: Candidate,
               pool_mask: Optional[np.ndarray] = None) -> Candidate:
        """Refit on the winning inliers, keeping the refit only if support holds."""
        refit = getattr(estimator, "refine", None)
        if refit is None:
            return best

        support = best.inliers if pool_mask is None else best.inliers[pool_mask[best.inliers]]
        model = refit(take(data, support), best.model)
        if model is None:
            return best

        refined = self.scorer.score(model, data, pool_mask, trial=best.trial)
        if refined.support >= best.support:
            logger.debug(f"Refined model: {best.support} -> {refined.support} inliers")
            return refined
        return best

    def min_inliers(self, estimator: Estimator) -> int:
        if self.config.min_inliers is not None:
            return self.config.min_inliers
        return estimator.min_samples

    @property
    def scoring_executor(self) -> Optional[ThreadPoolExecutor]:
        return self._executor

    def open(self) -> 'RANSAC':
        """Start the scoring thread pool if more than one scoring worker is set."""
        if self.scoring_workers > 1 and self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.scoring_workers,
                                                thread_name_prefix='consensus-score')
            self.scorer.executor = self._executor
        return self

    def close(self):
        """Release the scoring thread pool."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
            self.scorer.executor = None

    @contextmanager
    def scoring(self):
        """Scoring pool for one run, shut down afterwards unless the caller opened it."""
        owned = self._executor is None
        self.open()
        try:
            yield self
        finally:
            if owned:
                self.close()

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_stats(self) -> Dict:
        """Statistics of the last run."""
        return self.stats.copy()


def check_data(estimator: Estimator, data: Sequence):
    """Fail fast when ``data`` cannot provide a minimal sample."""
    k = estimator.min_samples
    n = len(data)
    if n < k:
        raise InsufficientDataError(n, k)
    distinct = count_distinct(data)
    if distinct < k:
        raise InsufficientDataError(distinct, k, distinct=True)
