"""Sequential multi-model consensus."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from consensus.config import ConsensusConfig, MultiConsensusConfig
from consensus.estimation.base import Estimator
from consensus.search.ransac import RANSAC, check_data
from consensus.search.result import ConsensusResult

logger = logging.getLogger(__name__)


class MultiRANSAC:
    """
    Find several coexisting models in one dataset.

    Each round runs a single-model search whose samples are drawn only from
    points no earlier model has claimed. Residuals are still evaluated over
    every point, so a point may be an inlier of more than one returned model
    (e.g. where two lines cross). A round's support counts unclaimed inliers
    only; rounds continue until support drops below ``min_model_support`` or
    ``max_models`` models were found.
    """

    def __init__(self, config: Optional[ConsensusConfig] = None,
                 multi_config: Optional[MultiConsensusConfig] = None,
                 seed=None, engine: Optional[RANSAC] = None, **overrides):
        self.multi_config = multi_config or MultiConsensusConfig()
        self.engine = engine or RANSAC(config, seed=seed, **overrides)
        self.stats = {'rounds': 0, 'trials': 0, 'models': 0, 'stop_reason': None, 'elapsed_ms': 0.0}

    @classmethod
    def from_config(cls, config: Dict[str, Any], seed=None) -> 'MultiRANSAC':
        return cls(multi_config=MultiConsensusConfig.from_dict(config),
                   engine=RANSAC.from_config(config, seed=seed))

    def min_model_support(self, estimator: Estimator) -> int:
        if self.multi_config.min_model_support is not None:
            return self.multi_config.min_model_support
        return 2 * estimator.min_samples

    def find_models(self, estimator: Estimator, data: Sequence) -> List[Tuple[Any, np.ndarray]]:
        """(model, inlier indices) pairs, strongest first."""
        return [result.as_pair() for result in self.run(estimator, data)]

    def run(self, estimator: Estimator, data: Sequence) -> List[ConsensusResult]:
        """
        Discover models round by round.

        Raises:
            InsufficientDataError: if ``data`` cannot yield a minimal sample
        """
        check_data(estimator, data)
        self.stats = {'rounds': 0, 'trials': 0, 'models': 0, 'stop_reason': None, 'elapsed_ms': 0.0}

        min_support = self.min_model_support(estimator)
        claimed = np.zeros(len(data), dtype=bool)
        results = []
        reason = 'max_models'

        while len(results) < self.multi_config.max_models:
            pool = np.flatnonzero(~claimed)
            if len(pool) < estimator.min_samples:
                reason = 'data_exhausted'
                break

            with self.engine.scoring():
                best = self.engine.search(estimator, data, pool)
            round_stats = self.engine.get_stats()
            self.stats['rounds'] += 1
            self.stats['trials'] += round_stats['trials']
            self.stats['elapsed_ms'] += round_stats['elapsed_ms']

            if best is None:
                reason = 'no_model'
                break
            if best.support < min_support:
                reason = 'min_support'
                logger.debug(f"Round {self.stats['rounds']}: support {best.support} "
                             f"below {min_support}, stopping")
                break

            results.append(ConsensusResult.from_candidate(best))
            claimed[best.inliers] = True
            logger.debug(f"Round {self.stats['rounds']}: model with {best.support} new inliers, "
                         f"{int(np.count_nonzero(~claimed))} points unclaimed")

        self.stats['models'] = len(results)
        self.stats['stop_reason'] = reason
        logger.info(f"Multi-consensus found {len(results)} models in "
                    f"{self.stats['rounds']} rounds ({reason})")

        # sorted() is stable: equal support keeps discovery order
        return sorted(results, key=lambda r: r.support, reverse=True)

    def close(self):
        self.engine.close()

    def __enter__(self):
        self.engine.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_stats(self) -> Dict:
        return self.stats.copy()
