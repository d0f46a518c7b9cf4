"""Residual scoring of candidate models."""

from concurrent.futures import Executor
from typing import Any, Optional, Sequence

import numpy as np

from consensus.estimation.base import take
from consensus.search.result import Candidate


class ResidualScorer:
    """
    Classify every data point against a model.

    Residuals are computed through ``model.residuals(points)`` when the model
    offers a batch form, point by point otherwise. Datasets longer than
    ``chunk_size`` are split into index chunks and mapped over ``executor``.
    """

    def __init__(self, threshold: float, precision: str = "float64",
                 chunk_size: int = 4096, executor: Optional[Executor] = None):
        self.threshold = threshold
        self.dtype = np.dtype(precision)
        self.chunk_size = chunk_size
        self.executor = executor

    def _residuals_of(self, model: Any, points: Sequence) -> np.ndarray:
        batch = getattr(model, "residuals", None)
        if batch is not None:
            values = np.asarray(batch(points), dtype=self.dtype)
        else:
            values = np.fromiter((model.residual(p) for p in points),
                                 dtype=self.dtype, count=len(points))
        return values.reshape(-1)

    def residuals(self, model: Any, data: Sequence) -> np.ndarray:
        """Residual of every point in ``data``."""
        n = len(data)
        if self.executor is None or n <= self.chunk_size:
            return self._residuals_of(model, data)

        bounds = range(0, n, self.chunk_size)
        chunks = [np.arange(start, min(start + self.chunk_size, n)) for start in bounds]
        parts = self.executor.map(lambda idx: self._residuals_of(model, take(data, idx)), chunks)
        return np.concatenate(list(parts))

    def score(self, model: Any, data: Sequence,
              pool_mask: Optional[np.ndarray] = None, trial: int = 0) -> Candidate:
        """
        Score ``model`` over the full dataset.

        Args:
            model: Candidate model
            data: Full dataset
            pool_mask: Boolean mask of points that count towards support;
                None counts every point
            trial: Trial number the candidate came from

        Returns:
            Candidate with inliers over the whole dataset
        """
        residuals = self.residuals(model, data)
        inlier_mask = residuals <= self.threshold
        inliers = np.flatnonzero(inlier_mask)

        support_mask = inlier_mask if pool_mask is None else inlier_mask & pool_mask
        support = int(np.count_nonzero(support_mask))
        # numpy sums pairwise, which keeps float32 accumulation error small
        mean_residual = float(residuals[support_mask].mean(dtype=self.dtype)) if support else float("inf")

        return Candidate(model=model, inliers=inliers, support=support,
                         mean_residual=mean_residual, trial=trial)
