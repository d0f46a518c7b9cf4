"""Result records of consensus searches."""

from dataclasses import dataclass
from typing import Any, Tuple

import numpy as np


@dataclass
class Candidate:
    """A scored candidate model from one trial."""
    model: Any
    inliers: np.ndarray
    support: int
    mean_residual: float
    trial: int = 0

    def beats(self, other: 'Candidate') -> bool:
        """
        Strict ordering: more support, then tighter fit. Exact ties never
        win, so the earliest candidate is kept.
        """
        if other is None:
            return True
        if self.support != other.support:
            return self.support > other.support
        if self.mean_residual != other.mean_residual:
            return self.mean_residual < other.mean_residual
        return self.trial < other.trial


@dataclass
class ConsensusResult:
    """Winning model of a search with the indices supporting it."""
    model: Any
    inliers: np.ndarray
    support: int
    mean_residual: float
    trial: int

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> 'ConsensusResult':
        return cls(
            model=candidate.model,
            inliers=candidate.inliers,
            support=candidate.support,
            mean_residual=candidate.mean_residual,
            trial=candidate.trial,
        )

    def as_pair(self) -> Tuple[Any, np.ndarray]:
        return self.model, self.inliers
