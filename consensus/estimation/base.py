"""
Collaborator contracts for the consensus engines.

The engines never inspect models or data points directly. They rely on three
structural interfaces:

- Model: scores a single data point with a non-negative residual
- Estimator: turns a minimal sample into zero or more candidate models
- Consensus: finds the model best supported by a whole dataset

Any object with the right attributes satisfies these protocols, no
inheritance is required.
"""

from typing import Any, Iterable, Optional, Protocol, Sequence, TypeVar, runtime_checkable

import numpy as np

M = TypeVar("M")


@runtime_checkable
class Model(Protocol):
    """A fitted hypothesis."""

    def residual(self, point: Any) -> float:
        """
        Residual error of ``point`` against this model.

        Must be pure and non-negative; lower means better agreement. Models may
        additionally provide ``residuals(points) -> np.ndarray`` computing the
        same values for a batch of points, which the scorer prefers.
        """
        ...


@runtime_checkable
class Estimator(Protocol[M]):
    """Produces candidate models from minimal samples."""

    # Smallest sample the estimator can fit a model from
    min_samples: int

    def estimate(self, sample: Sequence) -> Iterable[M]:
        """
        Fit candidate models to ``sample``.

        ``sample`` holds at least ``min_samples`` points; fewer is a programming
        error. An empty result marks a degenerate sample (collinear points,
        undefined numerics, ...) and is not a failure. A minimal sample with
        several algebraic solutions yields several models.
        """
        ...


class Consensus(Protocol[M]):
    """Extracts a consensus model from a dataset."""

    def estimate(self, estimator: Estimator[M], data: Sequence) -> Optional[M]:
        ...


def take(data: Sequence, indices: np.ndarray) -> Sequence:
    """Select ``indices`` from an array or an indexable sequence."""
    if isinstance(data, np.ndarray):
        return data[indices]
    return [data[i] for i in indices]


def count_distinct(data: Sequence) -> int:
    """Number of distinct points, or ``len(data)`` when points are unhashable."""
    if isinstance(data, np.ndarray):
        if data.ndim == 1:
            return len(np.unique(data))
        return len(np.unique(data.reshape(len(data), -1), axis=0))
    try:
        return len(set(data))
    except TypeError:
        return len(data)
