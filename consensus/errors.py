"""Exceptions raised by the consensus engines."""


class ConsensusError(Exception):
    """Base class for consensus errors."""


class InsufficientDataError(ConsensusError, ValueError):
    """Dataset cannot provide a minimal sample of distinct points."""

    def __init__(self, n_points: int, min_samples: int, distinct: bool = False):
        self.n_points = n_points
        self.min_samples = min_samples
        kind = "distinct points" if distinct else "points"
        super().__init__(
            f"Need at least {min_samples} {kind} to draw a minimal sample, got {n_points}"
        )


class ConfigurationError(ConsensusError, ValueError):
    """Invalid engine configuration."""
