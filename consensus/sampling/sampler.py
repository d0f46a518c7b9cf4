"""Random minimal-sample selection."""

from typing import List, Optional, Protocol, Union

import numpy as np

from consensus.errors import InsufficientDataError

SeedLike = Union[None, int, np.random.SeedSequence]


class Sampler(Protocol):
    """Source of distinct random indices."""

    def sample(self, n: int, k: int) -> np.ndarray:
        """Draw ``k`` distinct indices uniformly from ``[0, n)``."""
        ...


class UniformSampler:
    """
    Uniform sampling without replacement on a private numpy Generator.

    A sampler is owned by exactly one engine; concurrent engines get their
    own streams through ``spawn``.
    """

    def __init__(self, seed: SeedLike = None):
        if isinstance(seed, np.random.SeedSequence):
            self.seed_sequence = seed
        else:
            self.seed_sequence = np.random.SeedSequence(seed)
        self.rng = np.random.default_rng(self.seed_sequence)

    def sample(self, n: int, k: int) -> np.ndarray:
        if k > n:
            raise InsufficientDataError(n, k)
        return self.rng.choice(n, size=k, replace=False)

    def sample_from(self, pool: np.ndarray, k: int) -> np.ndarray:
        """Draw ``k`` distinct entries of the index array ``pool``."""
        return pool[self.sample(len(pool), k)]

    def spawn(self, count: int) -> List['UniformSampler']:
        """Independent child samplers derived from this sampler's seed."""
        return [UniformSampler(child) for child in self.seed_sequence.spawn(count)]


def make_sampler(seed: Optional[Union[SeedLike, Sampler]] = None) -> Sampler:
    """Wrap a seed into a UniformSampler, pass samplers through."""
    if hasattr(seed, "sample"):
        return seed
    return UniformSampler(seed)
