"""Adaptive stopping rule for random sample consensus."""

import math
import time
from typing import Optional

# Stop reasons reported in run statistics
CONFIDENCE = "confidence"
MAX_TRIALS = "max_trials"
ALL_INLIERS = "all_inliers"
TIME_BUDGET = "time_budget"
EXHAUSTED = "exhausted"


def validate_confidence(confidence: float) -> float:
    """Return ``confidence`` if it lies strictly inside (0, 1)."""
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must be in (0, 1), got {confidence}")
    return float(confidence)


def required_trials(inlier_ratio: float, min_samples: int, confidence: float) -> float:
    """
    Number of trials needed so that, with probability ``confidence``, at
    least one minimal sample was drawn entirely from inliers.

    With w = inlier_ratio and s = min_samples a sample is outlier-free with
    probability w^s, so k trials all fail with probability (1 - w^s)^k.
    Requiring that to be at most 1 - p gives

        k >= log(1 - p) / log(1 - w^s)

    Returns ``inf`` when no inliers are known and 1 when every point is an
    inlier. The value is not rounded.
    """
    if min_samples < 1:
        raise ValueError("min_samples must be >= 1")
    validate_confidence(confidence)

    if inlier_ratio >= 1.0:
        return 1.0
    if inlier_ratio <= 0.0:
        return math.inf

    p_good = inlier_ratio ** min_samples
    if p_good <= 0.0:
        return math.inf
    denominator = math.log1p(-p_good)
    if denominator == 0.0:
        return math.inf
    return max(1.0, math.log1p(-confidence) / denominator)


class StoppingCriterion:
    """Decides after each trial whether the search may end."""

    def __init__(self, min_samples: int, confidence: float = 0.99,
                 max_trials: int = 1000, time_budget: Optional[float] = None):
        self.min_samples = min_samples
        self.confidence = validate_confidence(confidence)
        self.max_trials = max_trials
        self.time_budget = time_budget
        self.deadline = None
        self.bound = math.inf

    def start(self):
        """Reset the adaptive bound and arm the wall-clock deadline."""
        self.bound = math.inf
        self.deadline = None
        if self.time_budget is not None:
            self.deadline = time.monotonic() + self.time_budget

    def update(self, best_support: int, pool_size: int) -> float:
        """Recompute the trial bound from the best support seen so far."""
        ratio = best_support / pool_size if pool_size else 0.0
        self.bound = required_trials(min(ratio, 1.0), self.min_samples, self.confidence)
        return self.bound

    def stop_reason(self, trials: int, best_support: int, pool_size: int) -> Optional[str]:
        """Reason to stop before the next trial, or None to continue."""
        if pool_size and best_support >= pool_size:
            return ALL_INLIERS
        if trials >= self.max_trials:
            return MAX_TRIALS
        if math.isfinite(self.bound) and trials >= math.ceil(self.bound):
            return CONFIDENCE
        # Only one distinct minimal sample exists
        if pool_size == self.min_samples and trials >= 1:
            return EXHAUSTED
        if self.deadline is not None and time.monotonic() >= self.deadline:
            return TIME_BUDGET
        return None

    def should_stop(self, trials: int, best_support: int, pool_size: int) -> bool:
        return self.stop_reason(trials, best_support, pool_size) is not None
