"""Run timing and trial statistics."""

from time import perf_counter
from typing import Dict


class PerformanceMetrics:
    """Track wall-clock durations of named operations."""

    def __init__(self):
        self.start_times = {}
        self.durations = {}

    def start_timer(self, name: str):
        """Start timing an operation."""
        self.start_times[name] = perf_counter()

    def elapsed(self, name: str) -> float:
        """Seconds since ``name`` was started, 0.0 if never started."""
        if name not in self.start_times:
            return 0.0
        return perf_counter() - self.start_times[name]

    def stop_timer(self, name: str) -> float:
        """Stop timing and return duration in milliseconds."""
        if name not in self.start_times:
            return 0.0
        duration = self.elapsed(name) * 1000
        del self.start_times[name]
        self.durations[name] = duration
        return duration

    def get_summary(self) -> Dict[str, float]:
        """Get summary of all timings."""
        return self.durations.copy()


def empty_run_stats() -> Dict:
    """Statistics record of a single consensus run."""
    return {
        'trials': 0,
        'candidates_evaluated': 0,
        'degenerate_samples': 0,
        'best_support': 0,
        'required_trials': float('inf'),
        'stop_reason': None,
        'elapsed_ms': 0.0,
    }
