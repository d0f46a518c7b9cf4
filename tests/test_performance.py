"""Performance tests."""

import time

import pytest
import numpy as np
from consensus.models.line import LineEstimator
from consensus.search.ransac import RANSAC
from consensus.utils.metrics import PerformanceMetrics


def large_line_data(n=100_000, seed=0):
    rng = np.random.default_rng(seed)
    x = rng.uniform(-100, 100, n)
    y = 0.5 * x - 3 + rng.normal(0, 0.2, n)
    outliers = rng.random(n) < 0.3
    y[outliers] = rng.uniform(-200, 200, outliers.sum())
    return np.column_stack([x, y])


class TestPerformance:
    """Test performance benchmarks."""

    def test_large_dataset_speed(self):
        """Test a search over 100k points."""
        data = large_line_data()
        ransac = RANSAC(inlier_threshold=1.0, seed=0)

        start = time.time()
        result = ransac.run(LineEstimator(), data)
        duration = (time.time() - start) * 1000

        assert result.support > 0.6 * len(data)
        assert duration < 5000  # Should complete in under 5 seconds

    def test_chunked_scoring_speed(self):
        """Test threaded chunk scoring on a large dataset."""
        data = large_line_data(seed=1)
        with RANSAC(inlier_threshold=1.0, seed=0, scoring_workers=4,
                    scoring_chunk_size=20_000) as ransac:
            start = time.time()
            result = ransac.run(LineEstimator(), data)
            duration = (time.time() - start) * 1000

        assert result.support > 0.6 * len(data)
        assert duration < 5000

    def test_performance_metrics(self):
        """Test performance metrics tracking."""
        metrics = PerformanceMetrics()

        metrics.start_timer('test_operation')
        time.sleep(0.1)
        duration = metrics.stop_timer('test_operation')

        assert 90 < duration < 250  # Should be around 100ms

        summary = metrics.get_summary()
        assert 'test_operation' in summary
        assert metrics.stop_timer('never_started') == 0.0
