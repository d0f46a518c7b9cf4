"""Basic usage example: robust line fit with outliers."""

import numpy as np
from consensus.models.line import LineEstimator
from consensus.search.ransac import RANSAC


def main():
    """Fit a line to noisy points with gross outliers."""
    rng = np.random.default_rng(0)
    x = np.linspace(0, 10, 100)
    y = 2 * x + 1 + rng.normal(0, 0.3, 100)

    # Corrupt a fifth of the points
    bad = rng.choice(100, 20, replace=False)
    y[bad] = rng.uniform(-30, 30, 20)
    data = np.column_stack([x, y])

    print("Running RANSAC...")
    ransac = RANSAC(inlier_threshold=1.0, confidence=0.99, seed=42, refine=True)
    result = ransac.run(LineEstimator(), data)

    if result is None:
        print("No consensus found")
        return

    stats = ransac.get_stats()
    print(f"Model: {result.model}")
    print(f"Inliers: {result.support}/{len(data)}")
    print(f"Trials: {stats['trials']} (stopped by {stats['stop_reason']})")
    print(f"y(5) = {result.model.y_at(5.0):.3f}")


if __name__ == "__main__":
    main()
