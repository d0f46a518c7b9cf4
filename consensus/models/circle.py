"""2D circle model and three-point estimator."""

import numpy as np
from scipy.optimize import least_squares
from typing import List, Optional, Sequence

EPS = 1e-9


class Circle2D:
    """Circle with center ``(cx, cy)`` and radius ``r``."""

    def __init__(self, cx: float, cy: float, r: float):
        self.center = np.array([cx, cy], dtype=float)
        self.radius = float(r)

    def residual(self, point) -> float:
        """Distance of a point to the circumference."""
        return float(abs(np.hypot(point[0] - self.center[0], point[1] - self.center[1]) - self.radius))

    def residuals(self, points) -> np.ndarray:
        points = np.asarray(points, dtype=float)
        return np.abs(np.linalg.norm(points - self.center, axis=1) - self.radius)

    def __repr__(self):
        return f"Circle2D(center=({self.center[0]:.4f}, {self.center[1]:.4f}), r={self.radius:.4f})"


class CircleEstimator:
    """Fits the circumcircle of three non-collinear points."""

    min_samples = 3

    def __init__(self, max_iters: int = 100):
        self.max_iters = max_iters

    def estimate(self, sample: Sequence) -> List[Circle2D]:
        points = np.asarray(sample, dtype=float)
        if len(points) < self.min_samples:
            raise ValueError(f"CircleEstimator needs {self.min_samples} points, got {len(points)}")

        p1, p2, p3 = points[:3]
        A = np.array([p2 - p1, p3 - p1])
        scale = max(np.abs(A).max(), EPS)
        if abs(np.linalg.det(A / scale)) < EPS:
            # Collinear or repeated points
            return []
        b = np.array([p2 @ p2 - p1 @ p1, p3 @ p3 - p1 @ p1]) / 2
        center = np.linalg.solve(A, b)
        return [Circle2D(center[0], center[1], np.linalg.norm(center - p1))]

    def refine(self, points: Sequence, model: Circle2D) -> Optional[Circle2D]:
        """Geometric least-squares fit seeded with ``model``."""
        points = np.asarray(points, dtype=float)
        if len(points) < self.min_samples:
            return None

        def residuals(params):
            return np.linalg.norm(points - params[:2], axis=1) - params[2]

        x0 = np.array([model.center[0], model.center[1], model.radius])
        result = least_squares(residuals, x0, method='lm', max_nfev=self.max_iters)
        if not result.success or not np.all(np.isfinite(result.x)):
            return None
        cx, cy, r = result.x
        return Circle2D(cx, cy, abs(r))
