"""2D line model and two-point estimator."""

import numpy as np
from typing import List, Optional, Sequence

EPS = 1e-12


class Line2D:
    """Line ``a*x + b*y + c = 0`` with unit normal ``(a, b)``."""

    def __init__(self, a: float, b: float, c: float):
        norm = np.hypot(a, b)
        if norm < EPS:
            raise ValueError("Line normal must be non-zero")
        self.a = a / norm
        self.b = b / norm
        self.c = c / norm

    @property
    def params(self) -> np.ndarray:
        return np.array([self.a, self.b, self.c])

    def residual(self, point) -> float:
        """Perpendicular distance of a point to the line."""
        return float(abs(self.a * point[0] + self.b * point[1] + self.c))

    def residuals(self, points) -> np.ndarray:
        points = np.asarray(points, dtype=float)
        return np.abs(points[:, 0] * self.a + points[:, 1] * self.b + self.c)

    def y_at(self, x: float) -> float:
        """Ordinate at ``x``; undefined for vertical lines."""
        if abs(self.b) < EPS:
            raise ValueError("Vertical line has no unique y for a given x")
        return -(self.a * x + self.c) / self.b

    def is_close(self, other: 'Line2D', atol: float = 1e-6) -> bool:
        """Same line up to the sign of the parameters."""
        return (np.allclose(self.params, other.params, atol=atol) or
                np.allclose(self.params, -other.params, atol=atol))

    def __repr__(self):
        return f"Line2D(a={self.a:.4f}, b={self.b:.4f}, c={self.c:.4f})"


class LineEstimator:
    """Fits a line through two distinct points."""

    min_samples = 2

    def estimate(self, sample: Sequence) -> List[Line2D]:
        points = np.asarray(sample, dtype=float)
        if len(points) < self.min_samples:
            raise ValueError(f"LineEstimator needs {self.min_samples} points, got {len(points)}")

        p1, p2 = points[0], points[1]
        direction = p2 - p1
        if np.hypot(*direction) < EPS:
            return []
        # Normal is the direction rotated by 90 degrees
        a, b = -direction[1], direction[0]
        c = -(a * p1[0] + b * p1[1])
        return [Line2D(a, b, c)]

    def refine(self, points: Sequence, model: Line2D) -> Optional[Line2D]:
        """Total least-squares line through ``points``."""
        points = np.asarray(points, dtype=float)
        if len(points) < self.min_samples:
            return None
        centroid = points.mean(axis=0)
        _, _, vt = np.linalg.svd(points - centroid)
        normal = vt[-1]
        return Line2D(normal[0], normal[1], -normal @ centroid)
