"""3D plane model and three-point estimator."""

import numpy as np
from typing import List, Optional, Sequence

EPS = 1e-12


class Plane3D:
    """Plane ``n . p + d = 0`` with unit normal ``n``."""

    def __init__(self, normal, d: float):
        normal = np.asarray(normal, dtype=float)
        norm = np.linalg.norm(normal)
        if norm < EPS:
            raise ValueError("Plane normal must be non-zero")
        self.normal = normal / norm
        self.d = float(d) / norm

    def residual(self, point) -> float:
        return float(abs(self.normal @ np.asarray(point, dtype=float) + self.d))

    def residuals(self, points) -> np.ndarray:
        return np.abs(np.asarray(points, dtype=float) @ self.normal + self.d)

    def __repr__(self):
        n = self.normal
        return f"Plane3D(normal=({n[0]:.4f}, {n[1]:.4f}, {n[2]:.4f}), d={self.d:.4f})"


class PlaneEstimator:
    """Fits a plane through three non-collinear points."""

    min_samples = 3

    def estimate(self, sample: Sequence) -> List[Plane3D]:
        points = np.asarray(sample, dtype=float)
        if len(points) < self.min_samples:
            raise ValueError(f"PlaneEstimator needs {self.min_samples} points, got {len(points)}")

        p1, p2, p3 = points[:3]
        normal = np.cross(p2 - p1, p3 - p1)
        if np.linalg.norm(normal) < EPS:
            return []
        return [Plane3D(normal, -normal @ p1)]

    def refine(self, points: Sequence, model: Plane3D) -> Optional[Plane3D]:
        """Least-squares plane through ``points`` (smallest singular vector)."""
        points = np.asarray(points, dtype=float)
        if len(points) < self.min_samples:
            return None
        centroid = points.mean(axis=0)
        _, _, vt = np.linalg.svd(points - centroid)
        normal = vt[-1]
        return Plane3D(normal, -normal @ centroid)
