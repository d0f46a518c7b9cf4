"""Planar homography model and four-point estimator."""

import cv2
import numpy as np
from itertools import combinations
from scipy.optimize import least_squares
from typing import List, Optional, Sequence

EPS = 1e-9


def transform_points(points: np.ndarray, H: np.ndarray) -> np.ndarray:
    """Transform points using homography matrix."""
    points_homogeneous = np.hstack([points, np.ones((points.shape[0], 1))])
    transformed = (H @ points_homogeneous.T).T
    with np.errstate(divide='ignore', invalid='ignore'):
        return transformed[:, :2] / transformed[:, 2:]


def _has_collinear_triple(points: np.ndarray) -> bool:
    scale = max(np.abs(points).max(), 1.0)
    for i, j, k in combinations(range(len(points)), 3):
        u = (points[j] - points[i]) / scale
        v = (points[k] - points[i]) / scale
        if abs(u[0] * v[1] - u[1] * v[0]) < EPS:
            return True
    return False


class Homography:
    """
    3x3 projective map between two planes.

    Data points are correspondences ``[x, y, u, v]``: ``(x, y)`` in the source
    plane, ``(u, v)`` its match in the destination plane.
    """

    def __init__(self, H: np.ndarray):
        H = np.asarray(H, dtype=float)
        if H.shape != (3, 3):
            raise ValueError(f"Homography must be 3x3, got {H.shape}")
        if abs(H[2, 2]) > EPS:
            H = H / H[2, 2]
        self.H = H

    def residual(self, point) -> float:
        return float(self.residuals(np.asarray(point, dtype=float).reshape(1, 4))[0])

    def residuals(self, points) -> np.ndarray:
        """Reprojection error of every correspondence."""
        points = np.asarray(points, dtype=float)
        projected = transform_points(points[:, :2], self.H)
        errors = np.linalg.norm(projected - points[:, 2:4], axis=1)
        # Points mapped to infinity can never be inliers
        return np.where(np.isfinite(errors), errors, np.inf)

    def apply(self, points: np.ndarray) -> np.ndarray:
        return transform_points(np.asarray(points, dtype=float), self.H)

    def __repr__(self):
        return f"Homography({np.array2string(self.H, precision=4)})"


class HomographyEstimator:
    """Solves the homography of four correspondences with OpenCV."""

    min_samples = 4

    def __init__(self, max_iters: int = 100):
        self.max_iters = max_iters

    def estimate(self, sample: Sequence) -> List[Homography]:
        points = np.asarray(sample, dtype=float)
        if len(points) < self.min_samples:
            raise ValueError(f"HomographyEstimator needs {self.min_samples} points, got {len(points)}")

        src = points[:4, :2]
        dst = points[:4, 2:4]
        if _has_collinear_triple(src) or _has_collinear_triple(dst):
            return []

        try:
            H = cv2.getPerspectiveTransform(src.astype(np.float32), dst.astype(np.float32))
        except cv2.error:
            return []

        if not np.all(np.isfinite(H)) or abs(np.linalg.det(H)) < EPS:
            return []
        return [Homography(H)]

    def refine(self, points: Sequence, model: Homography) -> Optional[Homography]:
        """Levenberg-Marquardt refinement of the reprojection error."""
        points = np.asarray(points, dtype=float)
        if len(points) < self.min_samples:
            return None
        src_points = points[:, :2]
        dst_points = points[:, 2:4]

        def residuals(params):
            H_opt = np.append(params, 1).reshape(3, 3)
            transformed = transform_points(src_points, H_opt)
            return (transformed - dst_points).flatten()

        h_params = model.H.flatten()[:8]
        result = least_squares(residuals, h_params, method='lm', max_nfev=self.max_iters * 9)
        if not np.all(np.isfinite(result.x)):
            return None
        return Homography(np.append(result.x, 1).reshape(3, 3))
