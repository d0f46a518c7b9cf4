"""Tests for the reference models and estimators."""

import pytest
import numpy as np
from consensus.estimation.base import Estimator, Model
from consensus.models.line import Line2D, LineEstimator
from consensus.models.circle import Circle2D, CircleEstimator
from consensus.models.plane import Plane3D, PlaneEstimator
from consensus.models.homography import Homography, HomographyEstimator, transform_points
from consensus.search.ransac import RANSAC


class TestLine:
    """Test line model and estimator."""

    def test_line_through_two_points(self):
        """Test the fitted line passes through both points."""
        (line,) = LineEstimator().estimate(np.array([[0, 1], [2, 5]], dtype=float))
        assert line.residual([0, 1]) == pytest.approx(0.0, abs=1e-12)
        assert line.residual([2, 5]) == pytest.approx(0.0, abs=1e-12)
        assert line.y_at(1.0) == pytest.approx(3.0)

    def test_perpendicular_distance(self):
        """Test residual is the perpendicular distance."""
        line = Line2D(1, -1, 0)
        assert line.residual([1, 0]) == pytest.approx(np.sqrt(0.5))
        np.testing.assert_allclose(line.residuals(np.array([[1, 0], [2, 2]])), [np.sqrt(0.5), 0.0])

    def test_coincident_points_are_degenerate(self):
        """Test a repeated point gives no model."""
        assert LineEstimator().estimate(np.array([[1, 1], [1, 1]], dtype=float)) == []

    def test_too_few_points(self):
        """Test the estimator rejects undersized samples."""
        with pytest.raises(ValueError):
            LineEstimator().estimate(np.array([[1, 1]], dtype=float))

    def test_refine_total_least_squares(self):
        """Test refinement recovers a noisy line."""
        rng = np.random.default_rng(0)
        x = np.linspace(0, 10, 200)
        points = np.column_stack([x, 0.5 * x + 2 + rng.normal(0, 0.05, 200)])
        refined = LineEstimator().refine(points, Line2D(0, 1, 0))
        assert refined.y_at(4.0) == pytest.approx(4.0, abs=0.05)

    def test_vertical_line(self):
        """Test vertical lines have no y_at."""
        (line,) = LineEstimator().estimate(np.array([[3, 0], [3, 5]], dtype=float))
        assert line.residual([5, 100]) == pytest.approx(2.0)
        with pytest.raises(ValueError):
            line.y_at(3.0)

    def test_zero_normal_rejected(self):
        with pytest.raises(ValueError):
            Line2D(0, 0, 1)


class TestCircle:
    """Test circle model and estimator."""

    def test_circumcircle(self):
        """Test circle through three points."""
        (circle,) = CircleEstimator().estimate(np.array([[0, 1], [1, 0], [-1, 0]], dtype=float))
        np.testing.assert_allclose(circle.center, [0, 0], atol=1e-12)
        assert circle.radius == pytest.approx(1.0)

    def test_collinear_is_degenerate(self):
        """Test collinear points give no circle."""
        assert CircleEstimator().estimate(np.array([[0, 0], [1, 1], [2, 2]], dtype=float)) == []

    def test_residual(self):
        circle = Circle2D(0, 0, 2)
        assert circle.residual([3, 0]) == pytest.approx(1.0)
        np.testing.assert_allclose(circle.residuals(np.array([[0, 1], [0, 2]])), [1.0, 0.0])

    def test_refine(self):
        """Test least-squares refinement from a rough start."""
        rng = np.random.default_rng(1)
        theta = rng.uniform(0, 2 * np.pi, 100)
        points = np.column_stack([2 + 4 * np.cos(theta), -1 + 4 * np.sin(theta)])
        points += rng.normal(0, 0.02, points.shape)

        refined = CircleEstimator().refine(points, Circle2D(2.3, -0.8, 3.5))
        np.testing.assert_allclose(refined.center, [2, -1], atol=0.02)
        assert refined.radius == pytest.approx(4.0, abs=0.02)


class TestPlane:
    """Test plane model and estimator."""

    def test_plane_through_points(self):
        (plane,) = PlaneEstimator().estimate(np.array([[0, 0, 1], [1, 0, 1], [0, 1, 1]], dtype=float))
        np.testing.assert_allclose(np.abs(plane.normal), [0, 0, 1])
        assert plane.residual([5, 5, 3]) == pytest.approx(2.0)

    def test_collinear_is_degenerate(self):
        sample = np.array([[0, 0, 0], [1, 1, 1], [2, 2, 2]], dtype=float)
        assert PlaneEstimator().estimate(sample) == []

    def test_refine(self):
        rng = np.random.default_rng(2)
        xy = rng.uniform(-5, 5, (100, 2))
        points = np.column_stack([xy, 0.1 * xy[:, 0] + rng.normal(0, 0.01, 100)])
        refined = PlaneEstimator().refine(points, Plane3D([0, 0, 1], 0))
        assert np.max(refined.residuals(points)) < 0.05


class TestHomography:
    """Test homography model and estimator."""

    H_TRUE = np.array([[1.1, 0.05, 3.0],
                       [0.02, 0.95, -2.0],
                       [1e-4, 2e-4, 1.0]])

    def correspondences(self, src):
        return np.hstack([src, transform_points(src, self.H_TRUE)])

    def test_four_point_solution(self):
        """Test exact correspondences recover the homography."""
        src = np.array([[0, 0], [100, 0], [100, 100], [0, 100]], dtype=float)
        (model,) = HomographyEstimator().estimate(self.correspondences(src))
        np.testing.assert_allclose(model.H, self.H_TRUE, rtol=1e-3, atol=1e-3)
        assert np.max(model.residuals(self.correspondences(src))) < 0.05

    def test_collinear_is_degenerate(self):
        """Test three collinear source points give no model."""
        src = np.array([[0, 0], [50, 50], [100, 100], [0, 100]], dtype=float)
        assert HomographyEstimator().estimate(self.correspondences(src)) == []

    def test_residual_of_single_point(self):
        model = Homography(np.eye(3))
        assert model.residual([1, 2, 4, 6]) == pytest.approx(5.0)

    def test_robust_fit_with_outliers(self):
        """Test RANSAC recovers the homography from contaminated matches."""
        rng = np.random.default_rng(3)
        src = rng.uniform(0, 200, (60, 2))
        data = self.correspondences(src)
        data[:15, 2:] = rng.uniform(0, 200, (15, 2))

        ransac = RANSAC(inlier_threshold=0.5, confidence=0.999, seed=0, refine=True)
        model, inliers = ransac.find_model_with_inliers(HomographyEstimator(), data)

        assert set(range(15, 60)) <= set(inliers.tolist())
        assert len(inliers) <= 47
        check = np.array([[50.0, 50.0], [150.0, 20.0]])
        np.testing.assert_allclose(model.apply(check), transform_points(check, self.H_TRUE), atol=0.1)


class TestContracts:
    """Test reference collaborators satisfy the structural contracts."""

    def test_models_are_models(self):
        for model in (Line2D(1, 0, 0), Circle2D(0, 0, 1), Plane3D([0, 0, 1], 0), Homography(np.eye(3))):
            assert isinstance(model, Model)

    def test_estimators_are_estimators(self):
        for estimator in (LineEstimator(), CircleEstimator(), PlaneEstimator(), HomographyEstimator()):
            assert isinstance(estimator, Estimator)
            assert estimator.min_samples >= 2
