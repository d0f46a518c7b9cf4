"""Reference models and estimators for common fitting problems."""

from .line import Line2D, LineEstimator
from .circle import Circle2D, CircleEstimator
from .plane import Plane3D, PlaneEstimator
from .homography import Homography, HomographyEstimator

__all__ = [
    'Line2D', 'LineEstimator',
    'Circle2D', 'CircleEstimator',
    'Plane3D', 'PlaneEstimator',
    'Homography', 'HomographyEstimator',
]
