"""
Common interface of total least squares approximations.

Every approximation type is a pure function of one SufficientStatistics
snapshot: fit() builds the primitive, error_squared() computes only its
residual variance, and trim() bounds the infinite primitive to an output
shape using the raw points of its range.
"""

from abc import ABC, abstractmethod

import numpy as np

from tlsvect.models import LineSegment


class TlsApproximation(ABC):
    """Abstract trait shared by line and plane approximations."""

    DIMENSION = 0
    MIN_POINTS = 2

    sigma2 = 0.0

    @classmethod
    @abstractmethod
    def fit(cls, stats):
        """Fit the primitive to given statistics and return a new instance."""

    @staticmethod
    @abstractmethod
    def error_squared(stats):
        """Residual variance of the best fit, without building the primitive."""

    @abstractmethod
    def project(self, point):
        """Orthogonal projection of a point onto the primitive."""

    @abstractmethod
    def trim(self, points):
        """Bound the primitive by the points of its range."""

    @property
    def error(self):
        """Standard deviation of point distances from the primitive."""
        return float(np.sqrt(self.sigma2))


class TlsLine(TlsApproximation):
    """
    Line through an anchor point along a unit direction, in any dimension.

    Subclasses fix DIMENSION and implement fit() and error_squared().
    """

    def __init__(self, direction, anchor, sigma2):
        self.direction = np.asarray(direction, dtype=np.float64)
        self.anchor = np.asarray(anchor, dtype=np.float64)
        self.sigma2 = float(sigma2)

    def project(self, point):
        offset = np.asarray(point, dtype=np.float64) - self.anchor
        return self.anchor + np.dot(offset, self.direction) * self.direction

    def distance(self, point):
        """Orthogonal distance of a point from the line."""
        p = np.asarray(point, dtype=np.float64)
        return float(np.linalg.norm(p - self.project(p)))

    def trim(self, points):
        """Line segment between projections of the first and last point."""
        return LineSegment(
            start=self.project(points[0]).tolist(),
            end=self.project(points[-1]).tolist(),
        )

    def __repr__(self):
        return (
            f"{type(self).__name__}(direction={self.direction.round(6).tolist()}, "
            f"anchor={self.anchor.round(6).tolist()}, sigma2={self.sigma2:.3g})"
        )


def symmetric_eigen(stats):
    """
    Eigen-decomposition of the scatter matrix of given statistics.

    Returns eigenvalues in ascending order (negative round-off clamped to
    zero) and the matching unit eigenvectors as columns.
    """
    values, vectors = np.linalg.eigh(stats.scatter())
    return np.maximum(values, 0.0), vectors


def symmetric_eigenvalues(stats):
    """Ascending, non-negative eigenvalues of the scatter matrix."""
    return np.maximum(np.linalg.eigvalsh(stats.scatter()), 0.0)
