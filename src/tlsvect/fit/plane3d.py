"""
Total least squares plane fitting in 3D.
"""

import numpy as np

from tlsvect.fit.base import TlsApproximation, symmetric_eigen, symmetric_eigenvalues
from tlsvect.models import Polygon


class TlsPlane3D(TlsApproximation):
    """
    Plane normal . x = offset through the centroid of the fitted points.

    The normal is the eigenvector of the smallest scatter eigenvalue, which
    is also the residual variance.
    """

    DIMENSION = 3
    MIN_POINTS = 3

    def __init__(self, normal, offset, sigma2):
        self.normal = np.asarray(normal, dtype=np.float64)
        self.offset = float(offset)
        self.sigma2 = float(sigma2)

    @classmethod
    def fit(cls, stats):
        values, vectors = symmetric_eigen(stats)
        normal = vectors[:, 0]
        if not np.any(values):
            normal = np.array([0.0, 0.0, 1.0])
        return cls(
            normal=normal,
            offset=np.dot(stats.mean(), normal),
            sigma2=values[0],
        )

    @staticmethod
    def error_squared(stats):
        return float(symmetric_eigenvalues(stats)[0])

    def project(self, point):
        p = np.asarray(point, dtype=np.float64)
        return p - (np.dot(p, self.normal) - self.offset) * self.normal

    def distance(self, point):
        """Signed distance of a point from the plane."""
        return float(np.dot(np.asarray(point, dtype=np.float64), self.normal) - self.offset)

    def trim(self, points):
        """Polygon outlined by the projections of all points of the range."""
        pts = np.asarray(points, dtype=np.float64)
        projected = pts - np.outer(pts @ self.normal - self.offset, self.normal)
        return Polygon(
            normal=self.normal.tolist(),
            offset=self.offset,
            points=projected.tolist(),
        )

    def __repr__(self):
        return (
            f"TlsPlane3D(normal={self.normal.round(6).tolist()}, "
            f"offset={self.offset:.6g}, sigma2={self.sigma2:.3g})"
        )
