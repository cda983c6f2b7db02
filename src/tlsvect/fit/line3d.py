"""
Total least squares line fitting in 3D.
"""

import numpy as np

from tlsvect.fit.base import TlsLine, symmetric_eigen, symmetric_eigenvalues


class TlsLine3D(TlsLine):
    """Line in space through the centroid along the principal axis."""

    DIMENSION = 3
    MIN_POINTS = 2

    @classmethod
    def fit(cls, stats):
        values, vectors = symmetric_eigen(stats)
        direction = vectors[:, 2]
        if not np.any(values):
            direction = np.array([1.0, 0.0, 0.0])
        return cls(
            direction=direction,
            anchor=stats.mean(),
            sigma2=values[0] + values[1],
        )

    @staticmethod
    def error_squared(stats):
        values = symmetric_eigenvalues(stats)
        return float(values[0] + values[1])
