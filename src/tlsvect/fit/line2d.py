"""
Total least squares line fitting in 2D.

The 2x2 scatter matrix is solved in closed form from its characteristic
polynomial: with t = trace / 2 and D = sqrt(t^2 - det), the eigenvalues
are t - D (residual variance) and t + D (variance along the line).
"""

import math

import numpy as np

from tlsvect.fit.base import TlsLine

# |sin| of the angle between two lines below which they count as parallel
PARALLEL_TOLERANCE = 1e-12


def _scatter_terms(stats):
    """Centered second moments (sxx, sxy, syy) and the centroid."""
    averaged = stats.average().sums
    mx, my = averaged[0], averaged[1]
    # storage order of products in 2D: xx, xy, yy
    sxx = averaged[2] - mx * mx
    sxy = averaged[3] - mx * my
    syy = averaged[4] - my * my
    return sxx, sxy, syy, mx, my


def _eigenvalues(sxx, sxy, syy):
    trace_half = (sxx + syy) * 0.5
    discriminant = trace_half * trace_half - sxx * syy + sxy * sxy
    root = math.sqrt(discriminant) if discriminant > 0.0 else 0.0
    return max(trace_half - root, 0.0), trace_half + root


class TlsLine2D(TlsLine):
    """
    Line in the plane, also expressed as a*x + b*y + c = 0.

    The normal (a, b) is the direction rotated by 90 degrees
    counter-clockwise.
    """

    DIMENSION = 2
    MIN_POINTS = 2

    @classmethod
    def fit(cls, stats):
        sxx, sxy, syy, mx, my = _scatter_terms(stats)
        sigma2, _ = _eigenvalues(sxx, sxy, syy)

        # (S - sigma2 * I) has rank one and its columns span the principal
        # axis; take the better conditioned column
        if sxx >= syy:
            dx, dy = sxx - sigma2, sxy
        else:
            dx, dy = sxy, syy - sigma2
        norm = math.hypot(dx, dy)
        if norm == 0.0:
            dx, dy, norm = 1.0, 0.0, 1.0

        return cls(
            direction=np.array([dx / norm, dy / norm]),
            anchor=np.array([mx, my]),
            sigma2=sigma2,
        )

    @staticmethod
    def error_squared(stats):
        sxx, sxy, syy, _, _ = _scatter_terms(stats)
        return _eigenvalues(sxx, sxy, syy)[0]

    @property
    def normal(self):
        return np.array([-self.direction[1], self.direction[0]])

    @property
    def a(self):
        return float(-self.direction[1])

    @property
    def b(self):
        return float(self.direction[0])

    @property
    def c(self):
        return float(-np.dot(self.normal, self.anchor))

    def project(self, point):
        p = np.asarray(point, dtype=np.float64)
        n = self.normal
        return p - n * (np.dot(n, p) + self.c)

    @staticmethod
    def crossing(first, second):
        """
        Intersection point of two lines, or None if they are parallel.
        """
        a1, b1, c1 = first.a, first.b, first.c
        a2, b2, c2 = second.a, second.b, second.c
        det = a1 * b2 - b1 * a2
        if abs(det) <= PARALLEL_TOLERANCE:
            return None
        x = (b1 * c2 - c1 * b2) / det
        y = (a2 * c1 - a1 * c2) / det
        return np.array([x, y])
