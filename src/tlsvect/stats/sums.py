"""
Sufficient statistics of an ordered point range.

A constant-size summary (coordinate sums, coordinate product sums and the
point count) from which total least squares fits are computed without
revisiting individual points. Statistics of adjacent ranges add up, and
statistics of a sub-range are removed by subtraction.
"""

import numpy as np


def statistics_width(dim):
    """Length of the flat statistics vector for points of given dimension."""
    return dim + dim * (dim + 1) // 2 + 1


def product_pairs(dim):
    """Axis index pairs (i, j), i <= j, in storage order of the product sums."""
    rows, cols = np.triu_indices(dim)
    return list(zip(rows.tolist(), cols.tolist()))


class SufficientStatistics:
    """
    Sums of coordinates, coordinate products and count over a point range.

    Layout of the flat vector: dim coordinate sums, then the upper triangle
    of coordinate product sums (row-major), then the point count.
    """

    __slots__ = ("dim", "sums")

    def __init__(self, dim, sums=None):
        self.dim = dim
        if sums is None:
            sums = np.zeros(statistics_width(dim), dtype=np.float64)
        self.sums = sums

    @classmethod
    def zeros(cls, dim):
        return cls(dim)

    @classmethod
    def from_point(cls, point):
        """Statistics of a single point."""
        p = np.asarray(point, dtype=np.float64).reshape(-1)
        dim = p.shape[0]
        rows, cols = np.triu_indices(dim)
        sums = np.empty(statistics_width(dim), dtype=np.float64)
        sums[:dim] = p
        sums[dim:-1] = p[rows] * p[cols]
        sums[-1] = 1.0
        return cls(dim, sums)

    @classmethod
    def from_points(cls, points):
        """Statistics of a whole array of points (shape n x dim)."""
        pts = np.asarray(points, dtype=np.float64)
        dim = pts.shape[1]
        rows, cols = np.triu_indices(dim)
        sums = np.empty(statistics_width(dim), dtype=np.float64)
        sums[:dim] = pts.sum(axis=0)
        sums[dim:-1] = (pts[:, rows] * pts[:, cols]).sum(axis=0)
        sums[-1] = float(pts.shape[0])
        return cls(dim, sums)

    @property
    def count(self):
        return float(self.sums[-1])

    def copy(self):
        return SufficientStatistics(self.dim, self.sums.copy())

    def __add__(self, other):
        return SufficientStatistics(self.dim, self.sums + other.sums)

    def __iadd__(self, other):
        self.sums += other.sums
        return self

    def __sub__(self, other):
        return SufficientStatistics(self.dim, self.sums - other.sums)

    def __isub__(self, other):
        self.sums -= other.sums
        return self

    def isclose(self, other, rtol=1e-9, atol=1e-9):
        """Element-wise comparison within floating point tolerance."""
        return self.dim == other.dim and bool(np.allclose(self.sums, other.sums, rtol=rtol, atol=atol))

    def average(self):
        """
        Return a copy with every sum divided by the point count.

        The result holds means and second moments; it no longer adds or
        subtracts like range statistics and is meant for fitting only.
        """
        return SufficientStatistics(self.dim, self.sums / self.sums[-1])

    def mean(self):
        """Centroid of the summarized points."""
        return self.sums[:self.dim] / self.sums[-1]

    def scatter(self):
        """Centered second moment (covariance) matrix, normalized by count."""
        dim = self.dim
        averaged = self.average().sums
        mean = averaged[:dim]
        rows, cols = np.triu_indices(dim)
        moments = np.empty((dim, dim), dtype=np.float64)
        moments[rows, cols] = averaged[dim:-1]
        moments[cols, rows] = moments[rows, cols]
        return moments - np.outer(mean, mean)

    def __repr__(self):
        return f"SufficientStatistics(dim={self.dim}, count={self.count:g})"
