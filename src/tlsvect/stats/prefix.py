"""
Prefix-sum array of sufficient statistics.

Row i holds the cumulative statistics of points [0, i), row 0 is zero, so
the statistics of any range [a, b) are obtained in constant time as
row[b] - row[a].
"""

import numpy as np

from tlsvect.stats.sums import SufficientStatistics, statistics_width


class PrefixSumArray:
    """
    Reusable buffer of cumulative statistics for one ordered point cloud.

    Storage only grows: precomputing a smaller cloud reuses the existing
    buffer without reallocation.
    """

    def __init__(self, dim, capacity=0):
        self.dim = dim
        self._width = statistics_width(dim)
        self._rows, self._cols = np.triu_indices(dim)
        self._array = np.zeros((capacity + 1, self._width), dtype=np.float64)
        self._size = 1

    @property
    def capacity(self):
        """Number of points the buffer holds without reallocation."""
        return self._array.shape[0] - 1

    @property
    def point_count(self):
        """Number of points of the last precomputed cloud."""
        return self._size - 1

    def __len__(self):
        """Rows in use, including the leading row of zeros."""
        return self._size

    def reserve(self, point_count):
        """Grow the buffer to hold point_count points; never shrinks."""
        if point_count > self.capacity:
            self._array = np.zeros((point_count + 1, self._width), dtype=np.float64)

    def precompute(self, points):
        """Rebuild the cumulative statistics for an n x dim array of points."""
        pts = np.asarray(points, dtype=np.float64)
        n = pts.shape[0]
        self.reserve(n)

        dim = self.dim
        body = self._array[1:n + 1]
        body[:, :dim] = pts
        body[:, dim:-1] = pts[:, self._rows] * pts[:, self._cols]
        body[:, -1] = 1.0
        np.cumsum(body, axis=0, out=body)
        self._array[0].fill(0.0)
        self._size = n + 1

    def row(self, index):
        """Cumulative statistics of points [0, index)."""
        return SufficientStatistics(self.dim, self._array[index].copy())

    def sums(self, begin, end):
        """Statistics of points [begin, end)."""
        return SufficientStatistics(self.dim, self._array[end] - self._array[begin])
