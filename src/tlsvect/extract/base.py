"""
Extraction results and the extractor interface.

An extraction partitions an ordered point cloud into contiguous index
ranges, each with its own fitted approximation.
"""

from abc import ABC, abstractmethod

from tlsvect.models import IndexRange


class Extraction:
    """
    Parallel, ordered lists of approximations and their index ranges.

    Optimizers modify both lists in place; the i-th approximation always
    belongs to the i-th range.
    """

    def __init__(self, approximations=None, ranges=None):
        self.approximations = list(approximations or [])
        self.ranges = list(ranges or [])

    def __len__(self):
        return len(self.ranges)

    def append(self, approximation, begin, end):
        self.approximations.append(approximation)
        self.ranges.append(IndexRange(begin=begin, end=end))

    def breakpoints(self):
        """End indices of all ranges except the last."""
        return [r.end for r in self.ranges[:-1]]

    def total_error(self):
        """Sum of residual variances of all approximations."""
        return float(sum(a.sigma2 for a in self.approximations))

    def covers(self, point_count):
        """
        Check that the ranges partition [0, point_count) without gaps or overlaps.
        """
        if not self.ranges or len(self.ranges) != len(self.approximations):
            return False
        expected = 0
        for r in self.ranges:
            if r.begin != expected or r.end <= r.begin:
                return False
            expected = r.end
        return expected == point_count


def make_room_for_tail(breakpoints, point_count, min_points, valid, first_row=0):
    """
    Move breakpoints back so that the last range gets min_points points.

    Walking backwards from the last breakpoint, each range is first
    shortened at its end. If that leaves it too short or fails
    valid(begin, end), it keeps min_points points and its start moves,
    which hands the problem to the range before it. Ranges starting before
    first_row cannot be checked.

    Returns:
        New breakpoints, or None if no range can make room
    """
    moved = list(breakpoints)
    end = point_count - min_points
    for i in range(len(moved) - 1, -1, -1):
        moved[i] = end
        begin = moved[i - 1] if i else 0
        if begin < first_row:
            return None
        if end - begin >= min_points and valid(begin, end):
            return moved
        end -= min_points
    return None


class Extractor(ABC):
    """
    Interface of extraction stages.

    Extractors that work on the prefix-sum array declare requires_prefix;
    the vectorizer then precomputes the array before calling them.
    """

    requires_prefix = False

    def __init__(self, approximation, sigma=0.0):
        self.approximation = approximation
        self.set_sigma(sigma)

    def set_sigma(self, sigma):
        """Set the maximal permitted standard deviation of point distances."""
        if sigma < 0:
            raise ValueError(f"sigma must be non-negative, got {sigma}")
        self.sigma = float(sigma)
        self.err2 = self.sigma * self.sigma

    @abstractmethod
    def __call__(self, points, prefix=None):
        """
        Extract approximations from an ordered point cloud.

        Returns an Extraction, or None when no approximation can be fitted.
        """
