"""
Continuity repair for 2D line approximations.

Near sharp inflections of the point cloud, two consecutive approximation
lines may intersect far from the points they describe, or not at all.
Such a pair is replaced by three approximations over the thirds of the
pair's combined range, which bridges the inflection. The check restarts
at the first new pair and continues until every pair intersects close to
its shared boundary.
"""

import numpy as np

from tlsvect.models import IndexRange
from tlsvect.optimize.base import Optimizer, require_crossing
from tlsvect.tracer import get_tracer

# shortest combined range that can be split into three valid thirds
MIN_SPLIT_SIZE = 6


class ContinuityOptimizer(Optimizer):
    """
    Splits consecutive lines whose intersection is farther than delta from
    the boundary between their ranges.

    delta should be roughly 3 to 10 times the sigma used for extraction,
    otherwise approximations get split needlessly.
    """

    def __init__(self, approximation, delta=0.0):
        require_crossing(approximation, "ContinuityOptimizer")
        super().__init__(approximation)
        self.set_delta(delta)

    def set_delta(self, delta):
        """Set the maximal distance of an intersection from its boundary."""
        if delta < 0:
            raise ValueError(f"delta must be non-negative, got {delta}")
        self.delta = float(delta)
        self.delta2 = self.delta * self.delta

    def is_continuous(self, points, first, second, boundary):
        """Check that two lines meet within delta of the boundary index."""
        crossing = self.approximation.crossing(first, second)
        if crossing is None:
            return False
        midpoint = (points[boundary - 1] + points[boundary]) * 0.5
        return float(np.sum((crossing - midpoint) ** 2)) <= self.delta2

    def __call__(self, points, prefix, extraction):
        tracer = get_tracer()
        lines = extraction.approximations
        ranges = extraction.ranges
        fit = self.approximation.fit
        pts = np.asarray(points, dtype=np.float64)

        splits = 0
        i = 1
        while i < len(lines):
            if self.is_continuous(pts, lines[i - 1], lines[i], ranges[i].begin):
                i += 1
                continue

            begin = ranges[i - 1].begin
            end = ranges[i].end
            if end - begin < MIN_SPLIT_SIZE:
                tracer.event(
                    f"Cannot bridge inflection between points {begin} and {end}",
                    level="WARN",
                )
                return False

            m1 = (2 * begin + end) // 3
            m2 = (begin + 2 * end) // 3
            lines[i - 1:i + 1] = [
                fit(prefix.sums(begin, m1)),
                fit(prefix.sums(m1, m2)),
                fit(prefix.sums(m2, end)),
            ]
            ranges[i - 1:i + 1] = [
                IndexRange(begin=begin, end=m1),
                IndexRange(begin=m1, end=m2),
                IndexRange(begin=m2, end=end),
            ]
            splits += 1

        if splits:
            tracer.event(f"Continuity repair split {splits} approximation pairs", count=len(lines))
        return True
