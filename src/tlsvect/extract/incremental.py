"""
Incremental extraction of approximations from a point stream.

Points are added one at a time to the running statistics; the current
range is closed as soon as the next point would push the residual
variance over the threshold. Single pass, no prefix array, no
backtracking, but the error is recomputed for every point.

Cumulative statistics are kept only for the most recent ranges, enough
to give a short trailing range its minimal number of points.
"""

from collections import deque

import numpy as np

from tlsvect.extract.base import Extraction, Extractor, make_room_for_tail
from tlsvect.models import index_ranges_from_breakpoints
from tlsvect.stats.sums import SufficientStatistics
from tlsvect.tracer import get_tracer


class IncrementalExtractor(Extractor):
    """Greedy streaming extractor; accepts any iterable of points."""

    requires_prefix = False

    # closed ranges whose cumulative statistics stay available for the tail
    TAIL_HISTORY = 32

    def __call__(self, points, prefix=None):
        tracer = get_tracer()
        approximation = self.approximation
        min_points = approximation.MIN_POINTS

        extraction = Extraction()
        current = None
        total = None
        begin = 0
        index = 0
        # rows[j] holds the statistics of points [0, first_row + j)
        rows = deque()
        first_row = 0

        for point in points:
            point_stats = SufficientStatistics.from_point(np.asarray(point, dtype=np.float64))

            if current is None:
                current = point_stats.copy()
                total = SufficientStatistics.zeros(point_stats.dim)
                rows.append(total.copy())
            else:
                candidate = current + point_stats
                if index - begin < min_points or approximation.error_squared(candidate) < self.err2:
                    current = candidate
                else:
                    extraction.append(approximation.fit(current), begin, index)
                    current = point_stats.copy()
                    begin = index
                    first_row = self._forget(rows, first_row, extraction)

            total += point_stats
            rows.append(total.copy())
            index += 1

        if current is None or index < min_points:
            tracer.event(f"Too few points to fit: {index} < {min_points}", level="WARN")
            return None

        tail = "none"
        if index - begin >= min_points:
            extraction.append(approximation.fit(current), begin, index)
        else:
            tail = self._fix_short_tail(extraction, rows, first_row, index)

        tracer.event(
            f"Extracted {len(extraction)} approximations from {index} points",
            level="DEBUG",
            short_tail=tail,
        )
        return extraction

    def _forget(self, rows, first_row, extraction):
        """Drop cumulative statistics older than the last TAIL_HISTORY ranges."""
        if len(extraction) <= self.TAIL_HISTORY:
            return first_row
        keep_from = extraction.ranges[-self.TAIL_HISTORY].begin
        while first_row < keep_from:
            rows.popleft()
            first_row += 1
        return first_row

    def _fix_short_tail(self, extraction, rows, first_row, index):
        """
        Give the trailing range the minimal number of points.

        Earlier ranges are shortened to make room where they stay within
        the threshold; otherwise the tail is merged into the last closed
        range. Only changed ranges are refitted.
        """
        approximation = self.approximation
        min_points = approximation.MIN_POINTS

        def sums(a, b):
            return rows[b - first_row] - rows[a - first_row]

        def valid(a, b):
            return b - a <= min_points or approximation.error_squared(sums(a, b)) < self.err2

        breakpoints = [r.end for r in extraction.ranges]
        moved = make_room_for_tail(breakpoints, index, min_points, valid, first_row)
        if moved is None:
            breakpoints.pop()
            tail = "absorbed"
        else:
            breakpoints = moved
            tail = "moved"

        closed = len(extraction.ranges)
        for i, index_range in enumerate(index_ranges_from_breakpoints(breakpoints, index)):
            if i < closed and extraction.ranges[i] == index_range:
                continue
            fitted = approximation.fit(sums(index_range.begin, index_range.end))
            if i < closed:
                extraction.approximations[i] = fitted
                extraction.ranges[i] = index_range
            else:
                extraction.append(fitted, index_range.begin, index_range.end)
        return tail
