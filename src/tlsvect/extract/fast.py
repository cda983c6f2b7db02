"""
Fast extraction of approximations using the prefix-sum array.

For a fixed range start the fit error is assumed to be non-decreasing
with range length. The end of the longest valid range is then found by
galloping: the range is extended with a doubling step while the error
stays under the threshold, and the exact boundary is located by
bisection once the threshold is exceeded. Roughly log(L) fits are needed
to find a range of L points.

A trailing remainder shorter than the minimal range gets room from the
ranges before it; it is absorbed into the last range, which may then
exceed the threshold, only when none of them can give up points.
"""

from tlsvect.extract.base import Extraction, Extractor, make_room_for_tail
from tlsvect.models import index_ranges_from_breakpoints
from tlsvect.tracer import get_tracer


class FastExtractor(Extractor):
    """Binary search extractor over a PrefixSumArray."""

    requires_prefix = True

    def _valid(self, prefix, begin, end):
        if end - begin <= self.approximation.MIN_POINTS:
            return True
        return self.approximation.error_squared(prefix.sums(begin, end)) < self.err2

    def _longest_valid_end(self, prefix, begin, last):
        low = begin + self.approximation.MIN_POINTS
        if low >= last:
            return last

        step = 1
        while True:
            candidate = low + step
            if candidate >= last:
                if self._valid(prefix, begin, last):
                    return last
                high = last
                break
            if not self._valid(prefix, begin, candidate):
                high = candidate
                break
            low = candidate
            step *= 2

        # low is valid, high is not
        while high - low > 1:
            mid = (low + high) // 2
            if self._valid(prefix, begin, mid):
                low = mid
            else:
                high = mid
        return low

    def __call__(self, points, prefix=None):
        tracer = get_tracer()
        min_points = self.approximation.MIN_POINTS
        last = prefix.point_count

        if last < min_points:
            tracer.event(f"Too few points to fit: {last} < {min_points}", level="WARN")
            return None

        breakpoints = []
        begin = 0
        while True:
            end = self._longest_valid_end(prefix, begin, last)
            if end == last:
                break
            breakpoints.append(end)
            begin = end

        tail = "none"
        if breakpoints and last - breakpoints[-1] < min_points:
            moved = make_room_for_tail(
                breakpoints, last, min_points,
                lambda a, b: self._valid(prefix, a, b),
            )
            if moved is None:
                breakpoints.pop()
                tail = "absorbed"
            else:
                breakpoints = moved
                tail = "moved"

        extraction = Extraction()
        for index_range in index_ranges_from_breakpoints(breakpoints, last):
            begin, end = index_range.as_tuple()
            extraction.append(self.approximation.fit(prefix.sums(begin, end)), begin, end)

        tracer.event(
            f"Extracted {len(extraction)} approximations from {last} points",
            level="DEBUG",
            short_tail=tail,
        )
        return extraction
