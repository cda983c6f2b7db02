"""
Total error optimization of approximation breakpoints.

The extraction is described by its breakpoint vector (the end indices of
all ranges but the last). A Nelder-Mead simplex search adapted to integer
coordinates moves the breakpoints to minimize the summed residual
variance of all ranges while keeping their number fixed.

Every derived vertex is homogenized: breakpoints are clamped into the
valid index interval and forced to increase by at least the minimal
range size. In the discrete space the simplex collapses quickly, and it
may also start cycling; a proposed vertex that is already part of the
simplex ends the search. The result is therefore the best vertex found,
not a guaranteed optimum.
"""

import bisect
import math

from tlsvect.models import index_ranges_from_breakpoints
from tlsvect.optimize.base import Optimizer
from tlsvect.tracer import get_tracer


def _round(value):
    return int(math.floor(value + 0.5))


class TotalErrorOptimizer(Optimizer):
    """
    Discrete Nelder-Mead search over breakpoint vectors.

    simplex_shift is the initial displacement of the simplex vertices,
    usually between N/500 and N/50 for N points. max_iterations caps the
    search in case the simplex starts cycling.
    """

    def __init__(self, approximation, simplex_shift=1, max_iterations=10000):
        super().__init__(approximation)
        self.set_simplex_shift(simplex_shift)
        self.set_max_iterations(max_iterations)
        self.iterations = 0
        self.termination = ""

    def set_simplex_shift(self, simplex_shift):
        """Set the initial vertex displacement; values below one become one."""
        self.simplex_shift = max(int(simplex_shift), 1)

    def set_max_iterations(self, max_iterations):
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
        self.max_iterations = int(max_iterations)

    def __call__(self, points, prefix, extraction):
        tracer = get_tracer()
        if len(extraction) < 2:
            self.iterations = 0
            self.termination = "single range"
            return True

        search = _SimplexSearch(self.approximation, prefix, extraction.breakpoints())
        initial_error = search.score(search.start)
        best, best_error = search.run(self.simplex_shift, self.max_iterations)
        self.iterations = search.iterations
        self.termination = search.termination

        ranges = index_ranges_from_breakpoints(best, prefix.point_count)
        extraction.ranges[:] = ranges
        extraction.approximations[:] = [
            self.approximation.fit(prefix.sums(r.begin, r.end)) for r in ranges
        ]

        tracer.event(
            f"Total error {initial_error:.6g} -> {best_error:.6g}",
            iterations=search.iterations,
            termination=search.termination,
        )
        return True


class _SimplexSearch:
    """State of one discrete Nelder-Mead run."""

    def __init__(self, approximation, prefix, breakpoints):
        self.approximation = approximation
        self.prefix = prefix
        self.start = tuple(breakpoints)
        self.dim = len(breakpoints)
        self.gap = approximation.MIN_POINTS
        self.last = prefix.point_count
        self.iterations = 0
        self.termination = ""
        self._scores = {}
        # (score, vertex) pairs sorted from best to worst
        self.simplex = []
        self.members = set()

    def score(self, vertex):
        """Summed residual variance of the ranges given by a breakpoint vector."""
        cached = self._scores.get(vertex)
        if cached is not None:
            return cached
        error_squared = self.approximation.error_squared
        total = 0.0
        begin = 0
        for breakpoint in vertex:
            total += error_squared(self.prefix.sums(begin, breakpoint))
            begin = breakpoint
        total += error_squared(self.prefix.sums(begin, self.last))
        self._scores[vertex] = total
        return total

    def homogenize(self, values):
        """Clamp into the valid interval and enforce the minimal gaps."""
        out = [_round(v) for v in values]
        upper = self.last - self.gap
        for i in range(self.dim - 1, -1, -1):
            cap = upper if i == self.dim - 1 else out[i + 1] - self.gap
            if out[i] > cap:
                out[i] = cap
        for i in range(self.dim):
            floor = self.gap if i == 0 else out[i - 1] + self.gap
            if out[i] < floor:
                out[i] = floor
        return tuple(out)

    def _insert(self, vertex):
        bisect.insort(self.simplex, (self.score(vertex), vertex))
        self.members.add(vertex)

    def _pop_worst(self):
        _, vertex = self.simplex.pop()
        self.members.discard(vertex)
        return vertex

    def _replace_worst(self, vertex):
        """Swap the worst vertex for a new one; False if it is a duplicate."""
        self._pop_worst()
        if vertex in self.members:
            return False
        self._insert(vertex)
        return True

    def _collapsed(self):
        return len(self.members) < len(self.simplex)

    def _toward(self, origin, target, factor):
        """origin + factor * (target - origin), homogenized."""
        return self.homogenize([o + factor * (t - o) for o, t in zip(origin, target)])

    def run(self, shift, max_iterations):
        self.simplex = []
        self.members = set()
        self._insert(self.start)
        for i in range(self.dim):
            vertex = list(self.start)
            vertex[i] -= shift
            vertex = self.homogenize(vertex)
            if vertex in self.members:
                self.termination = "degenerate initial simplex"
                return self.best()
            self._insert(vertex)

        for _ in range(max_iterations):
            self.iterations += 1
            if not self._step():
                return self.best()

        self.termination = "max iterations"
        return self.best()

    def best(self):
        score, vertex = self.simplex[0]
        return vertex, score

    def _step(self):
        """One Nelder-Mead iteration; False when the search has to stop."""
        best_score = self.simplex[0][0]
        second_worst_score = self.simplex[-2][0]
        worst_score, worst = self.simplex[-1]

        others = [vertex for _, vertex in self.simplex[:-1]]
        centroid = [sum(coords) / len(others) for coords in zip(*others)]

        reflected = self._toward(centroid, worst, -1.0)
        reflected_score = self.score(reflected)

        if reflected_score < best_score:
            expanded = self._toward(centroid, worst, -2.0)
            if self.score(expanded) < reflected_score:
                return self._accept(expanded, "expand")
            return self._accept(reflected, "reflect")

        if reflected_score < second_worst_score:
            return self._accept(reflected, "reflect")

        if reflected_score < worst_score:
            contracted = self._toward(centroid, worst, -0.5)
            if self.score(contracted) <= reflected_score:
                return self._accept(contracted, "contract outside")
        else:
            contracted = self._toward(centroid, worst, 0.5)
            if self.score(contracted) < worst_score:
                return self._accept(contracted, "contract inside")

        return self._shrink()

    def _accept(self, vertex, move):
        if not self._replace_worst(vertex):
            self.termination = f"duplicate vertex after {move}"
            return False
        return True

    def _shrink(self):
        """Move every vertex halfway towards the best one."""
        best = self.simplex[0][1]
        shrunk = [best] + [self._toward(best, vertex, 0.5) for _, vertex in self.simplex[1:]]
        self.simplex = []
        self.members = set()
        for vertex in shrunk:
            self.simplex.append((self.score(vertex), vertex))
            self.members.add(vertex)
        self.simplex.sort()
        if self._collapsed():
            self.termination = "simplex collapsed"
            return False
        return True
