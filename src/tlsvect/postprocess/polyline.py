"""
Polyline postprocessing for 2D line approximations.

The inner vertices of the polyline are the intersections of consecutive
lines, the outer vertices are the projections of the first and the last
point of the cloud. The segments therefore always form one connected
chain.
"""

import numpy as np

from tlsvect.models import LineSegment
from tlsvect.optimize.base import require_crossing
from tlsvect.postprocess.base import Postprocessor
from tlsvect.tracer import get_tracer


class PolylinePostprocessor(Postprocessor):
    """
    Connected polyline through the crossings of consecutive lines.

    Fails on parallel consecutive lines; running the continuity optimizer
    first avoids that.
    """

    def __init__(self, approximation):
        require_crossing(approximation, "PolylinePostprocessor")
        super().__init__(approximation)
        self.vertices = []

    def __call__(self, points, extraction):
        tracer = get_tracer()
        lines = extraction.approximations
        if not lines:
            tracer.event("Nothing to bound: empty extraction", level="WARN")
            return None

        pts = np.asarray(points, dtype=np.float64)
        vertices = [lines[0].project(pts[extraction.ranges[0].begin])]
        for i in range(1, len(lines)):
            crossing = self.approximation.crossing(lines[i - 1], lines[i])
            if crossing is None:
                tracer.event(
                    f"Parallel lines at boundary {extraction.ranges[i].begin}",
                    level="WARN",
                )
                return None
            vertices.append(crossing)
        vertices.append(lines[-1].project(pts[extraction.ranges[-1].end - 1]))

        self.vertices = [v.tolist() for v in vertices]
        return [
            LineSegment(start=self.vertices[i], end=self.vertices[i + 1])
            for i in range(len(lines))
        ]
