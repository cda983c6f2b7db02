"""
Endpoint projection postprocessing.

Every approximation is bounded independently by the raw points of its own
range, so consecutive shapes do not have to touch.
"""

import numpy as np

from tlsvect.postprocess.base import Postprocessor
from tlsvect.tracer import get_tracer


class EndpointProjection(Postprocessor):
    """
    Line approximations become segments between the projections of the
    first and last point of their range; plane approximations become
    polygons of all projected range points.
    """

    def __call__(self, points, extraction):
        tracer = get_tracer()
        if len(extraction) == 0 or len(extraction.approximations) != len(extraction.ranges):
            tracer.event("Nothing to bound: empty or inconsistent extraction", level="WARN")
            return None

        pts = np.asarray(points, dtype=np.float64)
        shapes = []
        for approximation, index_range in zip(extraction.approximations, extraction.ranges):
            shapes.append(approximation.trim(pts[index_range.begin:index_range.end]))
        return shapes
