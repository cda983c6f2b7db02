"""
Vectorizer pipeline: extraction, optional optimization, postprocessing.

A Vectorizer wires one extractor, any number of optimizers and one
postprocessor for a single approximation type. Calling it on an ordered
point cloud runs the stages in order and keeps the results until the
next call. Stage failures make the call return False and clear all
outputs; there are no partial results.
"""

import numpy as np

from tlsvect.models import LineSegment, Polygon
from tlsvect.stats.prefix import PrefixSumArray
from tlsvect.tracer import get_tracer


class Vectorizer:
    """
    Composed vectorization pipeline.

    Args:
        approximation: approximation class, e.g. TlsLine2D
        extractor: Extractor instance for the same approximation
        postprocessor: Postprocessor instance for the same approximation
        optimizers: Optimizer instances, run in the given order
        max_size: expected number of points, reserves the prefix buffer
        name: label used in traces
    """

    def __init__(self, approximation, extractor, postprocessor, optimizers=(), max_size=0, name=""):
        self.approximation = approximation
        self.extractor = extractor
        self.optimizers = list(optimizers)
        self.postprocessor = postprocessor
        self.name = name or type(extractor).__name__
        self.prefix = PrefixSumArray(approximation.DIMENSION, max(int(max_size), 0))
        self._clear()

    def _clear(self):
        self._approximations = []
        self._indices = []
        self._shapes = []

    @property
    def stages(self):
        return [self.extractor, *self.optimizers, self.postprocessor]

    @property
    def requires_prefix(self):
        return self.extractor.requires_prefix or any(o.requires_prefix for o in self.optimizers)

    def validate_points(self, points):
        """
        Convert input to an n x DIMENSION float array.

        Raises:
            ValueError: if the input is not a 2D array of the right width
                or contains non-finite coordinates
        """
        pts = np.asarray(points, dtype=np.float64)
        if pts.ndim != 2:
            raise ValueError(f"points must be a 2D array, got {pts.ndim} dimensions")
        if pts.shape[1] != self.approximation.DIMENSION:
            raise ValueError(
                f"{self.approximation.__name__} needs {self.approximation.DIMENSION}D points, "
                f"got {pts.shape[1]}D"
            )
        if not np.all(np.isfinite(pts)):
            raise ValueError("points contain non-finite coordinates")
        return pts

    def __call__(self, points):
        """
        Vectorize an ordered point cloud.

        Returns:
            True if every stage succeeded; False otherwise, in which case
            all outputs are empty
        """
        tracer = get_tracer()
        self._clear()
        pts = np.asarray(points, dtype=np.float64)
        if pts.size:
            pts = self.validate_points(pts)
        else:
            pts = pts.reshape(0, self.approximation.DIMENSION)

        with tracer.span(self.name, module="vectorizer", points=pts):
            if pts.shape[0] < self.approximation.MIN_POINTS:
                tracer.event(
                    f"Too few points: {pts.shape[0]} < {self.approximation.MIN_POINTS}",
                    level="WARN",
                )
                return False

            if self.requires_prefix:
                with tracer.span("PrefixSumArray", module="vectorizer"):
                    self.prefix.precompute(pts)

            with tracer.span(type(self.extractor).__name__, module="vectorizer"):
                extraction = self.extractor(pts, self.prefix if self.extractor.requires_prefix else None)
            if extraction is None:
                tracer.event(f"{type(self.extractor).__name__} failed", level="WARN")
                return False

            for optimizer in self.optimizers:
                with tracer.span(type(optimizer).__name__, module="vectorizer"):
                    success = optimizer(pts, self.prefix, extraction)
                if not success:
                    tracer.event(f"{type(optimizer).__name__} failed", level="WARN")
                    return False

            with tracer.span(type(self.postprocessor).__name__, module="vectorizer"):
                shapes = self.postprocessor(pts, extraction)
            if shapes is None:
                tracer.event(f"{type(self.postprocessor).__name__} failed", level="WARN")
                return False

            self._approximations = list(extraction.approximations)
            self._indices = list(extraction.ranges)
            self._shapes = shapes
            tracer.event(
                f"Vectorized {pts.shape[0]} points into {len(shapes)} shapes",
                total_error=extraction.total_error(),
            )
        return True

    def _forward(self, setter, value):
        accepted = False
        for stage in self.stages:
            method = getattr(stage, setter, None)
            if callable(method):
                method(value)
                accepted = True
        return accepted

    def _set(self, setter, option, value):
        if not self._forward(setter, value):
            raise ValueError(f"No stage of {self.name} accepts {option}")

    def set_sigma(self, sigma):
        self._set("set_sigma", "sigma", sigma)

    def set_delta(self, delta):
        self._set("set_delta", "delta", delta)

    def set_simplex_shift(self, simplex_shift):
        self._set("set_simplex_shift", "simplex_shift", simplex_shift)

    def set_max_iterations(self, max_iterations):
        self._set("set_max_iterations", "max_iterations", max_iterations)

    def set_max_size(self, max_size):
        """Reserve internal buffers for max_size points."""
        if max_size < 0:
            raise ValueError(f"max_size must be non-negative, got {max_size}")
        self.prefix.reserve(int(max_size))

    def apply_config(self, config):
        """Forward every option of a VectorizerConfig to the stages that accept it."""
        self.set_sigma(config.extraction.sigma)
        self.set_max_size(config.extraction.max_size)
        self._forward("set_delta", config.continuity.delta)
        self._forward("set_simplex_shift", config.total_error.simplex_shift)
        self._forward("set_max_iterations", config.total_error.max_iterations)
        return self

    @property
    def approximations(self):
        """Fitted primitives of the last successful call."""
        return list(self._approximations)

    @property
    def indices(self):
        """IndexRange of every approximation of the last successful call."""
        return list(self._indices)

    @property
    def shapes(self):
        """Bounded output shapes of the last successful call."""
        return list(self._shapes)

    @property
    def line_segments(self):
        return [s for s in self._shapes if isinstance(s, LineSegment)]

    @property
    def polygons(self):
        return [s for s in self._shapes if isinstance(s, Polygon)]

    @property
    def total_error(self):
        """Sum of the residual variances of the current approximations."""
        return float(sum(a.sigma2 for a in self._approximations))

    def __repr__(self):
        stages = ", ".join(type(s).__name__ for s in self.stages)
        return f"Vectorizer({self.name}: {self.approximation.__name__}; {stages})"
