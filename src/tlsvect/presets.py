"""
Ready-made vectorizers.

Naming: itls = incremental extraction, ftls = fast extraction, aftls =
fast extraction refined by the total error optimizer; "polyline" and
"projections" name the postprocessor.
"""

from tlsvect.config import VectorizerConfig
from tlsvect.extract.fast import FastExtractor
from tlsvect.extract.incremental import IncrementalExtractor
from tlsvect.fit.line2d import TlsLine2D
from tlsvect.fit.line3d import TlsLine3D
from tlsvect.fit.plane3d import TlsPlane3D
from tlsvect.optimize.continuity import ContinuityOptimizer
from tlsvect.optimize.total_error import TotalErrorOptimizer
from tlsvect.postprocess.endpoints import EndpointProjection
from tlsvect.postprocess.polyline import PolylinePostprocessor
from tlsvect.tracer import trace
from tlsvect.vectorizer import Vectorizer


def itls_projections_2d(config=None):
    return _build("itls_projections_2d", TlsLine2D, IncrementalExtractor, EndpointProjection, [], config)


def ftls_polyline_2d(config=None):
    return _build(
        "ftls_polyline_2d", TlsLine2D, FastExtractor, PolylinePostprocessor,
        [ContinuityOptimizer], config,
    )


def aftls_polyline_2d(config=None):
    return _build(
        "aftls_polyline_2d", TlsLine2D, FastExtractor, PolylinePostprocessor,
        [TotalErrorOptimizer, ContinuityOptimizer], config,
    )


def itls_projections_3d(config=None):
    return _build("itls_projections_3d", TlsLine3D, IncrementalExtractor, EndpointProjection, [], config)


def ftls_projections_3d(config=None):
    return _build("ftls_projections_3d", TlsLine3D, FastExtractor, EndpointProjection, [], config)


def aftls_projections_3d(config=None):
    return _build(
        "aftls_projections_3d", TlsLine3D, FastExtractor, EndpointProjection,
        [TotalErrorOptimizer], config,
    )


def aftls_plane_projections_3d(config=None):
    return _build(
        "aftls_plane_projections_3d", TlsPlane3D, FastExtractor, EndpointProjection,
        [TotalErrorOptimizer], config,
    )


def _build(name, approximation, extractor_cls, postprocessor_cls, optimizer_classes, config):
    vectorizer = Vectorizer(
        approximation,
        extractor_cls(approximation),
        postprocessor_cls(approximation),
        optimizers=[cls(approximation) for cls in optimizer_classes],
        name=name,
    )
    return vectorizer.apply_config(config or VectorizerConfig())


PRESETS = {
    "itls_projections_2d": itls_projections_2d,
    "ftls_polyline_2d": ftls_polyline_2d,
    "aftls_polyline_2d": aftls_polyline_2d,
    "itls_projections_3d": itls_projections_3d,
    "ftls_projections_3d": ftls_projections_3d,
    "aftls_projections_3d": aftls_projections_3d,
    "aftls_plane_projections_3d": aftls_plane_projections_3d,
}


@trace(label="build_vectorizer")
def build_vectorizer(config=None):
    """Create the preset named by config.preset, configured by config."""
    config = config or VectorizerConfig()
    if config.preset not in PRESETS:
        raise ValueError(f"Unknown preset '{config.preset}', expected one of {sorted(PRESETS)}")
    return PRESETS[config.preset](config)

