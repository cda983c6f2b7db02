"""Pytest fixtures for tlsvect tests."""

import tempfile

import numpy as np
import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture(autouse=True)
def reset_tracer():
    """Keep tracing disabled between tests."""
    from tlsvect.tracer import configure_tracer
    yield
    configure_tracer(enabled=False)


@pytest.fixture
def collinear_points():
    """50 points on the line y = 0.5 x + 1."""
    x = np.arange(50, dtype=np.float64)
    return np.column_stack([x, 0.5 * x + 1.0])


@pytest.fixture
def l_shape_points():
    """
    Two perpendicular runs of 25 points.

    Points 0..24 lie on y = 0, points 25..49 on x = 24.
    """
    first = np.column_stack([np.arange(25.0), np.zeros(25)])
    second = np.column_stack([np.full(25, 24.0), np.arange(1.0, 26.0)])
    return np.vstack([first, second])


@pytest.fixture
def bent_points():
    """
    Three straight runs of 20 points through (0, 0), (3, 0), (5, 2), (5, 5).

    Point 19 is the corner (3, 0), point 39 the corner (5, 2).
    """
    t = np.arange(1, 21) / 20.0
    first = np.column_stack([3.0 * np.arange(20) / 19.0, np.zeros(20)])
    second = np.column_stack([3.0 + 2.0 * t, 2.0 * t])
    third = np.column_stack([np.full(20, 5.0), 2.0 + 3.0 * t])
    return np.vstack([first, second, third])


@pytest.fixture
def step_points_3d():
    """Two perpendicular 3D runs of 30 points meeting at (29, 0, 0)."""
    first = np.column_stack([np.arange(30.0), np.zeros(30), np.zeros(30)])
    second = np.column_stack([np.full(30, 29.0), np.zeros(30), np.arange(1.0, 31.0)])
    return np.vstack([first, second])


@pytest.fixture
def default_config():
    """Create default vectorizer configuration."""
    from tlsvect.config import VectorizerConfig
    return VectorizerConfig()
