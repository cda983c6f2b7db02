"""
Synthetic ordered point clouds for tests and benchmarks.

All generators return an n x dim float64 array of points ordered along
the shape.
"""

from dataclasses import dataclass
from typing import Callable

import numpy as np


def gen_hemicycle(n, radius=8.0):
    """Upper half of a circle, from (radius, 0) to (-radius, 0)."""
    t = np.arange(n) * np.pi / max(n - 1, 1)
    return np.column_stack([np.cos(t) * radius, np.sin(t) * radius])


def gen_spikes(n, spikes=1, height=4.0, width=8.0):
    """
    Zigzag of 2 * spikes straight edges across the given width.

    Every edge rises or falls by height over the same number of points.
    """
    i = np.arange(n, dtype=np.float64)
    span = max(n - 1, 1)
    x = i * width / span - width / 2.0
    y = i * height * spikes * 2.0 / span
    edge = np.floor(i / (span / (spikes * 2.0)))
    rising = np.mod(edge, 2.0) == 0
    y = np.where(rising, y - height * edge, -(y - height * (edge + 1.0)))
    return np.column_stack([x, y])


def gen_spiral(n, radius=8.0, slope=0.5, length=4.0 * np.pi):
    """Helix around the z axis, length is the total winding angle."""
    t = np.arange(n) * length / max(n - 1, 1)
    return np.column_stack([radius * np.cos(t), radius * np.sin(t), slope * t])


def gen_crown(n, spikes=2, radius=4.0, height=8.0):
    """
    Closed zigzag on a cylinder: 2 * spikes straight edges alternating
    between z = 0 and z = height.
    """
    corners = 2 * spikes
    angles = 2.0 * np.pi * np.arange(corners + 1) / corners
    vertices = np.column_stack([
        radius * np.cos(angles),
        radius * np.sin(angles),
        (np.arange(corners + 1) % 2) * height,
    ])

    position = np.arange(n) / n * corners
    segment = position.astype(int)
    t = (position - segment)[:, None]
    return (1.0 - t) * vertices[segment] + t * vertices[segment + 1]


def add_noise(points, sigma, seed=None):
    """Copy of points with Gaussian noise of the given standard deviation."""
    if sigma < 0:
        raise ValueError(f"noise sigma must be non-negative, got {sigma}")
    pts = np.asarray(points, dtype=np.float64)
    if sigma == 0:
        return pts.copy()
    rng = np.random.default_rng(seed)
    return pts + rng.normal(0.0, sigma, size=pts.shape)


@dataclass(frozen=True)
class ShapeSpec:
    """A registered generator with the dimension of its points."""
    dimension: int
    generator: Callable


SHAPES = {
    "hemicycle": ShapeSpec(2, gen_hemicycle),
    "spikes": ShapeSpec(2, gen_spikes),
    "spiral": ShapeSpec(3, gen_spiral),
    "crown": ShapeSpec(3, gen_crown),
}


def generate_shape(name, n, noise=0.0, seed=None):
    """Generate n points of a registered shape with optional noise."""
    if name not in SHAPES:
        raise ValueError(f"Unknown shape '{name}', expected one of {sorted(SHAPES)}")
    if n < 2:
        raise ValueError(f"shape needs at least 2 points, got {n}")
    points = SHAPES[name].generator(n)
    return add_noise(points, noise, seed) if noise else points
