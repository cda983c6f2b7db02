"""
Interface of optimization stages.
"""

from abc import ABC, abstractmethod


class Optimizer(ABC):
    """
    Refinement pass over an extraction.

    Optimizers work on the prefix-sum array and modify the extraction in
    place. They return False when the extraction cannot be brought into a
    valid state.
    """

    requires_prefix = True

    def __init__(self, approximation):
        self.approximation = approximation

    @abstractmethod
    def __call__(self, points, prefix, extraction):
        """Optimize the extraction in place; return True on success."""


def require_crossing(approximation, stage_name):
    """Reject approximation types that cannot intersect consecutive lines."""
    if not callable(getattr(approximation, "crossing", None)):
        raise TypeError(f"{stage_name} requires 2D line approximations, got {approximation.__name__}")
