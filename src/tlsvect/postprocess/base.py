"""
Interface of postprocessing stages.
"""

from abc import ABC, abstractmethod


class Postprocessor(ABC):
    """
    Converts the unbounded primitives of an extraction into bounded shapes.

    Returns a list of LineSegment or Polygon models, or None when the
    primitives cannot be bounded.
    """

    def __init__(self, approximation):
        self.approximation = approximation

    @abstractmethod
    def __call__(self, points, extraction):
        """Bound every approximation of the extraction."""
