"""
Pydantic data models for vectorization outputs.

Index ranges, bounded output shapes and run summaries flow through these
validated models so that results are consistent and easy to serialize.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class IndexRange(BaseModel):
    """Half-open range [begin, end) of point indices covered by one approximation."""
    begin: int = Field(..., ge=0)
    end: int = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def size(self):
        """Number of points in the range."""
        return self.end - self.begin

    def as_tuple(self):
        return (self.begin, self.end)


class LineSegment(BaseModel):
    """A bounded line segment in 2D or 3D."""
    start: List[float] = Field(..., min_length=2, max_length=3)
    end: List[float] = Field(..., min_length=2, max_length=3)

    model_config = ConfigDict(extra="forbid")

    @property
    def dimension(self):
        return len(self.start)

    @property
    def length(self):
        """Euclidean length of the segment."""
        return sum((b - a) ** 2 for a, b in zip(self.start, self.end)) ** 0.5


class Polygon(BaseModel):
    """
    A planar polygon in 3D.

    Every vertex satisfies normal . vertex = offset.
    """
    normal: List[float] = Field(..., min_length=3, max_length=3)
    offset: float
    points: List[List[float]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def vertex_count(self):
        return len(self.points)


class RunSummary(BaseModel):
    """Outcome of a single vectorizer run, as reported by the CLI."""
    preset: str
    shape: str = ""
    point_count: int = Field(default=0, ge=0)
    primitive_count: int = Field(default=0, ge=0)
    total_error: float = Field(default=0.0, ge=0.0)
    elapsed_ms: float = Field(default=0.0, ge=0.0)
    success: bool = False

    model_config = ConfigDict(extra="forbid")


def index_ranges_from_breakpoints(breakpoints, point_count):
    """
    Build contiguous index ranges covering [0, point_count) from breakpoints.

    Breakpoints are the end indices of every range but the last.
    """
    ranges = []
    begin = 0
    for breakpoint in breakpoints:
        ranges.append(IndexRange(begin=begin, end=breakpoint))
        begin = breakpoint
    ranges.append(IndexRange(begin=begin, end=point_count))
    return ranges
