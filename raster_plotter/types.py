"""Value types shared by the tracing and motion-program stages.

Every type here is immutable and value-like: stages hand them to each other
freely and never mutate one they did not create.

Units
-----
``Point`` coordinates are **pixels** while they describe raster traces and
**millimetres** once they come out of the motion-program parser.  The type
does not carry the unit; the stage boundary does.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class Point(NamedTuple):
    """Planar point.

    A ``NamedTuple`` so a list of points converts directly with
    ``np.asarray(points)`` and unpacks as ``x, y = p``.
    """

    x: float
    y: float


PointSequence = list[Point]
"""Ordered points of one stroke (pen-down run)."""


def midpoint(a: Point, b: Point) -> Point:
    """Return the point halfway between *a* and *b*."""
    return Point((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    dx = b.x - a.x
    dy = b.y - a.y
    return (dx * dx + dy * dy) ** 0.5


# ---------------------------------------------------------------------------
# Toolpath
# ---------------------------------------------------------------------------


class MoveKind(str, Enum):
    """Pen state of a reconstructed move."""

    DRAW = "draw"
    TRAVEL = "travel"


@dataclass(frozen=True, slots=True)
class ToolpathMove:
    """One straight move reconstructed from a motion program.

    Parameters
    ----------
    start, end : Point
        Move endpoints in machine mm.
    kind : MoveKind
        ``DRAW`` when the pen was down for this move, else ``TRAVEL``.
    feed_rate : float
        Feed rate (mm/min) in effect for the move.
    """

    start: Point
    end: Point
    kind: MoveKind
    feed_rate: float

    @property
    def length(self) -> float:
        """Straight-line length of the move (mm)."""
        return distance(self.start, self.end)
