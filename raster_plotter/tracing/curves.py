"""Vector paths: quadratic smoothing, flattening and SVG path interchange.

Encoding (points -> VectorPath)
    Point 0 is the anchor.  Each interior point i becomes a quadratic segment
    with control point p[i] ending at midpoint(p[i], p[i+1]); the path closes
    with a straight line to the last point.  Interior points are therefore
    *not* on the encoded curve.  This is deliberate, lossy smoothing.

Flattening (VectorPath -> points)
    Start point, then ``resolution`` samples per curve at t = i/resolution,
    i = 1..resolution; lines contribute their end point; a closed path
    repeats the start point.

SVG interchange
    ``to_svg`` writes ``M x y Q cx cy x y ... L x y``.  ``parse_svg_path``
    reads absolute ``M L Q C Z`` commands, which is what the path editor
    hands back after the user has edited a trace.
"""

import math
import re
from dataclasses import dataclass
from typing import Sequence, Union

from raster_plotter.types import Point, PointSequence, distance, midpoint


@dataclass(frozen=True, slots=True)
class LineSegment:
    """Straight segment from the current point to ``end``."""

    end: Point


@dataclass(frozen=True, slots=True)
class QuadSegment:
    """Quadratic Bezier from the current point via ``control`` to ``end``."""

    control: Point
    end: Point


@dataclass(frozen=True, slots=True)
class CubicSegment:
    """Cubic Bezier from the current point via ``c1``, ``c2`` to ``end``."""

    c1: Point
    c2: Point
    end: Point


Segment = Union[LineSegment, QuadSegment, CubicSegment]


def _fmt(v: float) -> str:
    s = f"{v:.4f}".rstrip("0").rstrip(".")
    return "0" if s in ("", "-0") else s


def _map(p: Point, scale_x: float, scale_y: float, dx: float, dy: float) -> Point:
    return Point(p.x * scale_x + dx, p.y * scale_y + dy)


@dataclass(frozen=True)
class VectorPath:
    """One pen-down stroke as an anchor plus drawing segments.

    Parameters
    ----------
    start : Point
        Anchor (first point of the stroke)
    segments : tuple[Segment, ...]
        Drawing segments in order; empty for a single-point path
    closed : bool
        Return to ``start`` after the last segment
    """

    start: Point
    segments: tuple = ()
    closed: bool = False

    @classmethod
    def from_polyline(cls, points: Sequence[Point]) -> "VectorPath":
        """Unsmoothed path through every point (line segments only)."""
        if len(points) == 0:
            raise ValueError("Cannot build a path from an empty point sequence")
        pts = [Point(float(p[0]), float(p[1])) for p in points]
        return cls(pts[0], tuple(LineSegment(p) for p in pts[1:]))

    @property
    def end(self) -> Point:
        """Last point the pen reaches."""
        if self.closed or not self.segments:
            return self.start
        return self.segments[-1].end

    def transformed(
        self,
        scale_x: float = 1.0,
        scale_y: float = 1.0,
        dx: float = 0.0,
        dy: float = 0.0,
    ) -> "VectorPath":
        """Copy with every point mapped to ``(x*scale_x + dx, y*scale_y + dy)``.

        This is the editor's object transform (scale, then offset by the
        object's left/top).
        """
        args = (scale_x, scale_y, dx, dy)
        segments = []
        for seg in self.segments:
            if isinstance(seg, LineSegment):
                segments.append(LineSegment(_map(seg.end, *args)))
            elif isinstance(seg, QuadSegment):
                segments.append(QuadSegment(_map(seg.control, *args), _map(seg.end, *args)))
            else:
                segments.append(CubicSegment(
                    _map(seg.c1, *args), _map(seg.c2, *args), _map(seg.end, *args)
                ))
        return VectorPath(_map(self.start, *args), tuple(segments), self.closed)

    def to_svg(self) -> str:
        """SVG path data with absolute commands."""
        parts = [f"M {_fmt(self.start.x)} {_fmt(self.start.y)}"]
        for seg in self.segments:
            if isinstance(seg, LineSegment):
                parts.append(f"L {_fmt(seg.end.x)} {_fmt(seg.end.y)}")
            elif isinstance(seg, QuadSegment):
                parts.append(
                    f"Q {_fmt(seg.control.x)} {_fmt(seg.control.y)} "
                    f"{_fmt(seg.end.x)} {_fmt(seg.end.y)}"
                )
            else:
                parts.append(
                    f"C {_fmt(seg.c1.x)} {_fmt(seg.c1.y)} {_fmt(seg.c2.x)} {_fmt(seg.c2.y)} "
                    f"{_fmt(seg.end.x)} {_fmt(seg.end.y)}"
                )
        if self.closed:
            parts.append("Z")
        return " ".join(parts)


def encode(points: Sequence[Point]) -> VectorPath:
    """Smooth a simplified polyline into a quadratic VectorPath.

    Parameters
    ----------
    points : Sequence[Point]
        Simplified stroke, length >= 1

    Returns
    -------
    VectorPath
        ``n - 2`` quadratic segments followed by one line segment for n >= 2
        points; no segments for a single point.

    Raises
    ------
    ValueError
        If *points* is empty
    """
    if len(points) == 0:
        raise ValueError("Cannot encode an empty point sequence")

    pts = [Point(float(p[0]), float(p[1])) for p in points]
    if len(pts) == 1:
        return VectorPath(pts[0])

    segments: list = [
        QuadSegment(control=pts[i], end=midpoint(pts[i], pts[i + 1]))
        for i in range(1, len(pts) - 1)
    ]
    segments.append(LineSegment(pts[-1]))
    return VectorPath(pts[0], tuple(segments))


def quad_point(p0: Point, c: Point, p1: Point, t: float) -> Point:
    """Quadratic Bezier at parameter *t*."""
    mt = 1.0 - t
    return Point(
        mt * mt * p0.x + 2 * mt * t * c.x + t * t * p1.x,
        mt * mt * p0.y + 2 * mt * t * c.y + t * t * p1.y,
    )


def cubic_point(p0: Point, c1: Point, c2: Point, p1: Point, t: float) -> Point:
    """Cubic Bezier at parameter *t*."""
    mt = 1.0 - t
    a = mt * mt * mt
    b = 3 * mt * mt * t
    c = 3 * mt * t * t
    d = t * t * t
    return Point(
        a * p0.x + b * c1.x + c * c2.x + d * p1.x,
        a * p0.y + b * c1.y + c * c2.y + d * p1.y,
    )


def flatten(path: VectorPath, resolution: int) -> PointSequence:
    """Sample a VectorPath back into a polyline.

    Parameters
    ----------
    path : VectorPath
        Path to flatten
    resolution : int
        Samples per curve segment, >= 1

    Returns
    -------
    PointSequence
        Start point followed by the sampled points
    """
    if resolution < 1:
        raise ValueError(f"resolution must be >= 1, got {resolution}")

    out: PointSequence = [path.start]
    current = path.start
    for seg in path.segments:
        if isinstance(seg, LineSegment):
            out.append(seg.end)
        elif isinstance(seg, QuadSegment):
            for i in range(1, resolution + 1):
                out.append(quad_point(current, seg.control, seg.end, i / resolution))
        else:
            for i in range(1, resolution + 1):
                out.append(cubic_point(current, seg.c1, seg.c2, seg.end, i / resolution))
        current = seg.end

    if path.closed:
        out.append(path.start)
    return out


def polyline_length(points: Sequence[Point]) -> float:
    """Sum of straight-line distances between consecutive points."""
    return math.fsum(distance(a, b) for a, b in zip(points, points[1:]))


# ---------------------------------------------------------------------------
# SVG path data
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(r"[A-Za-z]|[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

# Coordinate count per command
_ARITY = {"M": 2, "L": 2, "Q": 4, "C": 6, "Z": 0}


def parse_svg_path(d: str) -> VectorPath:
    """Parse SVG path data into a VectorPath.

    Supports absolute ``M``, ``L``, ``Q``, ``C`` and ``Z``, with implicit
    repetition of the previous command (``M`` repeats as ``L``).  The data
    must describe a single subpath.

    Raises
    ------
    ValueError
        On relative or unsupported commands, a second ``M``, missing
        coordinates or an empty string
    """
    tokens = _TOKEN_RE.findall(d)
    if not tokens:
        raise ValueError("Empty SVG path data")

    start = None
    segments: list = []
    closed = False
    command = None
    i = 0

    while i < len(tokens):
        tok = tokens[i]
        if tok.isalpha():
            if tok not in _ARITY:
                raise ValueError(f"Unsupported SVG path command {tok!r}")
            command = tok
            i += 1
            if command == "Z":
                if start is None:
                    raise ValueError("Z before M in SVG path data")
                closed = True
                continue
        elif command is None or command == "Z":
            raise ValueError(f"Coordinate {tok!r} without a command")

        if closed:
            raise ValueError("Drawing command after Z is not supported")

        n = _ARITY[command]
        values = tokens[i:i + n]
        if len(values) < n or any(v.isalpha() for v in values):
            raise ValueError(f"Command {command} needs {n} coordinates")
        nums = [float(v) for v in values]
        i += n

        pts = [Point(nums[k], nums[k + 1]) for k in range(0, n, 2)]
        if command == "M":
            if start is not None:
                raise ValueError("Multiple subpaths are not supported")
            start = pts[0]
            command = "L"
        elif start is None:
            raise ValueError(f"{command} before M in SVG path data")
        elif command == "L":
            segments.append(LineSegment(pts[0]))
        elif command == "Q":
            segments.append(QuadSegment(pts[0], pts[1]))
        else:
            segments.append(CubicSegment(pts[0], pts[1], pts[2]))

    if start is None:
        raise ValueError("SVG path data has no M command")
    return VectorPath(start, tuple(segments), closed)
