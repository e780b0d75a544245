"""Douglas-Peucker polyline simplification.

Given a range [first, last], the interior point farthest from segment
(first, last) is kept when its squared distance exceeds tolerance^2, and
both halves are processed the same way; otherwise every interior point of
the range is dropped.  First and last points are always kept.

Ranges are processed from an explicit stack rather than by recursion, so
stack depth does not grow with input length.  The kept points are emitted
in input order, identical to the recursive formulation.

Shared by the tracer and by the external path editor.
"""

from typing import Sequence

import numpy as np

from raster_plotter.types import Point, PointSequence


def point_segment_sq_dist(p: Point, a: Point, b: Point) -> float:
    """Squared distance from *p* to segment *ab*.

    The projection parameter is clamped to [0, 1], so points beyond either
    end measure to the nearer endpoint.  A zero-length segment measures to
    *a*.
    """
    x, y = a.x, a.y
    dx, dy = b.x - x, b.y - y

    if dx != 0 or dy != 0:
        t = ((p.x - x) * dx + (p.y - y) * dy) / (dx * dx + dy * dy)
        if t > 1:
            x, y = b.x, b.y
        elif t > 0:
            x += dx * t
            y += dy * t

    dx = p.x - x
    dy = p.y - y
    return dx * dx + dy * dy


def simplify(points: Sequence[Point], tolerance: float) -> PointSequence:
    """Reduce a polyline with Douglas-Peucker.

    Parameters
    ----------
    points : Sequence[Point]
        Input polyline (pixels or mm)
    tolerance : float
        Maximum allowed perpendicular deviation, same unit as the points

    Returns
    -------
    PointSequence
        New list; inputs of length <= 2 are returned as a copy.

    Raises
    ------
    ValueError
        If tolerance is negative
    """
    if tolerance < 0:
        raise ValueError(f"tolerance must be >= 0, got {tolerance}")

    pts = [Point(float(p[0]), float(p[1])) for p in points]
    n = len(pts)
    if n <= 2:
        return pts

    sq_tol = tolerance * tolerance
    keep = np.zeros(n, dtype=bool)
    keep[0] = keep[-1] = True

    stack = [(0, n - 1)]
    while stack:
        first, last = stack.pop()

        max_sq_dist = sq_tol
        index = -1
        for i in range(first + 1, last):
            sq_dist = point_segment_sq_dist(pts[i], pts[first], pts[last])
            if sq_dist > max_sq_dist:
                index = i
                max_sq_dist = sq_dist

        if index < 0:
            continue

        keep[index] = True
        if index - first > 1:
            stack.append((first, index))
        if last - index > 1:
            stack.append((index, last))

    return [p for p, k in zip(pts, keep) if k]
