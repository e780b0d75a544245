"""Greedy nearest-neighbour path ordering.

From the current position (initially the origin) the next path is the
remaining one whose first point is closest; ties go to the earliest
remaining path.  The current position then moves to that path's last point.

This is an O(n^2) heuristic that cuts pen-up travel, not a shortest-tour
solver.  Paths without points are never chosen while a non-empty path
remains, but every input path appears in the output exactly once.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, TypeVar, Union

from raster_plotter.tracing.curves import VectorPath
from raster_plotter.types import Point, distance

PathLike = Union[VectorPath, Sequence[Point]]
P = TypeVar("P", VectorPath, Sequence[Point])

ORIGIN = Point(0.0, 0.0)


def path_endpoints(path: PathLike) -> Optional[tuple[Point, Point]]:
    """First and last point of *path*, or ``None`` when it has no points."""
    if isinstance(path, VectorPath):
        return path.start, path.end
    if len(path) == 0:
        return None
    first, last = path[0], path[-1]
    return Point(float(first[0]), float(first[1])), Point(float(last[0]), float(last[1]))


def order_paths(paths: Sequence[P], start: Point = ORIGIN) -> list[P]:
    """Reorder paths to reduce travel between them.

    Parameters
    ----------
    paths : Sequence[VectorPath | Sequence[Point]]
        Paths in any order; not modified
    start : Point
        Pen position before the first path

    Returns
    -------
    list
        The same path objects in visiting order
    """
    remaining = list(paths)
    if len(remaining) <= 1:
        return remaining

    ordered = []
    current = Point(float(start[0]), float(start[1]))

    while remaining:
        nearest_index = 0
        nearest_dist = math.inf

        for i, path in enumerate(remaining):
            ends = path_endpoints(path)
            if ends is None:
                continue
            d = distance(current, ends[0])
            if d < nearest_dist:
                nearest_dist = d
                nearest_index = i

        chosen = remaining.pop(nearest_index)
        ordered.append(chosen)

        ends = path_endpoints(chosen)
        if ends is not None:
            current = ends[1]

    return ordered


def travel_distance(paths: Sequence[PathLike], start: Point = ORIGIN) -> float:
    """Total pen-up distance when drawing *paths* in the given order."""
    current = Point(float(start[0]), float(start[1]))
    total = 0.0
    for path in paths:
        ends = path_endpoints(path)
        if ends is None:
            continue
        total += distance(current, ends[0])
        current = ends[1]
    return total
