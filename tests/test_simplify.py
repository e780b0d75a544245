"""Tests for Douglas-Peucker simplification.

Tests:
    - Segment distance clamping
    - Short inputs returned as copies
    - Deviation bound for every dropped point
    - Agreement with the recursive formulation
"""

from __future__ import annotations

import numpy as np
import pytest

from raster_plotter.tracing.simplify import point_segment_sq_dist, simplify
from raster_plotter.types import Point


def _recursive_reference(points, tolerance):
    """Plain recursive Douglas-Peucker used as an oracle."""
    sq_tol = tolerance * tolerance
    out = [points[0]]

    def step(first, last):
        max_sq, index = sq_tol, None
        for i in range(first + 1, last):
            d = point_segment_sq_dist(points[i], points[first], points[last])
            if d > max_sq:
                max_sq, index = d, i
        if index is not None:
            if index - first > 1:
                step(first, index)
            out.append(points[index])
            if last - index > 1:
                step(index, last)

    step(0, len(points) - 1)
    out.append(points[-1])
    return out


def _random_walk(seed: int, n: int = 200):
    rng = np.random.default_rng(seed)
    xy = np.cumsum(rng.normal(size=(n, 2)) * 3.0, axis=0)
    return [Point(float(x), float(y)) for x, y in xy]


class TestSegmentDistance:
    def test_perpendicular(self) -> None:
        assert point_segment_sq_dist(Point(5, 3), Point(0, 0), Point(10, 0)) == pytest.approx(9.0)

    def test_clamped_past_end(self) -> None:
        assert point_segment_sq_dist(Point(13, 4), Point(0, 0), Point(10, 0)) == pytest.approx(25.0)

    def test_clamped_before_start(self) -> None:
        assert point_segment_sq_dist(Point(-3, 4), Point(0, 0), Point(10, 0)) == pytest.approx(25.0)

    def test_degenerate_segment(self) -> None:
        assert point_segment_sq_dist(Point(3, 4), Point(0, 0), Point(0, 0)) == pytest.approx(25.0)


class TestSimplify:
    def test_short_input_is_copy(self) -> None:
        pts = [Point(0, 0), Point(5, 5)]
        out = simplify(pts, 1.0)
        assert out == pts
        assert out is not pts

    def test_empty(self) -> None:
        assert simplify([], 1.0) == []

    def test_collinear_collapses_to_endpoints(self) -> None:
        pts = [Point(float(i), 0.0) for i in range(20)]
        assert simplify(pts, 0.5) == [Point(0, 0), Point(19, 0)]

    def test_corner_kept(self) -> None:
        pts = [Point(0, 0), Point(5, 0), Point(10, 0), Point(10, 5), Point(10, 10)]
        assert simplify(pts, 1.0) == [Point(0, 0), Point(10, 0), Point(10, 10)]

    def test_distance_equal_to_tolerance_dropped(self) -> None:
        pts = [Point(0, 0), Point(5, 2), Point(10, 0)]
        assert simplify(pts, 2.0) == [Point(0, 0), Point(10, 0)]
        assert simplify(pts, 1.99) == pts

    def test_zero_tolerance_keeps_non_collinear(self) -> None:
        pts = [Point(0, 0), Point(1, 1), Point(2, 0), Point(3, 1)]
        assert simplify(pts, 0.0) == pts

    def test_negative_tolerance(self) -> None:
        with pytest.raises(ValueError):
            simplify([Point(0, 0), Point(1, 1), Point(2, 2)], -1.0)

    def test_input_not_modified(self) -> None:
        pts = _random_walk(1, 50)
        before = list(pts)
        simplify(pts, 2.0)
        assert pts == before

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    @pytest.mark.parametrize("tolerance", [0.5, 1.5, 4.0])
    def test_dropped_points_within_tolerance(self, seed: int, tolerance: float) -> None:
        pts = _random_walk(seed)
        out = simplify(pts, tolerance)

        assert out[0] == pts[0]
        assert out[-1] == pts[-1]

        # Kept points appear in input order
        idx = [pts.index(p) for p in out]
        assert idx == sorted(idx)

        for a, b in zip(idx, idx[1:]):
            for i in range(a + 1, b):
                d2 = point_segment_sq_dist(pts[i], pts[a], pts[b])
                assert d2 <= tolerance * tolerance + 1e-9

    @pytest.mark.parametrize("seed", [5, 6])
    def test_matches_recursive_formulation(self, seed: int) -> None:
        pts = _random_walk(seed, 300)
        assert simplify(pts, 2.0) == _recursive_reference(pts, 2.0)

    def test_long_input_does_not_recurse(self) -> None:
        # A zigzag this long would exceed the default recursion limit
        pts = [Point(float(i), float(i % 2) * 10.0) for i in range(1500)]
        assert simplify(pts, 1.0) == pts
