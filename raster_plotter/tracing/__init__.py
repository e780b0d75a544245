"""Raster traces to vector paths.

Modules:
    - tracer: pixel walks over skeleton / raw edge rasters
    - simplify: Douglas-Peucker reduction
    - curves: quadratic smoothing, flattening, SVG path data
"""

from raster_plotter.tracing.curves import (
    CubicSegment,
    LineSegment,
    QuadSegment,
    VectorPath,
    encode,
    flatten,
    parse_svg_path,
    polyline_length,
)
from raster_plotter.tracing.simplify import point_segment_sq_dist, simplify
from raster_plotter.tracing.tracer import trace, trace_raw_edges, trace_skeleton

__all__ = [
    "CubicSegment",
    "LineSegment",
    "QuadSegment",
    "VectorPath",
    "encode",
    "flatten",
    "parse_svg_path",
    "point_segment_sq_dist",
    "polyline_length",
    "simplify",
    "trace",
    "trace_raw_edges",
    "trace_skeleton",
]
