"""Path ordering and G-code emit / parse.

Modules:
    - ordering: greedy nearest-neighbour visiting order
    - codec: MotionProgramCodec (paths -> G-code -> toolpath moves)
    - toolpath: summaries and bed-limit checks over parsed moves
"""

from raster_plotter.gcode.codec import (
    DOWN_TOKENS,
    UP_TOKENS,
    MotionProgramCodec,
    generate_program,
    pen_state,
)
from raster_plotter.gcode.ordering import order_paths, path_endpoints, travel_distance
from raster_plotter.gcode.toolpath import (
    ToolpathSummary,
    check_bed_limits,
    estimate_drawing_length,
    summarize,
)

__all__ = [
    "DOWN_TOKENS",
    "UP_TOKENS",
    "MotionProgramCodec",
    "ToolpathSummary",
    "check_bed_limits",
    "estimate_drawing_length",
    "generate_program",
    "order_paths",
    "path_endpoints",
    "pen_state",
    "summarize",
    "travel_distance",
]
