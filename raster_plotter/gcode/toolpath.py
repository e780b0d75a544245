"""Toolpath statistics for parsed motion programs.

Provides:
    - Draw / travel length and move counts
    - Time estimate: each move at its own feed, no acceleration model
    - Bed-limit checking of move endpoints

Used by:
    - CLI trace script: log a summary after writing the program
    - Preview script: report before rendering

Usage:
    moves = MotionProgramCodec(cfg).parse(text)
    summary = summarize(moves)
    print(f"Estimated time: {summary.estimated_time_s:.1f}s")
    for msg in check_bed_limits(moves, cfg):
        print(msg)
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from raster_plotter.configs.loader import MachineConfig
from raster_plotter.tracing.curves import VectorPath, flatten, polyline_length
from raster_plotter.types import MoveKind, ToolpathMove

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolpathSummary:
    """Aggregate figures for one program.

    Attributes
    ----------
    draw_length_mm, travel_length_mm : float
        Summed straight-line lengths per move kind
    draw_moves, travel_moves : int
        Move counts per kind
    estimated_time_s : float
        Sum of length / feed over all moves, in seconds
    bounds : Optional[Tuple[float, float, float, float]]
        (min_x, min_y, max_x, max_y) over every move endpoint; None without moves
    """

    draw_length_mm: float
    travel_length_mm: float
    draw_moves: int
    travel_moves: int
    estimated_time_s: float
    bounds: Optional[Tuple[float, float, float, float]]

    @property
    def total_moves(self) -> int:
        return self.draw_moves + self.travel_moves

    def format(self) -> str:
        """One-line human summary (``Est: 3m 12s`` style time)."""
        minutes, seconds = divmod(int(self.estimated_time_s), 60)
        return (
            f"{self.draw_moves} draw / {self.travel_moves} travel moves, "
            f"draw {self.draw_length_mm:.1f}mm, travel {self.travel_length_mm:.1f}mm, "
            f"est: {minutes}m {seconds}s"
        )


def summarize(moves: Sequence[ToolpathMove]) -> ToolpathSummary:
    """Compute lengths, counts, time estimate and bounds.

    Moves with a non-positive feed add length but no time.
    """
    draw_len = []
    travel_len = []
    minutes = []
    xs: List[float] = []
    ys: List[float] = []

    for move in moves:
        length = move.length
        if move.kind is MoveKind.DRAW:
            draw_len.append(length)
        else:
            travel_len.append(length)
        if move.feed_rate > 0:
            minutes.append(length / move.feed_rate)
        xs.extend((move.start.x, move.end.x))
        ys.extend((move.start.y, move.end.y))

    bounds = (min(xs), min(ys), max(xs), max(ys)) if xs else None

    return ToolpathSummary(
        draw_length_mm=math.fsum(draw_len),
        travel_length_mm=math.fsum(travel_len),
        draw_moves=len(draw_len),
        travel_moves=len(travel_len),
        estimated_time_s=math.fsum(minutes) * 60.0,
        bounds=bounds,
    )


def check_bed_limits(moves: Sequence[ToolpathMove], config: MachineConfig) -> List[str]:
    """List move endpoints outside ``[0, bed_width] x [0, bed_height]``.

    Returns
    -------
    List[str]
        One message per offending axis; empty when every move fits.
    """
    violations: List[str] = []
    for i, move in enumerate(moves):
        where = f"move {i + 1}"
        x, y = move.end
        if not (0 <= x <= config.bed_width):
            msg = f"X={x:.2f} exceeds bed limit [0, {config.bed_width:g}] at {where}"
            violations.append(msg)
            logger.warning(msg)
        if not (0 <= y <= config.bed_height):
            msg = f"Y={y:.2f} exceeds bed limit [0, {config.bed_height:g}] at {where}"
            violations.append(msg)
            logger.warning(msg)
    return violations


def estimate_drawing_length(paths: Sequence[VectorPath], config: MachineConfig) -> float:
    """Pen-down length in mm of *paths* once flattened."""
    total_px = math.fsum(
        polyline_length(flatten(path, config.curve_resolution)) for path in paths
    )
    return total_px * config.mm_per_px
