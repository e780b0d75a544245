"""Motion program codec: ordered paths to G-code text and back.

Emit
    Header (metadata comments, ``G21``, ``G90``, ``G92 X0 Y0 Z0``), then per
    path with at least two points::

        <pen_up_cmd> ; pen up
        G0 X.. Y.. F<travel_rate> ; travel to start
        <pen_down_cmd> ; pen down
        G1 X.. Y.. F<feed_rate>          (one per further point)

    and a footer that lifts the pen, returns to the origin and ends with
    ``M2``.  Pixel coordinates are scaled by ``MachineConfig.mm_per_px`` and
    written with two decimals.  Paths are emitted in the order given; use
    ``generate_program`` to order them first.

Parse
    Line oriented.  Inline ``;`` comments are stripped; blank results are
    skipped.  Pen state (initially up) follows literal tokens: a line holding
    any of ``UP_TOKENS`` lifts the pen, otherwise a line holding any of
    ``DOWN_TOKENS`` lowers it.  Only the tokens the default pen commands
    produce are recognised; custom pen commands without them are not
    understood (a warning is logged when the codec is built).  ``F`` updates
    the running feed; any line with ``X`` or ``Y`` yields one move from the
    previous position, a missing axis carrying over.  ``G92`` sets the
    position without a move.  Unrecognised text is ignored, never raised on.
"""

from __future__ import annotations

import logging
import re
from io import StringIO
from typing import Optional, Sequence, Union

from raster_plotter.configs.loader import MachineConfig
from raster_plotter.gcode.ordering import order_paths
from raster_plotter.tracing.curves import VectorPath, flatten
from raster_plotter.types import MoveKind, Point, PointSequence, ToolpathMove

logger = logging.getLogger(__name__)

UP_TOKENS = ("Z5", "Z 5", "S0")
DOWN_TOKENS = ("Z0", "Z 0", "S90")

_X_RE = re.compile(r"X(-?\d+\.?\d*)", re.IGNORECASE)
_Y_RE = re.compile(r"Y(-?\d+\.?\d*)", re.IGNORECASE)
_F_RE = re.compile(r"F(\d+\.?\d*)", re.IGNORECASE)
_G92_RE = re.compile(r"^G0*92(?!\d)", re.IGNORECASE)

PathInput = Union[VectorPath, Sequence[Point]]


def _num(v: float) -> str:
    """Integral values without a decimal point (F3000, not F3000.0)."""
    v = float(v)
    return str(int(v)) if v.is_integer() else f"{v:g}"


def pen_state(line: str) -> Optional[bool]:
    """``True`` for pen down, ``False`` for pen up, ``None`` if neither."""
    if any(tok in line for tok in UP_TOKENS):
        return False
    if any(tok in line for tok in DOWN_TOKENS):
        return True
    return None


class MotionProgramCodec:
    """Emit and parse pen-plotter G-code.

    Parameters
    ----------
    config : MachineConfig
        Feeds, pen commands, scale and curve resolution.
    """

    def __init__(self, config: MachineConfig) -> None:
        self._cfg = config
        self._scale = config.mm_per_px

        if pen_state(config.pen_up_cmd) is not False or pen_state(config.pen_down_cmd) is not True:
            logger.warning(
                "Pen commands %r / %r are not recognised by the program parser; "
                "parsed toolpaths will misclassify draw and travel moves",
                config.pen_up_cmd, config.pen_down_cmd,
            )

    @property
    def config(self) -> MachineConfig:
        return self._cfg

    # ------------------------------------------------------------------
    # Emit
    # ------------------------------------------------------------------

    def to_points(self, path: PathInput) -> PointSequence:
        """Flatten a VectorPath with the configured resolution; copy point lists."""
        if isinstance(path, VectorPath):
            return flatten(path, self._cfg.curve_resolution)
        return [Point(float(p[0]), float(p[1])) for p in path]

    def emit(self, paths: Sequence[PathInput]) -> str:
        """Generate a complete program for *paths*, in the given order.

        Parameters
        ----------
        paths : Sequence[VectorPath | Sequence[Point]]
            Paths in canvas pixels.  Point sequences are taken as already
            flattened.  Paths with fewer than two points are skipped.

        Returns
        -------
        str
            Program text, newline terminated.
        """
        buf = StringIO()
        self._write_header(buf)

        if not paths:
            buf.write("\n; No paths to generate\n\n")
            buf.write("M2 ; end program\n")
            return buf.getvalue()

        emitted = 0
        for path in paths:
            points = self.to_points(path)
            if len(points) < 2:
                continue
            emitted += 1
            self._write_path(buf, emitted, points)

        self._write_footer(buf)
        logger.debug("Emitted %d of %d paths", emitted, len(paths))
        return buf.getvalue()

    def _xy(self, p: Point) -> str:
        return f"X{p.x * self._scale:.2f} Y{p.y * self._scale:.2f}"

    def _write_path(self, buf: StringIO, index: int, points: PointSequence) -> None:
        cfg = self._cfg
        buf.write(f"\n; --- Path {index} ---\n")
        buf.write(f"{cfg.pen_up_cmd} ; pen up\n")
        buf.write(f"G0 {self._xy(points[0])} F{_num(cfg.travel_rate)} ; travel to start\n")
        buf.write(f"{cfg.pen_down_cmd} ; pen down\n")
        feed = _num(cfg.feed_rate)
        for p in points[1:]:
            buf.write(f"G1 {self._xy(p)} F{feed}\n")

    def _write_header(self, buf: StringIO) -> None:
        cfg = self._cfg
        buf.write("; ============================================\n")
        buf.write("; Raster Plotter\n")
        buf.write(f"; Work Area: {_num(cfg.bed_width)}mm x {_num(cfg.bed_height)}mm\n")
        buf.write(f"; Feed Rate: {_num(cfg.feed_rate)} mm/min\n")
        buf.write(f"; Travel Rate: {_num(cfg.travel_rate)} mm/min\n")
        buf.write("; ============================================\n")
        buf.write("\n")
        buf.write("G21 ; mm mode\n")
        buf.write("G90 ; absolute positioning\n")
        buf.write("G92 X0 Y0 Z0 ; set current position as origin\n")
        buf.write("; G28 ; uncomment to home first\n")

    def _write_footer(self, buf: StringIO) -> None:
        cfg = self._cfg
        buf.write("\n; --- End ---\n")
        buf.write(f"{cfg.pen_up_cmd} ; pen up\n")
        buf.write(f"G0 X0 Y0 F{_num(cfg.travel_rate)} ; return home\n")
        buf.write("M2 ; end program\n")

    # ------------------------------------------------------------------
    # Parse
    # ------------------------------------------------------------------

    def parse(self, text: str) -> list[ToolpathMove]:
        """Reconstruct straight moves from program text.

        Parameters
        ----------
        text : str
            G-code, typically produced by ``emit``

        Returns
        -------
        list[ToolpathMove]
            Moves in program order, coordinates in mm
        """
        moves: list[ToolpathMove] = []
        x = y = 0.0
        pen_down = False
        feed = float(self._cfg.feed_rate)

        for raw in text.splitlines():
            line = raw.split(";", 1)[0].strip()
            if not line:
                continue

            x_match = _X_RE.search(line)
            y_match = _Y_RE.search(line)

            if _G92_RE.match(line):
                if x_match:
                    x = float(x_match.group(1))
                if y_match:
                    y = float(y_match.group(1))
                continue

            state = pen_state(line)
            if state is not None:
                pen_down = state

            f_match = _F_RE.search(line)
            if f_match:
                feed = float(f_match.group(1))

            if x_match or y_match:
                new_x = float(x_match.group(1)) if x_match else x
                new_y = float(y_match.group(1)) if y_match else y
                moves.append(ToolpathMove(
                    start=Point(x, y),
                    end=Point(new_x, new_y),
                    kind=MoveKind.DRAW if pen_down else MoveKind.TRAVEL,
                    feed_rate=feed,
                ))
                x, y = new_x, new_y

        return moves


def generate_program(paths: Sequence[PathInput], config: MachineConfig) -> str:
    """Order *paths* nearest-neighbour from the origin, then emit them."""
    ordered = order_paths(paths)
    logger.info("Generating program for %d paths", len(ordered))
    return MotionProgramCodec(config).emit(ordered)
