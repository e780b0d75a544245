#!/usr/bin/env python3
"""Render a G-code program to a PNG toolpath preview.

Parses the program with the same codec that wrote it, draws pen-down
moves as solid dark lines and pen-up travel as thin grey lines over the
machine bed, and logs the toolpath summary and any bed-limit violations.

Usage::

    raster-plotter-preview --gcode out/logo.gcode --output out/logo_preview.png
    raster-plotter-preview --gcode out/logo.gcode --output preview.png --px-per-mm 2 --no-travel
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import cv2
import numpy as np

from raster_plotter.configs.loader import ConfigError, MachineConfig, load_machine_config
from raster_plotter.gcode.codec import MotionProgramCodec
from raster_plotter.gcode.toolpath import check_bed_limits, summarize
from raster_plotter.types import MoveKind, ToolpathMove
from raster_plotter.utils import fs
from raster_plotter.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

BACKGROUND = (255, 255, 255)
BED_OUTLINE = (200, 200, 200)
DRAW_COLOR = (40, 40, 40)
TRAVEL_COLOR = (170, 170, 170)


def render_toolpath(
    moves: Sequence[ToolpathMove],
    config: MachineConfig,
    px_per_mm: float = 1.0,
    margin_px: int = 10,
    show_travel: bool = True,
) -> np.ndarray:
    """Rasterise moves over the bed outline.

    Parameters
    ----------
    moves : Sequence[ToolpathMove]
        Parsed moves in mm
    config : MachineConfig
        Supplies the bed size
    px_per_mm : float
        Output resolution
    margin_px : int
        Blank border around the bed
    show_travel : bool
        Draw pen-up moves as well

    Returns
    -------
    np.ndarray
        BGR image, shape (H, W, 3), dtype uint8; Y grows downward like the
        source image
    """
    if px_per_mm <= 0:
        raise ValueError(f"px_per_mm must be > 0, got {px_per_mm}")

    w = int(round(config.bed_width * px_per_mm)) + 2 * margin_px
    h = int(round(config.bed_height * px_per_mm)) + 2 * margin_px
    img = np.full((h, w, 3), BACKGROUND, dtype=np.uint8)

    def to_px(p):
        return (
            int(round(p.x * px_per_mm)) + margin_px,
            int(round(p.y * px_per_mm)) + margin_px,
        )

    cv2.rectangle(img, (margin_px, margin_px), (w - margin_px - 1, h - margin_px - 1), BED_OUTLINE, 1)

    # Travel first so draw strokes stay on top
    if show_travel:
        for move in moves:
            if move.kind is MoveKind.TRAVEL and move.length > 0:
                cv2.line(img, to_px(move.start), to_px(move.end), TRAVEL_COLOR, 1, cv2.LINE_AA)

    for move in moves:
        if move.kind is MoveKind.DRAW:
            cv2.line(img, to_px(move.start), to_px(move.end), DRAW_COLOR, 2, cv2.LINE_AA)

    return img


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render a pen-plotter G-code program to a PNG preview",
    )
    parser.add_argument("--gcode", type=str, required=True, help="Input G-code program")
    parser.add_argument("--output", type=str, required=True, help="Output PNG path")
    parser.add_argument(
        "--machine-config",
        type=str,
        default=None,
        help="Machine config YAML (default: shipped machine.yaml)",
    )
    parser.add_argument("--px-per-mm", type=float, default=1.0, help="Preview resolution")
    parser.add_argument("--no-travel", action="store_true", help="Hide pen-up travel moves")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    args = parse_args(argv)
    setup_logging(log_level=args.log_level, context={"app": "preview"})

    try:
        config = load_machine_config(args.machine_config)
    except (ConfigError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 2

    gcode_path = Path(args.gcode)
    if not gcode_path.exists():
        logger.error("G-code file not found: %s", gcode_path)
        return 2

    moves = MotionProgramCodec(config).parse(gcode_path.read_text(encoding="utf-8"))
    summary = summarize(moves)
    logger.info("Toolpath: %s", summary.format())

    violations = check_bed_limits(moves, config)
    if violations:
        logger.warning("%d bed-limit violations", len(violations))

    img = render_toolpath(moves, config, args.px_per_mm, show_travel=not args.no_travel)
    out = fs.save_raster(img, args.output)
    logger.info("Saved preview: %s", out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
