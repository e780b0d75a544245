#!/usr/bin/env python3
"""Trace an image into a pen-plotter G-code program.

Loads the machine and tracer configuration (shipped defaults unless paths
are given), runs the full pipeline and writes the program atomically.  A
metadata YAML next to the program records the input hash, the settings
used and the toolpath summary.

Usage::

    raster-plotter-trace --image logo.png --output out/logo.gcode
    raster-plotter-trace --image logo.png --output out/logo.gcode \\
        --machine-config my_machine.yaml --mode raw_edge --log-level DEBUG
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from raster_plotter.configs.loader import (
    ConfigError,
    TraceMode,
    load_machine_config,
    load_tracer_config,
)
from raster_plotter.pipeline import image_to_program
from raster_plotter.raster.preprocess import load_image
from raster_plotter.utils import fs, hashing
from raster_plotter.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Trace a raster image into pen-plotter G-code",
    )
    parser.add_argument(
        "--image",
        type=str,
        required=True,
        help="Input image (PNG/JPEG/...)",
    )
    parser.add_argument(
        "--output",
        type=str,
        required=True,
        help="Output G-code path",
    )
    parser.add_argument(
        "--machine-config",
        type=str,
        default=None,
        help="Machine config YAML (default: shipped machine.yaml)",
    )
    parser.add_argument(
        "--tracer-config",
        type=str,
        default=None,
        help="Tracer config YAML (default: shipped tracer.yaml)",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in TraceMode],
        default=None,
        help="Override the tracing mode from the tracer config",
    )
    parser.add_argument(
        "--no-metadata",
        action="store_true",
        help="Do not write the metadata YAML next to the program",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional log file",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point."""
    args = parse_args(argv)
    setup_logging(log_level=args.log_level, log_file=args.log_file, context={"app": "trace"})

    try:
        machine_cfg = load_machine_config(args.machine_config)
        tracer_cfg = load_tracer_config(args.tracer_config)
    except (ConfigError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 2

    if args.mode is not None:
        tracer_cfg = tracer_cfg.model_copy(update={"mode": TraceMode(args.mode)})

    image_path = Path(args.image)
    try:
        image = load_image(image_path)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 2

    result = image_to_program(image, machine_cfg, tracer_cfg)

    out_path = Path(args.output)
    fs.atomic_write_text(out_path, result.program)
    logger.info("Wrote %s (%d paths)", out_path, len(result.ordered))

    if not args.no_metadata:
        s = result.summary
        metadata = {
            "image": str(image_path),
            "image_sha256": hashing.sha256_file(image_path),
            "program_sha256": hashing.sha256_bytes(result.program.encode("utf-8")),
            "num_paths": len(result.ordered),
            "machine": machine_cfg.model_dump(mode="json"),
            "tracer": tracer_cfg.model_dump(mode="json"),
            "summary": {
                "draw_moves": s.draw_moves,
                "travel_moves": s.travel_moves,
                "draw_length_mm": round(s.draw_length_mm, 3),
                "travel_length_mm": round(s.travel_length_mm, 3),
                "estimated_time_s": round(s.estimated_time_s, 1),
            },
            "violations": list(result.violations),
        }
        metadata_path = out_path.with_name(f"{out_path.stem}_metadata.yaml")
        fs.atomic_yaml_dump(metadata, metadata_path)
        logger.info("Saved metadata: %s", metadata_path)

    return 0


if __name__ == "__main__":
    sys.exit(main())
