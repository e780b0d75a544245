"""Raster Plotter: raster image to pen-plotter G-code.

This package turns a bitmap into a single-line drawing program for a
pen plotter or drag-knife cutter, and parses such programs back into a
toolpath for preview.

Architecture layers (strict one-way dependency):
    scripts/ -> pipeline -> {raster, tracing, gcode}/ -> {configs, utils, types}

Key invariants:
    - Raster stages work in pixels; the motion program is in millimetres
    - Every stage returns a new buffer and never mutates its input
    - YAML-only configs, validated by pydantic
    - Output text is byte-deterministic for identical input and config
"""

__version__ = "1.0.0"
