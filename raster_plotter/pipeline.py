"""End-to-end raster-to-program pipeline.

Stages::

    image -> preprocess -> detect_edges -> [skeletonize] -> trace
          -> simplify -> encode -> order_paths -> emit -> parse -> summarize

Every stage is a plain synchronous function over buffers it owns, so
independent runs can execute concurrently without coordination.

Remote tracing
    An external tracing service may stand in for the local edge detector.
    It is modelled as a callable ``provider(image, options)`` returning a
    processed edge image, or ``None`` when it produced nothing.  The image
    it returns goes through the same local stages, so downstream behaviour
    does not depend on which source supplied the raster.  Any exception the
    provider raises is logged here and the local image is traced instead;
    nothing from the provider propagates further.

Usage::

    from raster_plotter.pipeline import image_to_program
    from raster_plotter.raster import load_image

    result = image_to_program(load_image("drawing.png"))
    print(result.summary.format())
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from raster_plotter.configs.loader import MachineConfig, TraceMode, TracerConfig
from raster_plotter.gcode.codec import MotionProgramCodec
from raster_plotter.gcode.ordering import order_paths, travel_distance
from raster_plotter.gcode.toolpath import ToolpathSummary, check_bed_limits, summarize
from raster_plotter.raster.edges import detect_edges
from raster_plotter.raster.preprocess import ImageLike, preprocess
from raster_plotter.raster.skeleton import skeletonize
from raster_plotter.tracing.curves import VectorPath, encode
from raster_plotter.tracing.simplify import simplify
from raster_plotter.tracing.tracer import trace
from raster_plotter.types import ToolpathMove
from raster_plotter.utils import fs, hashing

logger = logging.getLogger(__name__)

RemoteProvider = Callable[[ImageLike, Dict[str, Any]], Optional[ImageLike]]

# Binarisation threshold requested from the remote service
REMOTE_THRESHOLD = 128


@dataclass(frozen=True)
class PipelineResult:
    """Everything one run produces.

    Attributes
    ----------
    paths : List[VectorPath]
        Encoded paths in discovery order (pixels)
    ordered : List[VectorPath]
        Same paths in drawing order
    program : str
        Emitted G-code
    toolpath : List[ToolpathMove]
        ``program`` parsed back into moves (mm)
    summary : ToolpathSummary
        Lengths, counts and time estimate of ``toolpath``
    violations : List[str]
        Bed-limit violations found in ``toolpath``
    """

    paths: List[VectorPath]
    ordered: List[VectorPath]
    program: str
    toolpath: List[ToolpathMove]
    summary: ToolpathSummary
    violations: List[str]


def _dump(raster: np.ndarray, name: str, tracer_cfg: TracerConfig) -> None:
    if tracer_cfg.debug.save_intermediates:
        path = fs.save_raster(raster, Path(tracer_cfg.debug.output_dir) / name)
        logger.debug("Wrote %s", path)


def extract_paths(
    image: ImageLike,
    tracer_cfg: Optional[TracerConfig] = None,
    machine_cfg: Optional[MachineConfig] = None,
) -> List[VectorPath]:
    """Trace a bitmap into smoothed vector paths (pixel coordinates).

    Parameters
    ----------
    image : PIL.Image.Image or np.ndarray
        Input bitmap, any size
    tracer_cfg : TracerConfig, optional
        Raster and tracing settings; model defaults when omitted
    machine_cfg : MachineConfig, optional
        Supplies the fallback simplification tolerance

    Returns
    -------
    List[VectorPath]
        One path per retained stroke; empty for blank or degenerate input
    """
    tracer_cfg = tracer_cfg or TracerConfig()
    machine_cfg = machine_cfg or MachineConfig()

    gray = preprocess(image, tracer_cfg.max_size_px)
    logger.debug("Preprocessed raster %dx%d (sha256 %s)",
                 gray.shape[1], gray.shape[0], hashing.sha256_array(gray)[:12])
    _dump(gray, "gray.png", tracer_cfg)

    binary = detect_edges(gray, tracer_cfg.edge_threshold)
    logger.debug("Edge pixels: %d", int(binary.sum()))
    _dump(binary, "edges.png", tracer_cfg)

    if tracer_cfg.mode is TraceMode.SKELETON:
        binary = skeletonize(binary, tracer_cfg.max_thin_iterations)
        _dump(binary, "skeleton.png", tracer_cfg)

    raw_paths = trace(binary, tracer_cfg.mode, tracer_cfg)

    tolerance = tracer_cfg.resolve_tolerance(machine_cfg)
    paths = [encode(simplify(points, tolerance)) for points in raw_paths]

    logger.info("Traced %d paths (%s mode, tolerance %.2f px)",
                len(paths), tracer_cfg.mode.value, tolerance)
    return paths


def trace_with_fallback(
    image: ImageLike,
    provider: Optional[RemoteProvider],
    tracer_cfg: Optional[TracerConfig] = None,
    machine_cfg: Optional[MachineConfig] = None,
) -> List[VectorPath]:
    """Trace via the remote provider, falling back to the local image.

    Parameters
    ----------
    image : PIL.Image.Image or np.ndarray
        Original bitmap
    provider : RemoteProvider or None
        ``provider(image, {"threshold": 128, "simplify": tol})``; ``None``
        skips the remote step
    tracer_cfg, machine_cfg : optional
        As for ``extract_paths``

    Returns
    -------
    List[VectorPath]
        Paths from the provider's edge image, from the local image when the
        provider failed, or none when the provider returned nothing
    """
    machine_cfg = machine_cfg or MachineConfig()

    if provider is not None:
        options = {
            "threshold": REMOTE_THRESHOLD,
            "simplify": machine_cfg.simplify_tolerance,
        }
        try:
            edge_image = provider(image, options)
        except Exception as e:
            logger.warning("Remote trace failed, falling back to local tracing: %s", e)
        else:
            if edge_image is None:
                logger.info("Remote trace returned no edge image")
                return []
            return extract_paths(edge_image, tracer_cfg, machine_cfg)

    return extract_paths(image, tracer_cfg, machine_cfg)


def paths_to_program(
    paths: List[VectorPath],
    machine_cfg: Optional[MachineConfig] = None,
) -> PipelineResult:
    """Order, emit, parse back and summarise already-traced paths."""
    machine_cfg = machine_cfg or MachineConfig()
    codec = MotionProgramCodec(machine_cfg)

    ordered = order_paths(paths)
    logger.debug("Pen-up travel after ordering: %.1f px (was %.1f px)",
                 travel_distance(ordered), travel_distance(paths))

    program = codec.emit(ordered)
    toolpath = codec.parse(program)
    summary = summarize(toolpath)
    violations = check_bed_limits(toolpath, machine_cfg)

    logger.info("Program: %s", summary.format())
    if violations:
        logger.warning("%d bed-limit violations", len(violations))

    return PipelineResult(
        paths=list(paths),
        ordered=ordered,
        program=program,
        toolpath=toolpath,
        summary=summary,
        violations=violations,
    )


def image_to_program(
    image: ImageLike,
    machine_cfg: Optional[MachineConfig] = None,
    tracer_cfg: Optional[TracerConfig] = None,
    provider: Optional[RemoteProvider] = None,
) -> PipelineResult:
    """Run the whole pipeline on one bitmap.

    Parameters
    ----------
    image : PIL.Image.Image or np.ndarray
        Input bitmap
    machine_cfg : MachineConfig, optional
        Machine settings; model defaults when omitted
    tracer_cfg : TracerConfig, optional
        Tracing settings; model defaults when omitted
    provider : RemoteProvider, optional
        Remote edge-image source, tried before local tracing

    Returns
    -------
    PipelineResult
    """
    machine_cfg = machine_cfg or MachineConfig()
    paths = trace_with_fallback(image, provider, tracer_cfg, machine_cfg)
    return paths_to_program(paths, machine_cfg)
