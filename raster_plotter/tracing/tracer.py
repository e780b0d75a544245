"""Pixel-walk path tracing over binary rasters.

Two strategies, kept separate because their constants differ:

Skeleton mode (canonical)
    Phase 1 starts a walk at every unvisited endpoint (interior foreground
    pixel with exactly one 8-neighbour), scanned row-major.  Phase 2 walks
    from every remaining unvisited interior foreground pixel, which picks up
    closed loops.  Neighbours are searched N, NE, E, SE, S, SW, W, NW.
    Minimum length 5 points, step cap 10000.

Raw-edge mode
    Single scan, no endpoint phase.  The walk remembers the direction of its
    last step and starts the neighbour search three positions counter-
    clockwise of it, which prefers continuing straight over doubling back.
    Minimum length 10 points, step cap 5000.

Walk rule: stop if the current pixel is already visited; otherwise mark it,
append it and move to the first unvisited foreground neighbour (image bounds
checked, border included).  The walk ends when no such neighbour exists or
the step cap is spent.

Visited state is one boolean array per trace call, so concurrent calls on
different rasters share nothing.  Paths shorter than the minimum are dropped
here, before simplification.
"""

import logging
from typing import Optional

import numpy as np

from raster_plotter.configs.loader import TraceMode, TracerConfig
from raster_plotter.raster.skeleton import neighbour_count, to_binary
from raster_plotter.types import Point, PointSequence

logger = logging.getLogger(__name__)

# (dx, dy) clockwise from north; image y grows downward
DIRECTIONS = (
    (0, -1),   # N
    (1, -1),   # NE
    (1, 0),    # E
    (1, 1),    # SE
    (0, 1),    # S
    (-1, 1),   # SW
    (-1, 0),   # W
    (-1, -1),  # NW
)

SKELETON_MIN_LENGTH = 5
SKELETON_STEP_CAP = 10000
EDGE_MIN_LENGTH = 10
EDGE_STEP_CAP = 5000


def _walk(
    img: np.ndarray,
    visited: np.ndarray,
    x: int,
    y: int,
    step_cap: int,
    directional: bool = False,
) -> PointSequence:
    """Follow unvisited foreground pixels from (x, y).

    With ``directional`` set the search order rotates to start at
    ``last_direction - 3`` (mod 8); otherwise it always starts at north.
    """
    h, w = img.shape
    path: PointSequence = []
    last_dir = 0

    for _ in range(step_cap):
        if visited[y, x]:
            break
        visited[y, x] = True
        path.append(Point(float(x), float(y)))

        offset = (last_dir + 5) % 8 if directional else 0
        found = False
        for k in range(8):
            d = (offset + k) % 8
            dx, dy = DIRECTIONS[d]
            nx, ny = x + dx, y + dy
            if 0 <= nx < w and 0 <= ny < h and img[ny, nx] and not visited[ny, nx]:
                x, y = nx, ny
                last_dir = d
                found = True
                break

        if not found:
            break

    return path


def _interior_foreground(img: np.ndarray) -> np.ndarray:
    """(row, col) of interior foreground pixels in row-major order."""
    mask = np.zeros(img.shape, dtype=bool)
    mask[1:-1, 1:-1] = img[1:-1, 1:-1] == 1
    return np.argwhere(mask)


def trace_skeleton(
    binary: np.ndarray,
    min_length: int = SKELETON_MIN_LENGTH,
    step_cap: int = SKELETON_STEP_CAP,
) -> list[PointSequence]:
    """Trace a thinned raster into pixel point sequences.

    Parameters
    ----------
    binary : np.ndarray
        Skeleton raster, shape (H, W); any non-zero value is foreground
    min_length : int
        Paths with fewer raw points are discarded
    step_cap : int
        Maximum points per path

    Returns
    -------
    list[PointSequence]
        Paths in discovery order, coordinates in pixels
    """
    img = to_binary(binary)
    h, w = img.shape
    if h < 3 or w < 3:
        return []

    visited = np.zeros((h, w), dtype=bool)
    paths: list[PointSequence] = []
    dropped = 0

    counts = neighbour_count(img)
    endpoints = np.argwhere((img == 1) & (counts == 1))
    for y, x in endpoints:
        if visited[y, x]:
            continue
        path = _walk(img, visited, int(x), int(y), step_cap)
        if len(path) >= min_length:
            paths.append(path)
        else:
            dropped += 1

    for y, x in _interior_foreground(img):
        if visited[y, x]:
            continue
        path = _walk(img, visited, int(x), int(y), step_cap)
        if len(path) >= min_length:
            paths.append(path)
        else:
            dropped += 1

    logger.debug(
        "Skeleton trace: %d endpoints, %d paths kept, %d dropped",
        len(endpoints), len(paths), dropped,
    )
    return paths


def trace_raw_edges(
    binary: np.ndarray,
    min_length: int = EDGE_MIN_LENGTH,
    step_cap: int = EDGE_STEP_CAP,
) -> list[PointSequence]:
    """Trace an un-thinned edge raster with direction-biased walks."""
    img = to_binary(binary)
    h, w = img.shape
    if h < 3 or w < 3:
        return []

    visited = np.zeros((h, w), dtype=bool)
    paths: list[PointSequence] = []

    for y, x in _interior_foreground(img):
        if visited[y, x]:
            continue
        path = _walk(img, visited, int(x), int(y), step_cap, directional=True)
        if len(path) >= min_length:
            paths.append(path)

    logger.debug("Raw-edge trace: %d paths kept", len(paths))
    return paths


def trace(
    binary: np.ndarray,
    mode: TraceMode = TraceMode.SKELETON,
    cfg: Optional[TracerConfig] = None,
) -> list[PointSequence]:
    """Dispatch to the tracing strategy for *mode*.

    Length minimum and step cap come from *cfg* when given, else from the
    module defaults for that mode.
    """
    mode = TraceMode(mode)
    if mode is TraceMode.SKELETON:
        if cfg is None:
            return trace_skeleton(binary)
        return trace_skeleton(binary, cfg.min_skeleton_path_len, cfg.skeleton_step_cap)
    if cfg is None:
        return trace_raw_edges(binary)
    return trace_raw_edges(binary, cfg.min_edge_path_len, cfg.edge_step_cap)
