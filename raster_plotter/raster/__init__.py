"""Raster stages: preprocessing, edge detection and thinning.

Modules:
    - preprocess: size cap, luma grayscale, 3x3 blur
    - edges: Sobel magnitude + binary threshold
    - skeleton: Zhang-Suen thinning

All rasters are 2-D uint8 numpy arrays; binary rasters hold {0, 1}.

The ``preprocess`` chain function is not re-exported here so that
``raster_plotter.raster.preprocess`` always names the submodule.
"""

from raster_plotter.raster.edges import detect_edges, sobel_magnitude, threshold
from raster_plotter.raster.preprocess import (
    downscale,
    gaussian_blur,
    load_image,
    to_grayscale,
    to_rgb_array,
)
from raster_plotter.raster.skeleton import neighbour_count, skeletonize, to_binary

__all__ = [
    "detect_edges",
    "downscale",
    "gaussian_blur",
    "load_image",
    "neighbour_count",
    "skeletonize",
    "sobel_magnitude",
    "threshold",
    "to_binary",
    "to_grayscale",
    "to_rgb_array",
]
