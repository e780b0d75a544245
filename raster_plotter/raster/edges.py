"""Sobel edge detection and binary thresholding.

Gx = [[-1,0,1],[-2,0,2],[-1,0,1]], Gy = [[-1,-2,-1],[0,0,0],[1,2,1]].
Magnitude = min(255, sqrt(Gx^2 + Gy^2)), truncated to uint8, interior only.
These are the kernels cv2.Sobel applies with ksize=3.
An edge pixel is one whose magnitude is strictly greater than the cutoff.
"""

import cv2
import numpy as np

DEFAULT_THRESHOLD = 40

SOBEL_X = np.array([
    [-1, 0, 1],
    [-2, 0, 2],
    [-1, 0, 1],
], dtype=np.int32)

SOBEL_Y = np.array([
    [-1, -2, -1],
    [0, 0, 0],
    [1, 2, 1],
], dtype=np.int32)


def sobel_magnitude(gray: np.ndarray) -> np.ndarray:
    """Gradient magnitude of a grayscale raster.

    Parameters
    ----------
    gray : np.ndarray
        Shape (H, W), dtype uint8

    Returns
    -------
    np.ndarray
        Shape (H, W), dtype uint8; border rows/columns are 0.
    """
    gray = np.asarray(gray)
    if gray.ndim != 2:
        raise ValueError(f"Expected 2-D raster, got shape {gray.shape}")

    h, w = gray.shape
    out = np.zeros((h, w), dtype=np.uint8)
    if h < 3 or w < 3:
        return out

    src = gray.astype(np.float32)
    gx = cv2.Sobel(src, cv2.CV_32F, 1, 0, ksize=3)[1:-1, 1:-1].astype(np.float64)
    gy = cv2.Sobel(src, cv2.CV_32F, 0, 1, ksize=3)[1:-1, 1:-1].astype(np.float64)

    mag = np.sqrt(gx ** 2 + gy ** 2)
    out[1:-1, 1:-1] = np.minimum(mag, 255.0).astype(np.uint8)
    return out


def threshold(magnitude: np.ndarray, cutoff: int = DEFAULT_THRESHOLD) -> np.ndarray:
    """Binary raster: 1 where magnitude > cutoff, else 0 (dtype uint8)."""
    return (np.asarray(magnitude) > cutoff).astype(np.uint8)


def detect_edges(gray: np.ndarray, cutoff: int = DEFAULT_THRESHOLD) -> np.ndarray:
    """Sobel magnitude followed by thresholding."""
    return threshold(sobel_magnitude(gray), cutoff)
