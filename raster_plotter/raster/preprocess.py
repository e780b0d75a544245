"""Raster preprocessing: size cap, grayscale conversion and blur.

Pipeline position:
    bitmap -> **preprocess** -> edges -> skeleton -> tracer

Steps:
    1. Downscale so max(width, height) <= max_size (single scale factor,
       aspect ratio preserved, floor of the scaled size)
    2. Grayscale via luma weights 0.299R + 0.587G + 0.114B, rounded
    3. 3x3 blur with kernel [[1,2,1],[2,4,2],[1,2,1]] / 16 on interior
       pixels only (the 1-pixel border stays 0)

Rounding is half-up everywhere so the output matches integer reference
arithmetic exactly; numpy's default banker's rounding would not.

All functions are pure: inputs are never modified.
"""

from pathlib import Path
from typing import Union

import cv2
import numpy as np
from PIL import Image

ImageLike = Union[Image.Image, np.ndarray]

# Luma weights (ITU-R BT.601)
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)

BLUR_KERNEL = np.array([
    [1, 2, 1],
    [2, 4, 2],
    [1, 2, 1],
], dtype=np.int32)
BLUR_DIVISOR = 16


def load_image(path: Union[str, Path]) -> Image.Image:
    """Open an image file as RGB.

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    with Image.open(path) as img:
        return img.convert('RGB')


def _to_pil(image: ImageLike) -> Image.Image:
    if isinstance(image, Image.Image):
        return image
    arr = np.asarray(image)
    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    return Image.fromarray(arr)


def downscale(image: ImageLike, max_size: int) -> Image.Image:
    """Shrink an image so its longest side is at most *max_size*.

    Parameters
    ----------
    image : PIL.Image.Image or np.ndarray
        Input bitmap
    max_size : int
        Cap on max(width, height) in pixels

    Returns
    -------
    PIL.Image.Image
        Resized image; images already within the cap are returned as-is.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be >= 1, got {max_size}")

    img = _to_pil(image)
    width, height = img.size
    if width <= max_size and height <= max_size:
        return img

    scale = max_size / max(width, height)
    new_w = max(1, int(width * scale))
    new_h = max(1, int(height * scale))
    return img.resize((new_w, new_h), Image.Resampling.BILINEAR)


def to_rgb_array(image: ImageLike) -> np.ndarray:
    """Convert a bitmap to an (H, W, 3) uint8 array.

    Grayscale inputs are broadcast to three channels; alpha is dropped.
    """
    if isinstance(image, Image.Image):
        return np.asarray(image.convert('RGB'), dtype=np.uint8)

    arr = np.asarray(image)
    if arr.ndim == 2:
        arr = np.stack([arr, arr, arr], axis=-1)
    elif arr.ndim == 3 and arr.shape[2] in (3, 4):
        arr = arr[:, :, :3]
    else:
        raise ValueError(f"Expected (H, W), (H, W, 3) or (H, W, 4) image, got shape {arr.shape}")

    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    return arr


def to_grayscale(rgb: np.ndarray) -> np.ndarray:
    """Luma grayscale, rounded half-up and clamped to [0, 255].

    Parameters
    ----------
    rgb : np.ndarray
        Shape (H, W, 3), any numeric dtype

    Returns
    -------
    np.ndarray
        Shape (H, W), dtype uint8
    """
    rgb = np.asarray(rgb)
    if rgb.ndim != 3 or rgb.shape[2] != 3:
        raise ValueError(f"Expected (H, W, 3) array, got shape {rgb.shape}")

    luma = rgb.astype(np.float64) @ LUMA_WEIGHTS
    return np.clip(np.floor(luma + 0.5), 0, 255).astype(np.uint8)


def gaussian_blur(gray: np.ndarray) -> np.ndarray:
    """Fixed 3x3 blur on interior pixels.

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

    # Sums stay below 2**24, exact in float32; border outputs are discarded
    acc = cv2.filter2D(gray.astype(np.float32), cv2.CV_32F, BLUR_KERNEL.astype(np.float32))
    acc = np.rint(acc[1:-1, 1:-1]).astype(np.int32)

    # Integer half-up rounding of acc / 16
    out[1:-1, 1:-1] = (acc + BLUR_DIVISOR // 2) // BLUR_DIVISOR
    return out


def preprocess(image: ImageLike, max_size: int = 1000) -> np.ndarray:
    """Downscale, grayscale and blur a bitmap.

    Returns
    -------
    np.ndarray
        Blurred grayscale raster, shape (H, W), dtype uint8
    """
    small = downscale(image, max_size)
    return gaussian_blur(to_grayscale(to_rgb_array(small)))
