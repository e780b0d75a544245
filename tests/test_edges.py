"""Tests for Sobel edge detection and thresholding."""

from __future__ import annotations

import numpy as np
import pytest

from raster_plotter.raster.edges import detect_edges, sobel_magnitude, threshold


def test_uniform_image_has_no_edges() -> None:
    gray = np.full((8, 8), 120, dtype=np.uint8)
    assert not sobel_magnitude(gray).any()
    assert not detect_edges(gray).any()


def test_vertical_step_saturates_and_marks_two_columns() -> None:
    gray = np.zeros((7, 7), dtype=np.uint8)
    gray[:, 3:] = 100
    mag = sobel_magnitude(gray)

    # |Gx| = 4 * 100 either side of the step, capped at 255
    assert (mag[1:-1, 2] == 255).all()
    assert (mag[1:-1, 3] == 255).all()
    assert (mag[1:-1, 1] == 0).all()
    assert (mag[1:-1, 4] == 0).all()

    edges = detect_edges(gray)
    assert edges.dtype == np.uint8
    assert set(np.unique(edges)) <= {0, 1}
    assert edges[:, 2:4].sum() == 10


def test_border_is_zero() -> None:
    gray = np.zeros((6, 6), dtype=np.uint8)
    gray[::2, :] = 255
    mag = sobel_magnitude(gray)
    assert not mag[0].any() and not mag[-1].any()
    assert not mag[:, 0].any() and not mag[:, -1].any()


def test_magnitude_is_truncated_not_rounded() -> None:
    gray = np.zeros((3, 3), dtype=np.uint8)
    gray[0, 2] = 11  # Gx = 11, Gy = -11 -> 15.56
    assert sobel_magnitude(gray)[1, 1] == 15


def test_threshold_is_strict() -> None:
    mag = np.array([[39, 40, 41, 255]], dtype=np.uint8)
    assert threshold(mag, 40).tolist() == [[0, 0, 1, 1]]


def test_custom_cutoff() -> None:
    gray = np.zeros((5, 5), dtype=np.uint8)
    gray[:, 2:] = 20  # |Gx| = 80 at the step
    assert detect_edges(gray, 40).any()
    assert not detect_edges(gray, 80).any()


def test_rejects_non_2d() -> None:
    with pytest.raises(ValueError):
        sobel_magnitude(np.zeros((4, 4, 3), dtype=np.uint8))


def test_magnitude_matches_kernel_definition() -> None:
    from raster_plotter.raster.edges import SOBEL_X, SOBEL_Y

    rng = np.random.default_rng(3)
    gray = rng.integers(0, 256, size=(40, 50), dtype=np.uint8)

    src = gray.astype(np.int64)
    gx = np.zeros((38, 48), dtype=np.int64)
    gy = np.zeros((38, 48), dtype=np.int64)
    for ky in range(3):
        for kx in range(3):
            window = src[ky:ky + 38, kx:kx + 48]
            gx += SOBEL_X[ky, kx] * window
            gy += SOBEL_Y[ky, kx] * window
    expected = np.zeros_like(gray)
    expected[1:-1, 1:-1] = np.minimum(np.sqrt(gx ** 2 + gy ** 2), 255).astype(np.uint8)

    np.testing.assert_array_equal(sobel_magnitude(gray), expected)


def test_blurred_white_image_edges_form_inner_frame() -> None:
    """The zeroed blur border reads as a step next to a bright interior."""
    from raster_plotter.raster.preprocess import gaussian_blur

    edges = detect_edges(gaussian_blur(np.full((10, 12), 255, dtype=np.uint8)))
    frame = np.zeros((10, 12), dtype=np.uint8)
    frame[1, 1:-1] = frame[-2, 1:-1] = 1
    frame[1:-1, 1] = frame[1:-1, -2] = 1
    np.testing.assert_array_equal(edges, frame)
