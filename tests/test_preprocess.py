"""Tests for raster preprocessing.

Tests:
    - Luma grayscale values and clamping
    - Interior-only 3x3 blur with half-up rounding
    - Aspect-preserving downscale with floor sizing
    - Array / PIL input normalisation
    - Image loading
"""

from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from raster_plotter.raster import preprocess as pp


class TestGrayscale:
    @pytest.mark.parametrize("rgb, expected", [
        ((255, 0, 0), 76),
        ((0, 255, 0), 150),
        ((0, 0, 255), 29),
        ((128, 128, 128), 128),
        ((255, 255, 255), 255),
        ((0, 0, 0), 0),
    ])
    def test_luma_values(self, rgb, expected) -> None:
        arr = np.array([[rgb]], dtype=np.uint8)
        assert pp.to_grayscale(arr)[0, 0] == expected

    def test_output_dtype_and_shape(self) -> None:
        arr = np.zeros((4, 7, 3), dtype=np.uint8)
        gray = pp.to_grayscale(arr)
        assert gray.shape == (4, 7)
        assert gray.dtype == np.uint8

    def test_out_of_range_input_clamped(self) -> None:
        arr = np.array([[[400.0, 400.0, 400.0], [-5.0, -5.0, -5.0]]])
        gray = pp.to_grayscale(arr)
        assert gray.tolist() == [[255, 0]]

    def test_rejects_wrong_shape(self) -> None:
        with pytest.raises(ValueError):
            pp.to_grayscale(np.zeros((4, 4), dtype=np.uint8))


class TestBlur:
    def test_uniform_interior_unchanged_border_zero(self) -> None:
        gray = np.full((5, 6), 100, dtype=np.uint8)
        out = pp.gaussian_blur(gray)
        assert (out[1:-1, 1:-1] == 100).all()
        assert (out[0, :] == 0).all() and (out[-1, :] == 0).all()
        assert (out[:, 0] == 0).all() and (out[:, -1] == 0).all()

    def test_half_rounds_up(self) -> None:
        gray = np.zeros((5, 5), dtype=np.uint8)
        gray[2, 2] = 2  # centre weight 4 -> 8/16 = 0.5
        out = pp.gaussian_blur(gray)
        assert out[2, 2] == 1
        assert out[1, 2] == 0  # 4/16

    def test_kernel_weights(self) -> None:
        gray = np.zeros((5, 5), dtype=np.uint8)
        gray[2, 2] = 160
        out = pp.gaussian_blur(gray)
        assert out[2, 2] == 40   # 160 * 4 / 16
        assert out[1, 2] == 20   # 160 * 2 / 16
        assert out[1, 1] == 10   # 160 * 1 / 16

    def test_input_not_modified(self) -> None:
        gray = np.arange(36, dtype=np.uint8).reshape(6, 6)
        before = gray.copy()
        pp.gaussian_blur(gray)
        np.testing.assert_array_equal(gray, before)

    def test_tiny_raster_all_zero(self) -> None:
        out = pp.gaussian_blur(np.full((2, 2), 200, dtype=np.uint8))
        assert out.shape == (2, 2)
        assert not out.any()


class TestDownscale:
    def test_within_cap_returned_unchanged(self) -> None:
        img = Image.new("RGB", (300, 200))
        assert pp.downscale(img, 1000) is img

    def test_single_factor_preserves_aspect(self) -> None:
        img = Image.new("RGB", (2000, 1000))
        assert pp.downscale(img, 1000).size == (1000, 500)

    def test_floor_of_scaled_size(self) -> None:
        img = Image.new("RGB", (1001, 333))
        # 333 * 1000 / 1001 = 332.67
        assert pp.downscale(img, 1000).size == (1000, 332)

    def test_accepts_array(self) -> None:
        arr = np.zeros((40, 80, 3), dtype=np.uint8)
        assert pp.downscale(arr, 20).size == (20, 10)

    def test_invalid_cap(self) -> None:
        with pytest.raises(ValueError):
            pp.downscale(Image.new("RGB", (4, 4)), 0)


class TestInputs:
    def test_gray_array_broadcast(self) -> None:
        arr = np.full((3, 4), 7, dtype=np.uint8)
        rgb = pp.to_rgb_array(arr)
        assert rgb.shape == (3, 4, 3)
        assert (rgb == 7).all()

    def test_alpha_dropped(self) -> None:
        arr = np.zeros((3, 4, 4), dtype=np.uint8)
        arr[..., 3] = 255
        rgb = pp.to_rgb_array(arr)
        assert rgb.shape == (3, 4, 3)
        assert not rgb.any()

    def test_pil_grayscale_converted(self) -> None:
        img = Image.new("L", (5, 3), color=90)
        rgb = pp.to_rgb_array(img)
        assert rgb.shape == (3, 5, 3)
        assert (rgb == 90).all()

    def test_bad_shape(self) -> None:
        with pytest.raises(ValueError):
            pp.to_rgb_array(np.zeros((3, 4, 2), dtype=np.uint8))

    def test_load_image_rgb(self, tmp_path) -> None:
        path = tmp_path / "in.png"
        Image.new("RGBA", (6, 4), color=(10, 20, 30, 128)).save(path)
        img = pp.load_image(path)
        assert img.mode == "RGB"
        assert img.size == (6, 4)

    def test_load_image_missing(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            pp.load_image(tmp_path / "missing.png")


def test_preprocess_chain() -> None:
    img = np.full((30, 50, 3), 200, dtype=np.uint8)
    out = pp.preprocess(img, max_size=25)
    assert out.shape == (15, 25)
    assert out.dtype == np.uint8
    assert (out[1:-1, 1:-1] == 200).all()
    assert (out[0] == 0).all()


def test_package_attribute_is_the_submodule() -> None:
    """``raster_plotter.raster.preprocess`` names the module, not the chain function."""
    import types

    import raster_plotter.raster as raster

    assert isinstance(pp, types.ModuleType)
    assert raster.preprocess is pp
    assert callable(pp.preprocess)


def test_blur_matches_integer_kernel_sum() -> None:
    rng = np.random.default_rng(7)
    gray = rng.integers(0, 256, size=(40, 50), dtype=np.uint8)

    src = gray.astype(np.int64)
    acc = np.zeros((38, 48), dtype=np.int64)
    for ky in range(3):
        for kx in range(3):
            acc += pp.BLUR_KERNEL[ky, kx] * src[ky:ky + 38, kx:kx + 48]
    expected = np.zeros_like(gray)
    expected[1:-1, 1:-1] = (acc + 8) // 16

    np.testing.assert_array_equal(pp.gaussian_blur(gray), expected)
