"""
Tests for mask rasterization.

Tests cover:
- Inpaint strokes: size, exact alpha values, display-to-source scaling
- Outpaint bands: exact cleared region for a range of scales
- has_mask for both modes
- Outpaint base canvas alignment with its mask
- Zero-area targets
"""

import numpy as np
import pytest
from PIL import Image

from schemas.masks import DisplaySize, InpaintMask, OutpaintMask, Point2D
from services.errors import InvalidGeometryError
from services.masks import (
    has_mask,
    outpaint_content_bounds,
    prepare_outpaint_base,
    rasterize,
)


def stroke(*points: tuple[float, float]) -> list[Point2D]:
    return [Point2D(x=x, y=y) for x, y in points]


def alpha_of(mask: Image.Image) -> np.ndarray:
    return np.array(mask)[..., 3]


class TestInpaintRasterization:
    """Strokes clear alpha along their path."""

    def test_output_matches_source_size_and_mode(self):
        spec = InpaintMask(strokes=[stroke((10, 10), (50, 10))], strokeWidth=4)
        mask = rasterize(spec, (64, 48))

        assert mask.size == (64, 48)
        assert mask.mode == "RGBA"

    def test_alpha_is_binary(self):
        spec = InpaintMask(
            strokes=[stroke((5, 5), (60, 40), (10, 40)), stroke((30, 2), (30, 45))],
            strokeWidth=7,
        )
        alpha = alpha_of(rasterize(spec, (64, 48)))

        assert set(np.unique(alpha).tolist()) == {0, 255}

    def test_stroke_path_is_cleared_and_far_pixels_kept(self):
        spec = InpaintMask(strokes=[stroke((10, 20), (50, 20))], strokeWidth=6)
        pixels = np.array(rasterize(spec, (64, 48)))

        # Along the path
        for x in (10, 20, 30, 40, 50):
            assert tuple(pixels[20, x]) == (0, 0, 0, 0)
        # Well outside the stroke width
        assert tuple(pixels[5, 30]) == (255, 255, 255, 255)
        assert tuple(pixels[40, 30]) == (255, 255, 255, 255)

    def test_round_caps_extend_past_endpoints(self):
        spec = InpaintMask(strokes=[stroke((20, 20), (40, 20))], strokeWidth=10)
        alpha = alpha_of(rasterize(spec, (64, 48)))

        assert alpha[20, 17] == 0  # within radius before the start
        assert alpha[20, 43] == 0  # within radius after the end
        assert alpha[20, 10] == 255

    def test_single_point_stroke_draws_a_dot(self):
        spec = InpaintMask(strokes=[stroke((32, 24))], strokeWidth=8)
        alpha = alpha_of(rasterize(spec, (64, 48)))

        assert alpha[24, 32] == 0
        assert alpha[24, 40] == 255
        assert (alpha == 0).sum() > 20

    def test_overlapping_strokes_do_not_accumulate(self):
        once = InpaintMask(strokes=[stroke((5, 5), (50, 40))], strokeWidth=6)
        twice = InpaintMask(
            strokes=[stroke((5, 5), (50, 40)), stroke((5, 5), (50, 40))], strokeWidth=6
        )

        assert np.array_equal(
            np.array(rasterize(once, (64, 48))), np.array(rasterize(twice, (64, 48)))
        )

    def test_display_points_scale_to_source(self):
        """A stroke drawn on a 100x100 preview lands at 4x on a 400x400 image."""
        spec = InpaintMask(
            strokes=[stroke((25, 50), (75, 50))],
            strokeWidth=2,
            displaySize=DisplaySize(width=100, height=100),
        )
        alpha = alpha_of(rasterize(spec, (400, 400)))

        assert alpha[200, 100] == 0
        assert alpha[200, 300] == 0
        assert alpha[50, 50] == 255
        # Width 2 display units -> 8 source pixels
        assert alpha[203, 200] == 0
        assert alpha[210, 200] == 255

    def test_cleared_pixels_lie_within_dilated_path(self):
        spec = InpaintMask(strokes=[stroke((10, 24), (54, 24))], strokeWidth=8)
        alpha = alpha_of(rasterize(spec, (64, 48)))

        ys, xs = np.nonzero(alpha == 0)
        # Horizontal segment: every cleared pixel within radius (+1px rounding)
        assert np.all(np.abs(ys - 24) <= 5)
        assert xs.min() >= 10 - 5 and xs.max() <= 54 + 5

    def test_empty_strokes_are_skipped(self):
        spec = InpaintMask(strokes=[[]], strokeWidth=8)
        alpha = alpha_of(rasterize(spec, (16, 16)))

        assert np.all(alpha == 255)


class TestOutpaintRasterization:
    """Bands outside the content rectangle are cleared."""

    @pytest.mark.parametrize("scale", [0.4, 0.5, 0.65, 0.8, 0.95])
    def test_clears_exactly_the_border_bands(self, scale):
        width, height = 200, 120
        alpha = alpha_of(rasterize(OutpaintMask(scale=scale), (width, height)))
        left, top, right, bottom = outpaint_content_bounds((width, height), scale)

        expected = np.zeros((height, width), dtype=np.uint8)
        expected[top:bottom, left:right] = 255
        assert np.array_equal(alpha, expected)

    def test_content_rect_is_centered_and_scaled(self):
        left, top, right, bottom = outpaint_content_bounds((200, 100), 0.5)

        assert (left, top, right, bottom) == (50, 25, 150, 75)

    def test_scale_one_has_no_mask(self):
        spec = OutpaintMask(scale=1.0)

        assert has_mask(spec) is False
        assert np.all(alpha_of(rasterize(spec, (32, 32))) == 255)


class TestHasMask:
    """Whether a specification marks anything."""

    def test_inpaint_without_strokes(self):
        assert has_mask(InpaintMask()) is False
        assert has_mask(InpaintMask(strokes=[[]])) is False

    def test_inpaint_with_stroke(self):
        assert has_mask(InpaintMask(strokes=[stroke((1, 1))])) is True

    def test_outpaint_epsilon(self):
        assert has_mask(OutpaintMask(scale=0.9995)) is False
        assert has_mask(OutpaintMask(scale=0.95)) is True


class TestOutpaintBase:
    """Shrunken base image aligned with the mask."""

    def test_base_keeps_source_size_and_aligns_with_mask(self):
        source = Image.new("RGB", (100, 80), (10, 200, 30))
        base = prepare_outpaint_base(source, 0.5)
        mask_alpha = alpha_of(rasterize(OutpaintMask(scale=0.5), source.size))
        base_alpha = np.array(base)[..., 3]

        assert base.size == source.size
        assert base.mode == "RGBA"
        assert np.array_equal(base_alpha, mask_alpha)

    def test_base_center_holds_image_pixels(self):
        source = Image.new("RGB", (100, 80), (10, 200, 30))
        base = prepare_outpaint_base(source, 0.6)

        assert base.getpixel((50, 40)) == (10, 200, 30, 255)
        assert base.getpixel((0, 0)) == (0, 0, 0, 0)


class TestInvalidGeometry:
    """Zero-area targets are rejected."""

    @pytest.mark.parametrize("size", [(0, 10), (10, 0), (0, 0)])
    def test_zero_area_raises(self, size):
        with pytest.raises(InvalidGeometryError):
            rasterize(OutpaintMask(scale=0.5), size)

    def test_zero_area_inpaint_raises(self):
        with pytest.raises(InvalidGeometryError):
            rasterize(InpaintMask(strokes=[stroke((1, 1))]), (0, 0))
