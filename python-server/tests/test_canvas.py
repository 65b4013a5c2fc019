"""Tests for orientation normalization and square resizing."""

import io

import numpy as np
import pytest
from PIL import Image

from services.canvas import (
    ORIENTATION_TAG,
    get_orientation,
    image_to_png,
    load_image,
    normalize,
    resize_to_square,
    to_png_mode,
)
from services.errors import InvalidGeometryError, InvalidImageDataError

RED = (255, 0, 0)
BLUE = (0, 0, 255)


def two_tone(width: int = 4, height: int = 2) -> Image.Image:
    """Left half red, right half blue."""
    img = Image.new("RGB", (width, height), RED)
    img.paste(BLUE, (width // 2, 0, width, height))
    return img


def png_with_orientation(img: Image.Image, orientation: int) -> bytes:
    exif = Image.Exif()
    exif[ORIENTATION_TAG] = orientation
    buffer = io.BytesIO()
    img.save(buffer, format="PNG", exif=exif)
    return buffer.getvalue()


class TestNormalize:
    """Orientation metadata is baked into pixels."""

    def test_upright_image_is_unchanged(self):
        img = two_tone()
        result = normalize(img)

        assert result is not img
        assert np.array_equal(np.array(result), np.array(img))

    def test_rotated_six_turns_image_upright(self):
        """Orientation 6 means the viewer rotates 90 degrees clockwise."""
        loaded = load_image(png_with_orientation(two_tone(4, 2), 6))

        assert loaded.size == (2, 4)
        # Red (left) half ends up on top after a clockwise turn
        assert loaded.getpixel((0, 0)) == RED
        assert loaded.getpixel((1, 3)) == BLUE

    def test_mirrored_two_flips_horizontally(self):
        loaded = load_image(png_with_orientation(two_tone(4, 2), 2))

        assert loaded.size == (4, 2)
        assert loaded.getpixel((0, 0)) == BLUE
        assert loaded.getpixel((3, 1)) == RED

    def test_result_carries_no_orientation(self):
        loaded = load_image(png_with_orientation(two_tone(4, 2), 8))

        assert get_orientation(loaded) == 1
        assert get_orientation(normalize(loaded)) == 1


class TestResizeToSquare:
    """Cover-fit resize with center crop."""

    @pytest.mark.parametrize(
        "size", [(1, 1), (640, 480), (480, 640), (3000, 17), (17, 3000), (512, 512)]
    )
    @pytest.mark.parametrize("side", [256, 512])
    def test_output_is_always_exactly_side(self, size, side):
        result = resize_to_square(Image.new("RGB", size, (40, 80, 120)), side)

        assert result.size == (side, side)

    def test_idempotent_on_target_size(self):
        rng = np.random.default_rng(7)
        img = Image.fromarray(rng.integers(0, 256, (300, 500, 3), dtype=np.uint8))

        once = resize_to_square(img, 128)
        twice = resize_to_square(once, 128)

        assert np.array_equal(np.array(once), np.array(twice))

    def test_crops_excess_on_longer_axis(self):
        """A 2:1 image keeps its middle half; no letterbox bars."""
        img = Image.new("RGB", (200, 100), RED)
        img.paste(BLUE, (50, 0, 150, 100))

        result = np.array(resize_to_square(img, 100))

        # Centre stripe is what survives
        assert tuple(result[50, 50]) == BLUE
        assert tuple(result[50, 5]) == BLUE
        assert tuple(result[50, 94]) == BLUE

    def test_does_not_modify_input(self):
        img = Image.new("RGB", (64, 32), RED)
        before = np.array(img).copy()

        resize_to_square(img, 16)

        assert img.size == (64, 32)
        assert np.array_equal(np.array(img), before)

    def test_invalid_side_raises(self):
        with pytest.raises(InvalidGeometryError):
            resize_to_square(Image.new("RGB", (10, 10)), 0)


class TestEncodeDecode:
    """PNG encoding and image decoding failures."""

    def test_load_rejects_non_image_bytes(self):
        with pytest.raises(InvalidImageDataError):
            load_image(b"definitely not an image")

    def test_png_encode_rejects_unsupported_mode(self):
        with pytest.raises(InvalidImageDataError):
            image_to_png(Image.new("CMYK", (4, 4)))

    def test_png_bytes_decode_to_same_size(self):
        data = image_to_png(Image.new("RGBA", (7, 3), (1, 2, 3, 4)))

        assert load_image(data).size == (7, 3)

    def test_cmyk_jpeg_loads_as_png_safe_rgb(self):
        buffer = io.BytesIO()
        Image.new("CMYK", (6, 4), (0, 255, 255, 0)).save(buffer, format="JPEG")

        img = load_image(buffer.getvalue())

        assert img.mode == "RGB"
        assert img.size == (6, 4)
        assert image_to_png(img).startswith(b"\x89PNG")

    def test_transparent_modes_keep_alpha(self):
        img = to_png_mode(Image.new("RGBa", (3, 3)))

        assert img.mode == "RGBA"

    def test_png_modes_are_left_alone(self):
        original = Image.new("L", (3, 3))

        assert to_png_mode(original) is original

    def test_ycbcr_is_converted_to_rgb(self):
        assert to_png_mode(Image.new("YCbCr", (3, 3))).mode == "RGB"
