"""
Canvas resampling: orientation normalization and square cover-fit resizing.

All sizes here are pixel counts of the decoded image. Images are never
modified in place; every operation returns a new image.
"""

from __future__ import annotations

import io
import logging
import math

from PIL import Image, UnidentifiedImageError

from .errors import InvalidGeometryError, InvalidImageDataError

logger = logging.getLogger(__name__)

ORIENTATION_TAG = 0x0112

# Modes Pillow can write as PNG without conversion
PNG_MODES = frozenset({"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"})

# EXIF orientation value -> transposes that bring pixels to top-left origin,
# rows left-to-right, top-to-bottom.
ORIENTATION_TRANSPOSES: dict[int, tuple[Image.Transpose, ...]] = {
    1: (),
    2: (Image.Transpose.FLIP_LEFT_RIGHT,),
    3: (Image.Transpose.ROTATE_180,),
    4: (Image.Transpose.FLIP_TOP_BOTTOM,),
    5: (Image.Transpose.TRANSPOSE,),
    6: (Image.Transpose.ROTATE_270,),
    7: (Image.Transpose.TRANSVERSE,),
    8: (Image.Transpose.ROTATE_90,),
}


def get_orientation(image: Image.Image) -> int:
    """Return the EXIF orientation tag, 1 when absent or unknown."""
    try:
        orientation = image.getexif().get(ORIENTATION_TAG, 1)
    except (OSError, SyntaxError, ValueError):
        # Corrupt EXIF blocks are treated as "no metadata"
        return 1
    return orientation if orientation in ORIENTATION_TRANSPOSES else 1


def normalize(image: Image.Image) -> Image.Image:
    """
    Bake any orientation metadata into the pixel grid.

    Returns a copy whose pixels are in display order and which carries no
    orientation tag, so naive pixel access sees what a viewer would show.
    """
    orientation = get_orientation(image)
    result = image.copy()
    for method in ORIENTATION_TRANSPOSES[orientation]:
        result = result.transpose(method)

    if orientation != 1:
        logger.debug("Normalized orientation %d -> %dx%d", orientation, *result.size)
    result.info.pop("exif", None)
    return result


def resize_to_square(image: Image.Image, side: int) -> Image.Image:
    """
    Resize to fill a side x side canvas, center-cropping the overflow.

    Args:
        image: Source image of any aspect ratio.
        side: Output width and height in pixels.

    Returns:
        A new image of exactly (side, side). No letterboxing.

    Raises:
        InvalidGeometryError: If side < 1 or the image has zero area.
    """
    if side < 1:
        raise InvalidGeometryError(f"Square side must be positive, got {side}")
    source_width, source_height = image.size
    if source_width <= 0 or source_height <= 0:
        raise InvalidGeometryError(
            f"Cannot resize a {source_width}x{source_height} image"
        )

    if image.size == (side, side):
        return image.copy()

    scale = max(side / source_width, side / source_height)
    # ceil keeps both axes >= side despite float error
    new_width = max(side, math.ceil(source_width * scale - 1e-9))
    new_height = max(side, math.ceil(source_height * scale - 1e-9))

    resized = image.resize((new_width, new_height), Image.Resampling.LANCZOS)
    left = (new_width - side) // 2
    top = (new_height - side) // 2
    return resized.crop((left, top, left + side, top + side))


def to_png_mode(image: Image.Image) -> Image.Image:
    """
    Convert images PNG cannot store (CMYK, YCbCr, LAB, ...) to RGB.

    RGBA is used instead when the image carries transparency. Modes PNG
    already supports are returned unchanged.
    """
    if image.mode in PNG_MODES:
        return image
    # Premultiplied modes (RGBa, La) name their alpha band "a"
    has_alpha = bool({"A", "a"} & set(image.getbands())) or "transparency" in image.info
    target = "RGBA" if has_alpha else "RGB"
    logger.debug("Converting %s image to %s", image.mode, target)
    return image.convert(target)


def load_image(data: bytes) -> Image.Image:
    """
    Decode image bytes, normalize their orientation and make them PNG-safe.

    Raises:
        InvalidImageDataError: If the bytes are not a decodable image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return to_png_mode(normalize(img))
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise InvalidImageDataError(f"Could not decode image data: {e}") from e


def image_to_png(image: Image.Image) -> bytes:
    """
    Encode an image as PNG bytes.

    Raises:
        InvalidImageDataError: If the image mode cannot be written as PNG.
    """
    buffer = io.BytesIO()
    try:
        image.save(buffer, format="PNG")
    except (OSError, ValueError, KeyError) as e:
        raise InvalidImageDataError(
            f"Could not encode {image.mode} image as PNG: {e}"
        ) from e
    return buffer.getvalue()
