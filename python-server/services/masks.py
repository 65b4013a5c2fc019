"""
Mask rasterization for inpainting and outpainting.

The provider's edit endpoint reads the mask's alpha channel:
- alpha 0   -> region to regenerate
- alpha 255 -> region to preserve

Masks are drawn without anti-aliasing so every pixel is exactly one of the
two values. Cleared pixels are (0, 0, 0, 0); preserved pixels are opaque white.
"""

from __future__ import annotations

import logging

import numpy as np
from PIL import Image, ImageDraw

from schemas.config import OUTPAINT_SCALE_EPSILON
from schemas.masks import InpaintMask, MaskSpecification, OutpaintMask

from .errors import InvalidGeometryError
from .geometry import Point, Size, clamp_content_scale, content_rect, stroke_ratios

logger = logging.getLogger(__name__)

OPAQUE = 255
CLEAR = 0


def has_mask(spec: MaskSpecification) -> bool:
    """Whether the specification marks any region for regeneration."""
    match spec:
        case InpaintMask():
            return any(stroke for stroke in spec.strokes)
        case OutpaintMask():
            return clamp_content_scale(spec.scale) < OUTPAINT_SCALE_EPSILON
        case _:
            raise TypeError(f"Unsupported mask specification: {type(spec).__name__}")


def rasterize(spec: MaskSpecification, source_size: tuple[int, int]) -> Image.Image:
    """
    Render a mask specification as an RGBA image of source_size.

    Args:
        spec: Inpaint strokes or outpaint scale.
        source_size: (width, height) in pixels of the image being edited.

    Returns:
        A new RGBA image, opaque white except for the cleared regions.

    Raises:
        InvalidGeometryError: If source_size has zero width or height.
    """
    width, height = source_size
    if width <= 0 or height <= 0:
        raise InvalidGeometryError(f"Cannot rasterize a mask of size {width}x{height}")

    alpha = Image.new("L", (width, height), OPAQUE)

    match spec:
        case InpaintMask():
            _clear_strokes(alpha, spec)
        case OutpaintMask():
            alpha = _clear_outpaint_border(alpha, spec)
        case _:
            raise TypeError(f"Unsupported mask specification: {type(spec).__name__}")

    # Same value in every channel: white where kept, fully clear where edited
    return Image.merge("RGBA", (alpha, alpha, alpha, alpha))


def _clear_strokes(alpha: Image.Image, spec: InpaintMask) -> None:
    """Draw each stroke with alpha 0 using round caps and joins."""
    display = Size(spec.displaySize.width, spec.displaySize.height)
    source = Size(*alpha.size)
    x_ratio, y_ratio = stroke_ratios(display, source)

    line_width = spec.strokeWidth * x_ratio
    radius = line_width / 2
    draw = ImageDraw.Draw(alpha)

    drawn = 0
    for stroke in spec.strokes:
        if not stroke:
            continue
        points = [Point(p.x * x_ratio, p.y * y_ratio) for p in stroke]

        if len(points) > 1:
            draw.line(
                [(p.x, p.y) for p in points],
                fill=CLEAR,
                width=max(1, round(line_width)),
            )
        # Discs at every vertex give round caps and joins
        for p in points:
            draw.ellipse(
                (p.x - radius, p.y - radius, p.x + radius, p.y + radius),
                fill=CLEAR,
            )
        drawn += 1

    logger.debug(
        "Rasterized %d strokes at %.1fpx on %dx%d mask",
        drawn,
        line_width,
        source.width,
        source.height,
    )


def _clear_outpaint_border(alpha: Image.Image, spec: OutpaintMask) -> Image.Image:
    """Clear the four bands outside the centered content rectangle."""
    width, height = alpha.size
    left, top, right, bottom = outpaint_content_bounds((width, height), spec.scale)

    pixels = np.array(alpha, dtype=np.uint8)
    pixels[:top, :] = CLEAR  # top band
    pixels[bottom:, :] = CLEAR  # bottom band
    pixels[top:bottom, :left] = CLEAR  # left band
    pixels[top:bottom, right:] = CLEAR  # right band
    return Image.fromarray(pixels)


def outpaint_content_bounds(
    source_size: tuple[int, int], scale: float
) -> tuple[int, int, int, int]:
    """Pixel box (left, top, right, bottom) the original image keeps."""
    width, height = source_size
    rect = content_rect(Size(width, height), clamp_content_scale(scale))
    return rect.pixel_bounds()


def prepare_outpaint_base(image: Image.Image, scale: float) -> Image.Image:
    """
    Shrink image into its content rectangle on a transparent canvas.

    The canvas keeps the source size so the result lines up pixel for pixel
    with the mask from rasterize() for the same scale.
    """
    width, height = image.size
    if width <= 0 or height <= 0:
        raise InvalidGeometryError(f"Cannot outpaint a {width}x{height} image")

    left, top, right, bottom = outpaint_content_bounds((width, height), scale)
    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    if right <= left or bottom <= top:
        return canvas

    shrunk = image.convert("RGBA").resize(
        (right - left, bottom - top), Image.Resampling.LANCZOS
    )
    canvas.paste(shrunk, (left, top))
    return canvas
