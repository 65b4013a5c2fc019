"""
Display-space geometry for mask editing.

Coordinate system: (0,0) is top-left, X increases right, Y increases down.
Display coordinates are floats in the units of the preview canvas the user
draws on; source coordinates are pixels of the full-resolution image.
"""

from __future__ import annotations

from dataclasses import dataclass

from schemas.config import MAX_CONTENT_SCALE, MIN_CONTENT_SCALE


@dataclass(frozen=True)
class Point:
    """A single recorded position of a drag gesture."""

    x: float
    y: float


@dataclass(frozen=True)
class Size:
    """Width and height in display units or pixels."""

    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle anchored at its top-left corner."""

    x: float
    y: float
    width: float
    height: float

    def contains(self, point: Point) -> bool:
        """Edges are inclusive, matching how drag locations are accepted."""
        return (
            self.x <= point.x <= self.x + self.width
            and self.y <= point.y <= self.y + self.height
        )

    def pixel_bounds(self) -> tuple[int, int, int, int]:
        """Round each edge to the nearest pixel: (left, top, right, bottom)."""
        left = round(self.x)
        top = round(self.y)
        right = round(self.x + self.width)
        bottom = round(self.y + self.height)
        return left, top, right, bottom


def clamp_content_scale(scale: float) -> float:
    """Clamp an outpaint zoom factor into the supported range."""
    return max(MIN_CONTENT_SCALE, min(scale, MAX_CONTENT_SCALE))


def fit_size(container: Size, aspect_ratio: float) -> Size:
    """
    Largest size with the given aspect ratio that fits inside container.

    Args:
        container: Available space.
        aspect_ratio: Image width divided by image height.

    Returns:
        Contain-fit display size, or Size(0, 0) when either input is degenerate.

    Examples:
        >>> fit_size(Size(320, 320), 2.0)
        Size(width=320, height=160.0)
        >>> fit_size(Size(320, 320), 0.5)
        Size(width=160.0, height=320)
    """
    if aspect_ratio <= 0 or container.is_empty:
        return Size(0, 0)

    width = container.width
    height = container.width / aspect_ratio
    if height > container.height:
        height = container.height
        width = height * aspect_ratio
    return Size(width, height)


def content_rect(display: Size, scale: float) -> Rect:
    """
    Rectangle of size display*scale centered within display.

    The scale is used as given; callers clamp it first when it comes from
    user input.
    """
    width = display.width * scale
    height = display.height * scale
    return Rect(
        x=(display.width - width) / 2,
        y=(display.height - height) / 2,
        width=width,
        height=height,
    )


def stroke_ratios(display: Size, source: Size) -> tuple[float, float]:
    """Per-axis display-to-source ratios; 1.0 on an axis not yet laid out."""
    x_ratio = source.width / display.width if display.width > 0 else 1.0
    y_ratio = source.height / display.height if display.height > 0 else 1.0
    return x_ratio, y_ratio


def map_stroke_to_source(point: Point, display: Size, source: Size) -> Point:
    """Scale a display-space point into source pixel space."""
    x_ratio, y_ratio = stroke_ratios(display, source)
    return Point(point.x * x_ratio, point.y * y_ratio)
