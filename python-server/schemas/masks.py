"""
Pydantic schemas for mask specifications.

A mask specification is a tagged variant: exactly one of inpaint (free-hand
strokes) or outpaint (zoom-out scale) is active for an edit.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from .config import MAX_CONTENT_SCALE, MIN_CONTENT_SCALE, STROKE_WIDTH


class Point2D(BaseModel):
    """A 2D point in display coordinates."""

    x: float
    y: float


class DisplaySize(BaseModel):
    """Size of the preview canvas the strokes were drawn on."""

    width: float = Field(..., ge=0, description="Canvas width in display units")
    height: float = Field(..., ge=0, description="Canvas height in display units")


class InpaintMask(BaseModel):
    """Strokes marking regions to regenerate."""

    mode: Literal["inpaint"] = "inpaint"
    strokes: list[list[Point2D]] = Field(
        default_factory=list, description="Ordered polylines, one per drag gesture"
    )
    strokeWidth: float = Field(STROKE_WIDTH, gt=0, description="Brush width in display units")
    displaySize: DisplaySize = Field(
        default_factory=lambda: DisplaySize(width=0, height=0),
        description="Canvas size at draw time; zero means strokes are in source pixels",
    )


class OutpaintMask(BaseModel):
    """Zoom-out factor; the border around the shrunken image is regenerated."""

    mode: Literal["outpaint"] = "outpaint"
    scale: float = Field(
        ...,
        ge=MIN_CONTENT_SCALE,
        le=MAX_CONTENT_SCALE,
        description="Fraction of the canvas the original image keeps",
    )


MaskSpecification = Annotated[
    Union[InpaintMask, OutpaintMask], Field(discriminator="mode")
]
"""Either an InpaintMask or an OutpaintMask, selected by `mode`."""
