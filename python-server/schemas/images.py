"""
Pydantic schemas for the image endpoints.

Field names are camelCase to match the JSON the clients send.
"""

from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel, Field

from .config import MAX_IMAGE_COUNT, MIN_IMAGE_COUNT
from .masks import MaskSpecification

# =============================================================================
# Custom Types
# =============================================================================


def validate_data_url(v: str) -> str:
    """Validate that a string is a data URL starting with 'data:'."""
    if not v.startswith("data:"):
        raise ValueError('Must be a data URL starting with "data:"')
    return v


Base64ImageUrl = Annotated[str, AfterValidator(validate_data_url)]
"""A base64-encoded image as a data URL (e.g., 'data:image/png;base64,...')."""

ImageSize = Literal["256x256", "512x512", "1024x1024"]
"""Output sizes accepted by the generation and variation endpoints."""

SquareSide = Literal[256, 512, 1024]
"""Canvas sides offered by the resize tool."""


class ErrorInfo(BaseModel):
    """Error details for failed operations."""

    message: str
    status: Optional[int] = None


# =============================================================================
# POST /api/images/generate - Text to image
# =============================================================================


class GenerateImagesRequest(BaseModel):
    """Request body for POST /api/images/generate."""

    prompt: str = Field(..., min_length=1, description="Text prompt")
    n: Optional[int] = Field(
        None,
        ge=MIN_IMAGE_COUNT,
        le=MAX_IMAGE_COUNT,
        description="Number of images; defaults to the IMAGE_COUNT setting",
    )
    size: Optional[ImageSize] = Field(
        None, description="Output size; defaults to the IMAGE_SIZE setting"
    )
    model: Optional[str] = Field(None, min_length=1, description="Provider model")


class ImageBatchResponse(BaseModel):
    """Response for endpoints that return several images."""

    images: list[str] = Field(..., description="Images as base64 data URLs, provider order")
    requested: int = Field(..., description="Number of images asked for")


# =============================================================================
# POST /api/images/edit - Inpaint / outpaint
# =============================================================================


class EditImageRequest(BaseModel):
    """Request body for POST /api/images/edit."""

    sourceImage: Base64ImageUrl = Field(..., description="Image to edit as data URL")
    prompt: str = Field(..., min_length=1, description="Edit prompt")
    mask: MaskSpecification = Field(..., description="Inpaint strokes or outpaint scale")
    model: Optional[str] = Field(None, min_length=1, description="Provider model")


class EditImageResponse(BaseModel):
    """Response for POST /api/images/edit."""

    imageData: str = Field(..., description="Edited image as base64 data URL")
    size: str = Field(..., description="Size sent to the provider (WxH)")


# =============================================================================
# POST /api/images/mask - Mask preview
# =============================================================================


class MaskPreviewRequest(BaseModel):
    """Request body for POST /api/images/mask."""

    sourceImage: Base64ImageUrl = Field(..., description="Image the mask is for")
    mask: MaskSpecification


class MaskPreviewResponse(BaseModel):
    """Response for POST /api/images/mask."""

    maskData: Optional[str] = Field(
        None, description="Mask PNG as data URL; absent when nothing is marked"
    )
    hasMask: bool


# =============================================================================
# POST /api/images/variations
# =============================================================================


class VariationsRequest(BaseModel):
    """Request body for POST /api/images/variations."""

    sourceImage: Base64ImageUrl = Field(..., description="Source image as data URL")
    n: Optional[int] = Field(None, ge=MIN_IMAGE_COUNT, le=MAX_IMAGE_COUNT)
    size: Optional[ImageSize] = None
    model: Optional[str] = Field(None, min_length=1)


# =============================================================================
# POST /api/images/resize - Square canvas
# =============================================================================


class ResizeRequest(BaseModel):
    """Request body for POST /api/images/resize."""

    sourceImage: Base64ImageUrl = Field(..., description="Image to resize as data URL")
    side: SquareSide = Field(512, description="Output side in pixels")


class ResizeResponse(BaseModel):
    """Response for POST /api/images/resize."""

    imageData: str
    width: int
    height: int


# =============================================================================
# POST /api/images/save
# =============================================================================


class SaveImageRequest(BaseModel):
    """Request body for POST /api/images/save."""

    imageData: Base64ImageUrl
    prefix: str = Field("image", min_length=1, pattern=r"^[A-Za-z0-9_-]+$")


class SaveImageResponse(BaseModel):
    """Response for POST /api/images/save."""

    path: str
