"""Schemas and configuration for the image studio server."""

from .config import DEFAULT_MODEL, IMAGE_SIZES, SQUARE_SIDES, STROKE_WIDTH
from .images import (
    Base64ImageUrl,
    validate_data_url,
    ErrorInfo,
    GenerateImagesRequest,
    ImageBatchResponse,
    EditImageRequest,
    EditImageResponse,
    MaskPreviewRequest,
    MaskPreviewResponse,
    VariationsRequest,
    ResizeRequest,
    ResizeResponse,
    SaveImageRequest,
    SaveImageResponse,
)
from .masks import DisplaySize, InpaintMask, MaskSpecification, OutpaintMask, Point2D

__all__ = [
    # Config
    "DEFAULT_MODEL",
    "IMAGE_SIZES",
    "SQUARE_SIDES",
    "STROKE_WIDTH",
    # Custom Types
    "Base64ImageUrl",
    "validate_data_url",
    "ErrorInfo",
    # Mask Types
    "DisplaySize",
    "InpaintMask",
    "MaskSpecification",
    "OutpaintMask",
    "Point2D",
    # Image Endpoint Types
    "GenerateImagesRequest",
    "ImageBatchResponse",
    "EditImageRequest",
    "EditImageResponse",
    "MaskPreviewRequest",
    "MaskPreviewResponse",
    "VariationsRequest",
    "ResizeRequest",
    "ResizeResponse",
    "SaveImageRequest",
    "SaveImageResponse",
]
