"""Utility functions for the image studio server."""

from .ai_logging import (
    extract_base64_data,
    extract_mime_type,
    get_image_metadata,
    log_image_inputs,
    ImageMetadata,
)

__all__ = [
    "extract_base64_data",
    "extract_mime_type",
    "get_image_metadata",
    "log_image_inputs",
    "ImageMetadata",
]
