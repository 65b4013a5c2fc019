"""AI logging utilities for image input visibility.

Logs what is sent to the image provider as metadata only (dimensions, mode,
encoded size); image data itself never reaches the logs.
"""

import base64
import binascii
import io
import logging
from typing import TypedDict

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class ImageMetadata(TypedDict):
    """Metadata extracted from an image."""

    width: int
    height: int
    sizeBytes: int
    mimeType: str


def extract_base64_data(data_url: str) -> str:
    """Extract the base64 data (without data URL prefix) from a data URL."""
    if "," not in data_url:
        return data_url
    return data_url.split(",", 1)[1]


def extract_mime_type(data_url: str) -> str:
    """Extract the MIME type from a base64 data URL."""
    if ";" not in data_url:
        return "image/png"
    prefix = data_url.split(";")[0]
    return prefix.replace("data:", "")


def get_image_metadata(data_url: str) -> ImageMetadata:
    """
    Extract metadata from a data URL (or raw base64 string).

    Returns zero dimensions when the payload is not a readable image; this
    is only used for logging, so it never raises.
    """
    mime_type = extract_mime_type(data_url)
    try:
        image_bytes = base64.b64decode(extract_base64_data(data_url))
    except (binascii.Error, ValueError):
        return ImageMetadata(width=0, height=0, sizeBytes=0, mimeType=mime_type)

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("Failed to get image metadata: %s", e)
        width = height = 0

    return ImageMetadata(
        width=width,
        height=height,
        sizeBytes=len(image_bytes),
        mimeType=mime_type,
    )


def log_image_inputs(
    logger_instance: logging.Logger,
    **images: str | None,
) -> None:
    """
    Log image inputs with metadata only (no base64 data).

    Args:
        logger_instance: Logger to use for output.
        **images: Data URLs keyed by the label to log them under; None
            values are skipped.
    """
    image_inputs: dict[str, ImageMetadata] = {
        label: get_image_metadata(data_url)
        for label, data_url in images.items()
        if data_url
    }

    if image_inputs:
        logger_instance.info("Image inputs: %s", image_inputs)
