"""Image utility functions for data URL handling."""

from __future__ import annotations

import base64
import binascii

from PIL import Image

from .canvas import image_to_png, load_image
from .errors import InvalidImageDataError


def decode_data_url(data_url: str) -> bytes:
    """
    Decode a data URL (or bare base64 string) to raw bytes.

    Raises:
        InvalidImageDataError: If the payload is not valid base64.

    Examples:
        >>> decode_data_url("data:image/png;base64,aGVsbG8=")
        b'hello'
        >>> decode_data_url("aGVsbG8=")
        b'hello'
    """
    if "," in data_url:
        # Data URL format: data:<mime>;base64,<data>
        _, encoded = data_url.split(",", 1)
    else:
        encoded = data_url

    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageDataError(f"Invalid base64 image payload: {e}") from e


def encode_data_url(data: bytes, mime_type: str = "image/png") -> str:
    """
    Encode bytes as a data URL.

    Examples:
        >>> encode_data_url(b'hello', 'text/plain')
        'data:text/plain;base64,aGVsbG8='
    """
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def image_to_data_url(image: Image.Image) -> str:
    """PNG-encode an image and wrap it as a data URL."""
    return encode_data_url(image_to_png(image), "image/png")


def image_from_data_url(data_url: str) -> Image.Image:
    """Decode a data URL into an orientation-normalized image."""
    return load_image(decode_data_url(data_url))
