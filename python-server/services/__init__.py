"""Services for the image studio server."""

from .canvas import image_to_png, load_image, normalize, resize_to_square, to_png_mode
from .errors import (
    EmptyResultError,
    ImageServiceError,
    InvalidGeometryError,
    InvalidImageDataError,
    MissingCredentialError,
    NoMaskError,
    SessionBusyError,
    UpstreamError,
)
from .image_utils import (
    decode_data_url,
    encode_data_url,
    image_from_data_url,
    image_to_data_url,
)
from .masks import has_mask, prepare_outpaint_base, rasterize
from .openai_images import OpenAIImageClient, decode_image_response
from .session import EditSession
from .settings import ProviderSettings

__all__ = [
    # Canvas
    "image_to_png",
    "load_image",
    "normalize",
    "resize_to_square",
    "to_png_mode",
    # Errors
    "EmptyResultError",
    "ImageServiceError",
    "InvalidGeometryError",
    "InvalidImageDataError",
    "MissingCredentialError",
    "NoMaskError",
    "SessionBusyError",
    "UpstreamError",
    # Data URLs
    "decode_data_url",
    "encode_data_url",
    "image_from_data_url",
    "image_to_data_url",
    # Masks
    "has_mask",
    "prepare_outpaint_base",
    "rasterize",
    # Provider
    "OpenAIImageClient",
    "ProviderSettings",
    "decode_image_response",
    # Session
    "EditSession",
]
