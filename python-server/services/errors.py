"""Error taxonomy for image generation, editing and mask rasterization."""

from __future__ import annotations


class ImageServiceError(Exception):
    """Base class for every failure raised by the image services."""


class MissingCredentialError(ImageServiceError):
    """No API key is configured for the image provider."""

    def __init__(self, message: str = "OPENAI_API_KEY is not configured"):
        super().__init__(message)


class UpstreamError(ImageServiceError):
    """The provider answered with a non-2xx HTTP status."""

    def __init__(self, status: int, message: str | None = None):
        self.status = status
        self.message = message
        if message:
            text = f"Provider returned status {status}: {message}"
        else:
            text = f"Provider returned an unexpected response (status {status})"
        super().__init__(text)


class InvalidImageDataError(ImageServiceError):
    """Image bytes could not be encoded or decoded."""


class EmptyResultError(ImageServiceError):
    """The provider call succeeded but produced no usable images."""

    def __init__(self, message: str = "Provider response contained no usable images"):
        super().__init__(message)


class InvalidGeometryError(ImageServiceError):
    """A mask or canvas target has zero area."""


class SessionBusyError(ImageServiceError):
    """An edit is already in flight for this session."""


class NoMaskError(ImageServiceError):
    """An edit was requested before any region was marked."""
