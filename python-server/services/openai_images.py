"""
Client for an OpenAI-compatible image API.

Three calls are supported, each a single attempt with no retry:
- generate:  POST /v1/images/generations (JSON body)
- edit:      POST /v1/images/edits       (multipart: image, mask, fields)
- variation: POST /v1/images/variations  (multipart: image, fields)

All three answer {"data": [{"url": ...} | {"b64_json": ...}, ...]}. URL
results are fetched concurrently and returned in response order. Items that
cannot be fetched or decoded are skipped, so callers may receive fewer images
than requested.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from PIL import Image

from schemas.config import (
    IMAGE_ENDPOINTS,
    IMAGE_SIZES,
    MAX_IMAGE_COUNT,
    MIN_IMAGE_COUNT,
    RESPONSE_FORMAT,
)

from .canvas import image_to_png, load_image
from .errors import (
    EmptyResultError,
    InvalidImageDataError,
    MissingCredentialError,
    UpstreamError,
)
from .multipart import FilePart, encode_multipart
from .settings import ProviderSettings

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[bytes]]


# =============================================================================
# Response Decoding
# =============================================================================


def parse_error_message(response: httpx.Response) -> str | None:
    """Pull error.message out of an error body, if there is one."""
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return None
    return message if isinstance(message, str) and message else None


async def _decode_item(index: int, item: Any, fetch: Fetcher) -> Image.Image | None:
    if not isinstance(item, dict):
        logger.warning("Result %d is not an object, skipping", index)
        return None

    url = item.get("url")
    b64 = item.get("b64_json")
    try:
        if isinstance(url, str) and url:
            data = await fetch(url)
        elif isinstance(b64, str) and b64:
            data = base64.b64decode(b64, validate=True)
        else:
            logger.warning("Result %d has no string url or b64_json, skipping", index)
            return None
        return load_image(data)
    except (
        httpx.HTTPError,
        httpx.InvalidURL,
        binascii.Error,
        ValueError,
        InvalidImageDataError,
    ) as e:
        logger.warning("Result %d could not be decoded, skipping: %s", index, e)
        return None


async def decode_image_response(payload: Any, fetch: Fetcher) -> list[Image.Image]:
    """
    Decode a provider response into images, preserving array order.

    Args:
        payload: Parsed JSON body, expected to be {"data": [...]}.
        fetch: Coroutine returning the bytes behind a result URL.

    Returns:
        Decoded images in the order of the data array. Undecodable items
        are dropped.
    """
    items = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        logger.warning("Response has no data array")
        return []

    # gather() returns results by position, not by completion order
    results = await asyncio.gather(
        *(_decode_item(i, item, fetch) for i, item in enumerate(items))
    )
    images = [image for image in results if image is not None]

    skipped = len(items) - len(images)
    if skipped:
        logger.warning("Skipped %d of %d results", skipped, len(items))
    return images


# =============================================================================
# Provider Client
# =============================================================================


def _check_count(count: int) -> None:
    if not MIN_IMAGE_COUNT <= count <= MAX_IMAGE_COUNT:
        raise ValueError(
            f"Image count must be between {MIN_IMAGE_COUNT} and {MAX_IMAGE_COUNT}, got {count}"
        )


def _check_size(size: str) -> None:
    if size not in IMAGE_SIZES:
        raise ValueError(f"Image size must be one of {IMAGE_SIZES}, got {size!r}")


class OpenAIImageClient:
    """
    Image provider client bound to one set of settings.

    Each call opens its own HTTP connection pool and closes it when the
    results are decoded.
    """

    def __init__(
        self,
        settings: ProviderSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._transport = transport

    @property
    def settings(self) -> ProviderSettings:
        return self._settings

    def _require_credential(self) -> None:
        if not self._settings.has_credential:
            raise MissingCredentialError()

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._settings.timeout,
            transport=self._transport,
            follow_redirects=True,
        )

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._settings.api_key.strip()}"}

    async def _post(
        self,
        http: httpx.AsyncClient,
        endpoint: str,
        *,
        content: bytes,
        content_type: str,
    ) -> list[Image.Image]:
        """Send one request, check status, and decode the result images."""
        url = f"{self._settings.base_url}{IMAGE_ENDPOINTS[endpoint]}"
        headers = {**self._auth_headers(), "Content-Type": content_type}

        response = await http.post(url, content=content, headers=headers)
        if not 200 <= response.status_code < 300:
            message = parse_error_message(response)
            logger.error(
                "Provider %s call failed: status=%d message=%s",
                endpoint.lower(),
                response.status_code,
                message,
            )
            raise UpstreamError(response.status_code, message)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError(response.status_code, "Response body is not JSON") from e

        async def fetch(result_url: str) -> bytes:
            # Result URLs are pre-signed; no Authorization header
            result = await http.get(result_url)
            result.raise_for_status()
            return result.content

        return await decode_image_response(payload, fetch)

    async def generate(
        self,
        prompt: str,
        count: int | None = None,
        size: str | None = None,
        model: str | None = None,
    ) -> list[Image.Image]:
        """
        Generate images from a text prompt.

        Raises:
            MissingCredentialError: No API key configured.
            UpstreamError: Non-2xx response.
            EmptyResultError: No image could be decoded.
        """
        self._require_credential()
        count = self._settings.image_count if count is None else count
        size = size or self._settings.image_size
        model = model or self._settings.model
        _check_count(count)
        _check_size(size)

        logger.info(
            "Image generation request: model=%s, n=%d, size=%s, prompt_length=%d",
            model,
            count,
            size,
            len(prompt),
        )
        body = {
            "prompt": prompt,
            "n": count,
            "size": size,
            "model": model,
            "response_format": RESPONSE_FORMAT,
        }

        async with self._http_client() as http:
            images = await self._post(
                http,
                "GENERATIONS",
                content=json.dumps(body).encode("utf-8"),
                content_type="application/json",
            )

        if not images:
            raise EmptyResultError()
        logger.info("Image generation returned %d of %d images", len(images), count)
        return images

    async def edit(
        self,
        base_image: Image.Image,
        mask_image: Image.Image,
        prompt: str,
        size: str | None = None,
        model: str | None = None,
    ) -> Image.Image:
        """
        Regenerate the transparent regions of mask_image within base_image.

        Args:
            base_image: Image to edit.
            mask_image: Same-size mask; alpha 0 marks regions to regenerate.
            prompt: Description of the edit.
            size: "WxH"; defaults to the base image's pixel size.
            model: Provider model; defaults to the configured model.

        Returns:
            The first image of the provider's response.

        Raises:
            InvalidImageDataError: Mismatched sizes or a PNG encoding failure.
                Raised before anything is sent.
        """
        self._require_credential()
        if base_image.size != mask_image.size:
            raise InvalidImageDataError(
                "Mask size {}x{} does not match image size {}x{}".format(
                    *mask_image.size, *base_image.size
                )
            )

        width, height = base_image.size
        size = size or f"{width}x{height}"
        model = model or self._settings.model

        body, content_type = encode_multipart(
            fields=[
                ("prompt", prompt),
                ("size", size),
                ("model", model),
                ("response_format", RESPONSE_FORMAT),
            ],
            files=[
                FilePart("image", "image.png", image_to_png(base_image)),
                FilePart("mask", "mask.png", image_to_png(mask_image)),
            ],
        )

        logger.info(
            "Image edit request: model=%s, size=%s, prompt_length=%d, body_bytes=%d",
            model,
            size,
            len(prompt),
            len(body),
        )
        async with self._http_client() as http:
            images = await self._post(
                http, "EDITS", content=body, content_type=content_type
            )

        if not images:
            raise EmptyResultError()
        return images[0]

    async def variation(
        self,
        source_image: Image.Image,
        count: int | None = None,
        size: str | None = None,
        model: str | None = None,
    ) -> list[Image.Image]:
        """Request visual variations of source_image."""
        self._require_credential()
        count = self._settings.image_count if count is None else count
        size = size or self._settings.image_size
        model = model or self._settings.model
        _check_count(count)
        _check_size(size)

        body, content_type = encode_multipart(
            fields=[
                ("n", str(count)),
                ("size", size),
                ("model", model),
                ("response_format", RESPONSE_FORMAT),
            ],
            files=[FilePart("image", "image.png", image_to_png(source_image))],
        )

        logger.info(
            "Image variation request: model=%s, n=%d, size=%s", model, count, size
        )
        async with self._http_client() as http:
            images = await self._post(
                http, "VARIATIONS", content=body, content_type=content_type
            )

        if not images:
            raise EmptyResultError()
        return images
