"""Pytest configuration and fixtures."""

import base64
import io
import json
import sys
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from PIL import Image

# Configure pytest-asyncio
pytest_plugins = ["pytest_asyncio"]

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.openai_images import OpenAIImageClient  # noqa: E402
from services.settings import ProviderSettings  # noqa: E402

# 1x1 opaque PNG
TINY_PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
VALID_BASE64_IMAGE = f"data:image/png;base64,{TINY_PNG_B64}"


def png_bytes(width: int, height: int, color=(255, 0, 0), mode: str = "RGB") -> bytes:
    """Encode a solid-color image as PNG bytes."""
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_url(width: int, height: int, color=(255, 0, 0)) -> str:
    """Solid-color PNG as a data URL."""
    encoded = base64.b64encode(png_bytes(width, height, color)).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def json_response(status: int, body: dict) -> httpx.Response:
    return httpx.Response(status, content=json.dumps(body).encode("utf-8"))


@pytest.fixture
def settings() -> ProviderSettings:
    """Settings with a test credential and the default provider URL."""
    return ProviderSettings(api_key="test-key")


@pytest.fixture
def make_client(settings) -> Callable[..., OpenAIImageClient]:
    """Build a client whose traffic goes to a handler instead of the network."""

    def _make(handler, client_settings: ProviderSettings | None = None) -> OpenAIImageClient:
        return OpenAIImageClient(
            client_settings or settings, transport=httpx.MockTransport(handler)
        )

    return _make


@pytest.fixture
def provider_env(monkeypatch):
    """Point ProviderSettings.from_env() at a test configuration."""
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    monkeypatch.delenv("IMAGE_SIZE", raising=False)
    monkeypatch.delenv("IMAGE_COUNT", raising=False)
    return monkeypatch
