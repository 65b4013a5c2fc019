"""Runtime settings for the image provider, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from schemas.config import (
    DEFAULT_IMAGE_COUNT,
    DEFAULT_IMAGE_SIZE,
    DEFAULT_MODEL,
    IMAGE_SIZES,
    MAX_IMAGE_COUNT,
    MIN_IMAGE_COUNT,
    PROVIDER_BASE_URL,
    REQUEST_TIMEOUT_SECONDS,
)


@dataclass(frozen=True)
class ProviderSettings:
    """
    Explicit configuration for one image provider client.

    Passed to OpenAIImageClient instead of reading globals, so tests can run
    clients with different credentials side by side.
    """

    api_key: str = field(default="", repr=False)
    base_url: str = PROVIDER_BASE_URL
    model: str = DEFAULT_MODEL
    image_size: str = DEFAULT_IMAGE_SIZE
    image_count: int = DEFAULT_IMAGE_COUNT
    timeout: float = REQUEST_TIMEOUT_SECONDS
    output_dir: Path = Path("output")

    @property
    def has_credential(self) -> bool:
        """Blank or whitespace-only keys count as not configured."""
        return bool(self.api_key.strip())

    @classmethod
    def from_env(cls) -> ProviderSettings:
        """Build settings from OPENAI_* and IMAGE_* environment variables."""
        image_size = os.getenv("IMAGE_SIZE", DEFAULT_IMAGE_SIZE)
        if image_size not in IMAGE_SIZES:
            raise ValueError(f"IMAGE_SIZE must be one of {IMAGE_SIZES}, got {image_size!r}")

        image_count = int(os.getenv("IMAGE_COUNT", str(DEFAULT_IMAGE_COUNT)))
        if not MIN_IMAGE_COUNT <= image_count <= MAX_IMAGE_COUNT:
            raise ValueError(
                f"IMAGE_COUNT must be between {MIN_IMAGE_COUNT} and {MAX_IMAGE_COUNT}"
            )

        return cls(
            api_key=os.getenv("OPENAI_API_KEY", ""),
            base_url=os.getenv("OPENAI_BASE_URL", PROVIDER_BASE_URL).rstrip("/"),
            model=os.getenv("OPENAI_IMAGE_MODEL", DEFAULT_MODEL),
            image_size=image_size,
            image_count=image_count,
            timeout=float(os.getenv("REQUEST_TIMEOUT", str(REQUEST_TIMEOUT_SECONDS))),
            output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
        )
