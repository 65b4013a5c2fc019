"""Saving result images to the output directory."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from PIL import Image

from .canvas import image_to_png

logger = logging.getLogger(__name__)


def _write_png(data: bytes, directory: Path, prefix: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
    path = directory / f"{prefix}-{stamp}-{uuid.uuid4().hex[:8]}.png"
    path.write_bytes(data)
    return path


async def save_image(image: Image.Image, directory: Path, prefix: str = "image") -> Path:
    """
    Write image as a PNG under directory and return its path.

    Completes once the file is on disk; OSError propagates to the caller.
    """
    data = image_to_png(image)
    path = await asyncio.to_thread(_write_png, data, directory, prefix)
    logger.info("Saved %dx%d image to %s", image.width, image.height, path)
    return path
