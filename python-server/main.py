"""
FastAPI server for image generation and mask-based editing.

Forwards requests to an OpenAI-compatible image API and does the local image
work (mask rasterization, outpaint canvas, square resizing) itself.

Endpoints:
- GET  /health                 - Health check
- GET  /                       - API information
- POST /api/images/generate    - Text to image
- POST /api/images/edit        - Inpaint / outpaint with a rasterized mask
- POST /api/images/mask        - Mask preview without calling the provider
- POST /api/images/variations  - Variations of an image
- POST /api/images/resize      - Cover-fit resize to a square canvas
- POST /api/images/save        - Save an image to the output directory
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import NoReturn

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from schemas import (
    EditImageRequest,
    EditImageResponse,
    ErrorInfo,
    GenerateImagesRequest,
    ImageBatchResponse,
    MaskPreviewRequest,
    MaskPreviewResponse,
    ResizeRequest,
    ResizeResponse,
    SaveImageRequest,
    SaveImageResponse,
    VariationsRequest,
)
from services.canvas import resize_to_square
from services.errors import (
    EmptyResultError,
    ImageServiceError,
    InvalidGeometryError,
    InvalidImageDataError,
    MissingCredentialError,
    NoMaskError,
    SessionBusyError,
    UpstreamError,
)
from services.image_utils import image_from_data_url, image_to_data_url
from services.masks import has_mask, rasterize
from services.openai_images import OpenAIImageClient
from services.session import EditSession
from services.settings import ProviderSettings
from services.storage import save_image
from utils.ai_logging import log_image_inputs

# Load environment variables
load_dotenv()

# Track server start time for uptime calculation
# Initialized in lifespan handler, not at import time
_start_time: float | None = None

VERSION = "0.3.0"


# =============================================================================
# Application Setup
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    global _start_time
    # Startup
    _start_time = time.time()
    logger.info("Image Studio Server starting...")
    settings = ProviderSettings.from_env()
    logger.info("API Key: %s", "configured" if settings.has_credential else "MISSING")
    logger.info("Provider: %s (model %s)", settings.base_url, settings.model)
    yield
    # Shutdown
    logger.info("Image Studio Server shutting down...")


app = FastAPI(
    title="Image Studio Server",
    description="Image generation, inpainting, outpainting and variations",
    version=VERSION,
    lifespan=lifespan,
)

# CORS configuration
_allowed_origins = os.getenv(
    "ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3001"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in _allowed_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_settings() -> ProviderSettings:
    """Settings for the current request, read fresh from the environment."""
    return ProviderSettings.from_env()


def get_image_client(settings: ProviderSettings) -> OpenAIImageClient:
    """Build a provider client; patched in tests to inject a mock transport."""
    return OpenAIImageClient(settings)


def raise_http_error(error: Exception, action: str) -> NoReturn:
    """Translate a service failure into an HTTPException."""
    if isinstance(error, MissingCredentialError):
        raise HTTPException(
            status_code=500,
            detail="Server configuration error: OPENAI_API_KEY not set",
        ) from error
    if isinstance(error, UpstreamError):
        raise HTTPException(
            status_code=502,
            detail=ErrorInfo(message=str(error), status=error.status).model_dump(),
        ) from error
    if isinstance(error, EmptyResultError):
        raise HTTPException(status_code=502, detail=f"{action} failed: {error}") from error
    if isinstance(error, InvalidImageDataError):
        raise HTTPException(status_code=422, detail=str(error)) from error
    if isinstance(error, (InvalidGeometryError, NoMaskError, ValueError)):
        raise HTTPException(status_code=400, detail=str(error)) from error
    if isinstance(error, SessionBusyError):
        raise HTTPException(status_code=409, detail=str(error)) from error
    if isinstance(error, httpx.HTTPError):
        raise HTTPException(
            status_code=502, detail=f"{action} failed: provider unreachable ({error})"
        ) from error

    logger.exception("%s failed: %s", action, error)
    raise HTTPException(status_code=500, detail=f"{action} failed: {error}") from error


# =============================================================================
# Health & Info Endpoints
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    uptime_seconds: float
    environment: str
    python_version: str


class RootResponse(BaseModel):
    """Root endpoint response."""

    name: str
    version: str
    status: str
    endpoints: dict[str, str]


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return server health status."""
    uptime = round(time.time() - _start_time, 2) if _start_time else 0.0
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_seconds=uptime,
        environment=os.getenv("ENVIRONMENT", "development"),
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    )


@app.get("/", response_model=RootResponse)
async def root() -> RootResponse:
    """Return API information."""
    return RootResponse(
        name="Image Studio Server",
        version=VERSION,
        status="running",
        endpoints={
            "health": "GET /health",
            "images_generate": "POST /api/images/generate",
            "images_edit": "POST /api/images/edit",
            "images_mask": "POST /api/images/mask",
            "images_variations": "POST /api/images/variations",
            "images_resize": "POST /api/images/resize",
            "images_save": "POST /api/images/save",
        },
    )


# =============================================================================
# Image Generation Endpoint (POST /api/images/generate)
# =============================================================================


@app.post("/api/images/generate", response_model=ImageBatchResponse)
async def generate_images(request: GenerateImagesRequest) -> ImageBatchResponse:
    """Generate images from a text prompt."""
    try:
        settings = get_settings()
        client = get_image_client(settings)
        images = await client.generate(
            request.prompt, count=request.n, size=request.size, model=request.model
        )
    except (ImageServiceError, ValueError, httpx.HTTPError) as e:
        raise_http_error(e, "Image generation")

    return ImageBatchResponse(
        images=[image_to_data_url(image) for image in images],
        requested=request.n or settings.image_count,
    )


# =============================================================================
# Edit Endpoint (POST /api/images/edit)
# =============================================================================


@app.post("/api/images/edit", response_model=EditImageResponse)
async def edit_image(request: EditImageRequest) -> EditImageResponse:
    """
    Inpaint or outpaint an image.

    Inpaint: the strokes (display coordinates, scaled by displaySize) mark the
    regions to regenerate. Outpaint: the image is shrunk to `scale` inside its
    canvas and the surrounding border is regenerated.
    """
    log_image_inputs(logger, sourceImage=request.sourceImage)

    try:
        source = image_from_data_url(request.sourceImage)
        session = EditSession(source)
        session.load_mask_specification(request.mask)

        client = get_image_client(get_settings())
        result = await session.apply_edit(client, request.prompt, model=request.model)
    except (ImageServiceError, ValueError, httpx.HTTPError) as e:
        raise_http_error(e, "Image edit")

    logger.info("Image edit successful (%s)", request.mask.mode)
    return EditImageResponse(
        imageData=image_to_data_url(result),
        size=f"{source.width}x{source.height}",
    )


@app.post("/api/images/mask", response_model=MaskPreviewResponse)
async def preview_mask(request: MaskPreviewRequest) -> MaskPreviewResponse:
    """Rasterize a mask for the given image without calling the provider."""
    try:
        source = image_from_data_url(request.sourceImage)
        if not has_mask(request.mask):
            return MaskPreviewResponse(maskData=None, hasMask=False)
        mask = rasterize(request.mask, source.size)
    except ImageServiceError as e:
        raise_http_error(e, "Mask preview")

    return MaskPreviewResponse(maskData=image_to_data_url(mask), hasMask=True)


# =============================================================================
# Variations Endpoint (POST /api/images/variations)
# =============================================================================


@app.post("/api/images/variations", response_model=ImageBatchResponse)
async def image_variations(request: VariationsRequest) -> ImageBatchResponse:
    """Request variations of an existing image."""
    log_image_inputs(logger, sourceImage=request.sourceImage)

    try:
        settings = get_settings()
        source = image_from_data_url(request.sourceImage)
        client = get_image_client(settings)
        images = await client.variation(
            source, count=request.n, size=request.size, model=request.model
        )
    except (ImageServiceError, ValueError, httpx.HTTPError) as e:
        raise_http_error(e, "Image variation")

    return ImageBatchResponse(
        images=[image_to_data_url(image) for image in images],
        requested=request.n or settings.image_count,
    )


# =============================================================================
# Resize Endpoint (POST /api/images/resize)
# =============================================================================


def _resize_data_url(data_url: str, side: int):
    return resize_to_square(image_from_data_url(data_url), side)


@app.post("/api/images/resize", response_model=ResizeResponse)
async def resize_image(request: ResizeRequest) -> ResizeResponse:
    """Cover-fit an image onto a side x side canvas."""
    try:
        # Decoding and resampling stay off the event loop
        resized = await asyncio.to_thread(
            _resize_data_url, request.sourceImage, request.side
        )
        image_data = image_to_data_url(resized)
    except ImageServiceError as e:
        raise_http_error(e, "Image resize")

    logger.info("Resized image to %dx%d", resized.width, resized.height)
    return ResizeResponse(
        imageData=image_data,
        width=resized.width,
        height=resized.height,
    )


# =============================================================================
# Save Endpoint (POST /api/images/save)
# =============================================================================


@app.post("/api/images/save", response_model=SaveImageResponse)
async def save_image_endpoint(request: SaveImageRequest) -> SaveImageResponse:
    """Save an image (usually a result) to OUTPUT_DIR."""
    try:
        image = image_from_data_url(request.imageData)
        path = await save_image(image, get_settings().output_dir, request.prefix)
    except ImageServiceError as e:
        raise_http_error(e, "Image save")
    except OSError as e:
        logger.exception("Could not save image: %s", e)
        raise HTTPException(status_code=500, detail=f"Could not save image: {e}")

    return SaveImageResponse(path=str(path))


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info("Starting server on %s:%d", host, port)
    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.getenv("ENVIRONMENT") != "production",
    )
