"""
Image provider and editing constants.

PROVIDER CONFIGURATION:
This file contains the only provider-specific configuration in the codebase.
To point the server at another OpenAI-compatible image API, update the base
URL and endpoint paths below (or set OPENAI_BASE_URL).
"""

from typing import Final

# =============================================================================
# Provider Endpoints
# =============================================================================

PROVIDER_BASE_URL: Final[str] = "https://api.openai.com"

IMAGE_ENDPOINTS: Final[dict[str, str]] = {
    "GENERATIONS": "/v1/images/generations",
    "EDITS": "/v1/images/edits",
    "VARIATIONS": "/v1/images/variations",
}

DEFAULT_MODEL: Final[str] = "dall-e-2"

# Provider only returns URLs that expire after an hour; they are resolved
# immediately after each call.
RESPONSE_FORMAT: Final[str] = "url"

REQUEST_TIMEOUT_SECONDS: Final[float] = 120.0

# =============================================================================
# Request Limits
# =============================================================================

IMAGE_SIZES: Final[tuple[str, ...]] = ("256x256", "512x512", "1024x1024")
DEFAULT_IMAGE_SIZE: Final[str] = "512x512"

MIN_IMAGE_COUNT: Final[int] = 1
MAX_IMAGE_COUNT: Final[int] = 10
DEFAULT_IMAGE_COUNT: Final[int] = 1

# Square canvas sides offered by the resize tool
SQUARE_SIDES: Final[tuple[int, ...]] = (256, 512, 1024)

# =============================================================================
# Mask Editing
# =============================================================================

STROKE_WIDTH: Final[float] = 20.0  # Brush width in display points

MIN_CONTENT_SCALE: Final[float] = 0.4
MAX_CONTENT_SCALE: Final[float] = 1.0

# Scales at or above this are treated as "not zoomed out"
OUTPAINT_SCALE_EPSILON: Final[float] = 0.999
