"""
Per-screen editing session for inpaint/outpaint.

A session owns its base image, the user's strokes or zoom scale, and the
latest edited result. Only one provider call may be in flight per session;
a second apply_edit() while one is running fails instead of queueing.
"""

from __future__ import annotations

import logging
from typing import Literal

from PIL import Image

from schemas.config import STROKE_WIDTH
from schemas.masks import DisplaySize, InpaintMask, MaskSpecification, OutpaintMask, Point2D

from .errors import NoMaskError, SessionBusyError
from .geometry import Point, Rect, Size, clamp_content_scale, fit_size
from .masks import has_mask, prepare_outpaint_base, rasterize
from .openai_images import OpenAIImageClient

logger = logging.getLogger(__name__)

EditMode = Literal["inpaint", "outpaint"]


class EditSession:
    """Mutable editing state for one image; images themselves are replaced, never mutated."""

    def __init__(self, base_image: Image.Image, stroke_width: float = STROKE_WIDTH):
        self._base_image = base_image
        self.edited_image: Image.Image | None = None
        self.mode: EditMode = "inpaint"
        self.stroke_width = stroke_width
        self.strokes: list[list[Point]] = []
        self.current_stroke: list[Point] = []
        self.display_size = Size(0, 0)
        self._content_scale = 1.0
        self.in_progress = False

    # -------------------------------------------------------------------------
    # Images
    # -------------------------------------------------------------------------

    @property
    def base_image(self) -> Image.Image:
        return self._base_image

    @property
    def active_image(self) -> Image.Image:
        """The latest edit if there is one, otherwise the imported image."""
        return self.edited_image if self.edited_image is not None else self._base_image

    def set_base_image(self, image: Image.Image) -> None:
        """Start over with a new image; previous edits and strokes are dropped."""
        self._base_image = image
        self.edited_image = None
        self.display_size = Size(0, 0)
        self.clear_mask()

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    def layout(self, container: Size) -> Size:
        """Fit the active image into container and remember the display size."""
        width, height = self.active_image.size
        aspect = width / height if height else 0.0
        self.display_size = fit_size(container, aspect)
        return self.display_size

    # -------------------------------------------------------------------------
    # Mask state
    # -------------------------------------------------------------------------

    @property
    def content_scale(self) -> float:
        return self._content_scale

    def set_content_scale(self, scale: float) -> None:
        self._content_scale = clamp_content_scale(scale)

    def set_mode(self, mode: EditMode) -> None:
        if mode != self.mode:
            self.mode = mode
            self.clear_mask()

    def begin_stroke(self) -> None:
        self.end_stroke()
        self.current_stroke = []

    def add_point(self, point: Point) -> bool:
        """Record a drag location; points outside the displayed image are ignored."""
        bounds = Rect(0, 0, self.display_size.width, self.display_size.height)
        if not bounds.contains(point):
            return False
        self.current_stroke.append(point)
        return True

    def end_stroke(self) -> None:
        if self.current_stroke:
            self.strokes.append(self.current_stroke)
        self.current_stroke = []

    def clear_mask(self) -> None:
        self.strokes = []
        self.current_stroke = []

    def mask_specification(self) -> MaskSpecification:
        """Snapshot the current mode's mask, including a stroke still being drawn."""
        if self.mode == "outpaint":
            return OutpaintMask(scale=self._content_scale)

        strokes = [*self.strokes]
        if self.current_stroke:
            strokes.append(self.current_stroke)
        return InpaintMask(
            strokes=[[Point2D(x=p.x, y=p.y) for p in stroke] for stroke in strokes],
            strokeWidth=self.stroke_width,
            displaySize=DisplaySize(
                width=self.display_size.width, height=self.display_size.height
            ),
        )

    def load_mask_specification(self, spec: MaskSpecification) -> None:
        """Replace the session's mask state with a received specification."""
        self.clear_mask()
        match spec:
            case InpaintMask():
                self.mode = "inpaint"
                self.stroke_width = spec.strokeWidth
                self.display_size = Size(spec.displaySize.width, spec.displaySize.height)
                self.strokes = [
                    [Point(p.x, p.y) for p in stroke] for stroke in spec.strokes if stroke
                ]
            case OutpaintMask():
                self.mode = "outpaint"
                self.set_content_scale(spec.scale)
            case _:
                raise TypeError(f"Unsupported mask specification: {type(spec).__name__}")

    @property
    def has_mask(self) -> bool:
        return has_mask(self.mask_specification())

    # -------------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------------

    def prepare_request_images(self) -> tuple[Image.Image, Image.Image]:
        """Base image and matching mask for the current mode."""
        spec = self.mask_specification()
        base = self.active_image
        if isinstance(spec, OutpaintMask):
            base = prepare_outpaint_base(base, spec.scale)
        return base, rasterize(spec, base.size)

    async def apply_edit(
        self,
        client: OpenAIImageClient,
        prompt: str,
        model: str | None = None,
    ) -> Image.Image:
        """
        Send the marked regions to the provider and keep the result.

        Raises:
            SessionBusyError: Another edit is still running.
            NoMaskError: Nothing is marked for regeneration.
            ValueError: The prompt is blank.
        """
        if self.in_progress:
            raise SessionBusyError("An edit is already in progress")
        if not prompt.strip():
            raise ValueError("Prompt must not be empty")
        if not self.has_mask:
            raise NoMaskError(
                "Draw on the image (or scale down) to mark areas to edit before applying."
            )

        self.in_progress = True
        try:
            base, mask = self.prepare_request_images()
            width, height = base.size
            logger.info(
                "Applying %s edit on %dx%d image", self.mode, width, height
            )
            result = await client.edit(
                base, mask, prompt, size=f"{width}x{height}", model=model
            )
        finally:
            self.in_progress = False

        self.edited_image = result
        self.clear_mask()
        return result
