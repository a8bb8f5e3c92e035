"""Rendering surface contract and its Pillow implementation.

The coordinator never touches pixels.  It hands a FrameRenderer the
current markers and a caption; the renderer drives a RenderingSurface
through draw_circle / draw_text / flush and returns encoded image bytes.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Iterable, Protocol

from PIL import Image, ImageDraw, ImageFont

from quake_timelapse.domain.entity import VisualEntity

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]

_FONT_CANDIDATES = ("arial.ttf", "Arial.ttf", "DejaVuSans.ttf")
_BACKGROUND_FILL: RGB = (0, 0, 0)


class RenderingSurface(Protocol):
    """Minimal drawing contract used by FrameRenderer."""

    def reset(self) -> None:
        """Restore the background, discarding previous drawing."""
        ...

    def draw_circle(self, x: float, y: float, radius: float, color: RGB, alpha: float) -> None:
        ...

    def draw_text(self, x: float, y: float, text: str, color: RGB) -> None:
        ...

    def flush(self) -> bytes:
        """Encode the current canvas and return the bytes."""
        ...


def load_font(size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    for name in _FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    return ImageFont.load_default()


def load_background(path: Path | None, size: tuple[int, int]) -> Image.Image:
    """Open and scale the background image, or return a plain fill when absent."""
    if path is None or not Path(path).exists():
        if path is not None:
            logger.warning("Background image %s not found; using plain fill", path)
        return Image.new("RGB", size, _BACKGROUND_FILL)
    with Image.open(path) as img:
        return img.convert("RGB").resize(size, resample=Image.LANCZOS)


def clamp_alpha(alpha: float) -> int:
    return max(0, min(255, round(alpha * 255)))


class PillowSurface:
    """RenderingSurface backed by a Pillow RGB canvas.

    Circles are blended onto the canvas with their own alpha, in draw order.
    """

    def __init__(
        self,
        background: Image.Image,
        font: ImageFont.ImageFont | ImageFont.FreeTypeFont | None = None,
        image_format: str = "PNG",
    ) -> None:
        self._background = background.convert("RGB")
        self._font = font or ImageFont.load_default()
        self._format = image_format
        self._canvas = self._background.copy()
        self._draw = ImageDraw.Draw(self._canvas, "RGBA")

    @property
    def size(self) -> tuple[int, int]:
        return self._canvas.size

    def reset(self) -> None:
        self._canvas = self._background.copy()
        self._draw = ImageDraw.Draw(self._canvas, "RGBA")

    def draw_circle(self, x: float, y: float, radius: float, color: RGB, alpha: float) -> None:
        a = clamp_alpha(alpha)
        if a == 0 or radius <= 0:
            return
        self._draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=(*color, a))

    def draw_text(self, x: float, y: float, text: str, color: RGB) -> None:
        """Draw *text* with its left baseline at (x, y)."""
        if isinstance(self._font, ImageFont.FreeTypeFont):
            self._draw.text((x, y), text, fill=(*color, 255), font=self._font, anchor="ls")
            return
        # Bitmap fonts reject anchors; lift the top-left corner by the text height
        bottom = self._draw.textbbox((0, 0), text, font=self._font)[3]
        self._draw.text((x, y - bottom), text, fill=(*color, 255), font=self._font)

    def flush(self) -> bytes:
        buf = io.BytesIO()
        self._canvas.save(buf, format=self._format)
        return buf.getvalue()


class FrameRenderer:
    """Draws one frame: background, one circle per marker, and a caption.

    Args:
        surface: Where to draw.
        circle_color: Fill colour for every marker.
        label_color: Caption colour (always opaque).
        label_position: Left end of the caption baseline in screen pixels.
    """

    def __init__(
        self,
        surface: RenderingSurface,
        circle_color: RGB = (255, 0, 0),
        label_color: RGB = (255, 0, 0),
        label_position: tuple[float, float] = (0, 0),
    ) -> None:
        self._surface = surface
        self._circle_color = circle_color
        self._label_color = label_color
        self._label_position = label_position

    def render(self, entities: Iterable[VisualEntity], label: str) -> bytes:
        self._surface.reset()
        for entity in entities:
            self._surface.draw_circle(entity.x, entity.y, entity.radius, self._circle_color, entity.alpha)
        x, y = self._label_position
        self._surface.draw_text(x, y, label, self._label_color)
        return self._surface.flush()
