"""
Text measurement primitives.

The sizing engine never estimates widths from character counts; it asks a
measurer backed by a real rasterizer or real font metrics.
"""
from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Protocol, Sequence, Tuple

from PIL import ImageFont
from reportlab.pdfbase import pdfmetrics

from tonnentext.errors import MeasurementUnavailable
from tonnentext.logging import get_logger

logger = get_logger(__name__)

# Impact first, then the CSS fallbacks of the preview font stack
DEFAULT_FONT_CANDIDATES: Tuple[str, ...] = (
    "Impact.ttf",
    "impact.ttf",
    "Haettenschweiler.ttf",
    "HATTEN.TTF",
    "Arial Black.ttf",
    "ariblk.ttf",
    "DejaVuSans-Bold.ttf",
)

# Matches the preview's CSS letter-spacing: 0.02em
DEFAULT_LETTER_SPACING_EM = 0.02


class TextMeasurer(Protocol):
    """Rendering surface able to report the width of ``text`` at a pixel size."""

    def measure(self, text: str, pixel_size: float) -> float:
        """Width in device pixels. Raises MeasurementUnavailable if it cannot measure."""
        ...


def _font_dirs() -> list[str]:
    dirs = []
    extra = os.environ.get("LABEL_FONT_DIR")
    if extra:
        dirs.append(extra)
    dirs.append(os.path.join(os.environ.get("WINDIR", r"C:\Windows"), "Fonts"))
    dirs.extend([
        "/usr/share/fonts/truetype/msttcorefonts",
        "/usr/share/fonts/truetype/dejavu",
        "/Library/Fonts",
        os.path.abspath("."),
    ])
    return dirs


def find_font_file(candidates: Iterable[str] = DEFAULT_FONT_CANDIDATES) -> Optional[str]:
    """Return the first existing font file among ``candidates``, or None."""
    for name in candidates:
        if os.path.isabs(name) and os.path.exists(name):
            return name
        for d in _font_dirs():
            path = os.path.join(d, name)
            if os.path.exists(path):
                return path
    return None


class PillowMeasurer:
    """Measure with Pillow's FreeType rasterizer (sub-pixel advance widths)."""

    def __init__(
        self,
        font_path: Optional[str] = None,
        candidates: Sequence[str] = DEFAULT_FONT_CANDIDATES,
        letter_spacing_em: float = DEFAULT_LETTER_SPACING_EM,
    ):
        self.font_path = font_path or find_font_file(candidates)
        self.letter_spacing_em = letter_spacing_em
        self._fonts: Dict[float, ImageFont.FreeTypeFont] = {}
        if self.font_path is None:
            logger.warning("No label font found among %s; measurement unavailable", list(candidates))

    def _font(self, pixel_size: float) -> ImageFont.FreeTypeFont:
        font = self._fonts.get(pixel_size)
        if font is None:
            if self.font_path is None:
                raise MeasurementUnavailable("no font file")
            try:
                font = ImageFont.truetype(self.font_path, size=pixel_size)
            except OSError as e:
                raise MeasurementUnavailable(str(e)) from e
            self._fonts[pixel_size] = font
        return font

    def measure(self, text: str, pixel_size: float) -> float:
        if pixel_size <= 0:
            raise MeasurementUnavailable("non-positive size")
        width = float(self._font(pixel_size).getlength(text))
        return width + self.letter_spacing_em * pixel_size * len(text)


class ReportLabMeasurer:
    """Measure with the PDF font metrics used by the production artifact."""

    def __init__(self, font_name: str = "Helvetica-Bold"):
        self.font_name = font_name

    def measure(self, text: str, pixel_size: float) -> float:
        try:
            return float(pdfmetrics.stringWidth(text, self.font_name, pixel_size))
        except KeyError as e:
            # font not registered with ReportLab
            raise MeasurementUnavailable(str(e)) from e
