"""Production artifact: one PDF page per label, drawn with ReportLab."""
from typing import BinaryIO, Optional, Union

from reportlab.lib.colors import HexColor, black
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from tonnentext.logging import get_logger, sanitize_string_for_logging
from tonnentext.units import mm_to_pt
from .constants import (
    LABEL_HEIGHT_MM,
    LABEL_WIDTH_MM,
    ORDER_NUMBER_WIDTH_MM,
    TEXT_MAX_HEIGHT_MM,
    TEXT_MAX_WIDTH_MM,
)
from .models import LabelConfiguration

logger = get_logger(__name__)

# Built-in fallback; Impact is registered on demand when its TTF is available
LABEL_FONT_NAME = "Helvetica-Bold"
ORDER_NUMBER_FONT_NAME = "Helvetica"
ORDER_NUMBER_FONT_SIZE = 8

# Cap height of condensed display faces, as a fraction of the font size
CAP_HEIGHT_RATIO = 0.72


def register_label_font(ttf_path: str, name: str = "Impact") -> str:
    """Register a TrueType face for label text. Returns the ReportLab font name."""
    pdfmetrics.registerFont(TTFont(name, ttf_path))
    return name


def label_page_size() -> tuple[float, float]:
    """Physical page size in points."""
    return mm_to_pt(LABEL_WIDTH_MM), mm_to_pt(LABEL_HEIGHT_MM)


def _fill_color(value: str):
    try:
        return HexColor(value)
    except ValueError:
        logger.warning("Invalid label colour %s, using black", sanitize_string_for_logging(value))
        return black


def draw_label(
    c: canvas.Canvas,
    config: LabelConfiguration,
    order_number: Optional[str] = None,
    font_name: str = LABEL_FONT_NAME,
) -> None:
    """Draw one label on the current page of ``c``."""
    width, height = label_page_size()
    strip = mm_to_pt(ORDER_NUMBER_WIDTH_MM)
    text_area = mm_to_pt(TEXT_MAX_WIDTH_MM)

    # Centre of the text area, right of the order number strip
    center_x = strip + (width - strip) / 2
    baseline_y = (height - config.font_size_pt * CAP_HEIGHT_RATIO) / 2

    text_width = c.stringWidth(config.text, font_name, config.font_size_pt)
    if text_width > text_area:
        logger.warning(
            "Label %s overflows text area (%.1fpt > %.1fpt)",
            sanitize_string_for_logging(config.text), text_width, text_area,
        )
    if config.font_size_pt * CAP_HEIGHT_RATIO > mm_to_pt(TEXT_MAX_HEIGHT_MM):
        logger.warning("Label %s taller than text area", sanitize_string_for_logging(config.text))

    c.setFillColor(_fill_color(config.color))
    c.setFont(font_name, config.font_size_pt)
    c.drawCentredString(center_x, baseline_y, config.text)

    if order_number:
        c.saveState()
        c.setFillColor(black)
        c.setFont(ORDER_NUMBER_FONT_NAME, ORDER_NUMBER_FONT_SIZE)
        c.translate(strip / 2 + ORDER_NUMBER_FONT_SIZE / 3, height / 2)
        c.rotate(90)
        c.drawCentredString(0, 0, str(order_number))
        c.restoreState()


def render_label_pdf(
    config: LabelConfiguration,
    target: Union[str, BinaryIO],
    order_number: Optional[str] = None,
    font_name: str = LABEL_FONT_NAME,
) -> None:
    """
    Render ``config`` into a single-page PDF at the physical label size.

    The stored ``font_size_pt`` is used unchanged.

    Args:
        config: Label as captured at add-to-cart time
        target: File path or binary file object
        order_number: Optional order number printed in the left strip
        font_name: Registered ReportLab font name
    """
    c = canvas.Canvas(target, pagesize=label_page_size())
    c.setTitle(config.text)
    draw_label(c, config, order_number=order_number, font_name=font_name)
    c.showPage()
    c.save()
    logger.info(
        "Rendered label %s at %.2fpt (qty %d)",
        sanitize_string_for_logging(config.text), config.font_size_pt, config.quantity,
    )
