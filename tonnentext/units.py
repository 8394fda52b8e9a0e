"""
Unit conversion between screen pixels, print points and millimetres.

Single source of truth for every conversion used by the live preview and
by the production PDF. All factors derive from the reference screen
density and the 1 pt = 1/72 inch definition, so the two paths cannot drift.
"""

REFERENCE_DPI = 96.0
POINTS_PER_INCH = 72.0
MM_PER_INCH = 25.4

# 1 mm = 3.7795... px at 96 DPI
MM_TO_PX = REFERENCE_DPI / MM_PER_INCH
# 1 mm = 2.8346... pt
MM_TO_PT = POINTS_PER_INCH / MM_PER_INCH
# 1 pt = 1.3333... px at 96 DPI
PT_TO_PX = REFERENCE_DPI / POINTS_PER_INCH


def mm_to_px(mm: float) -> float:
    """Millimetres to screen pixels."""
    return mm * MM_TO_PX


def px_to_mm(px: float) -> float:
    return px / MM_TO_PX


def mm_to_pt(mm: float) -> float:
    """Millimetres to PDF points."""
    return mm * MM_TO_PT


def pt_to_mm(pt: float) -> float:
    return pt / MM_TO_PT


def pt_to_px(pt: float) -> float:
    """Points to preview pixels."""
    return pt * PT_TO_PX


def px_to_pt(px: float) -> float:
    """Preview pixels to points."""
    return px / PT_TO_PX


__all__ = [
    "REFERENCE_DPI",
    "POINTS_PER_INCH",
    "MM_PER_INCH",
    "MM_TO_PX",
    "MM_TO_PT",
    "PT_TO_PX",
    "mm_to_px",
    "px_to_mm",
    "mm_to_pt",
    "pt_to_mm",
    "pt_to_px",
    "px_to_pt",
]
