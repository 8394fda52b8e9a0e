"""Label package: constants, configuration value object, PDF artifact."""
from .models import LabelConfiguration, generate_label_id, normalize_text, validate_quantity
from .pdf import render_label_pdf

__all__ = [
    "LabelConfiguration",
    "generate_label_id",
    "normalize_text",
    "validate_quantity",
    "render_label_pdf",
]
