"""Physical label dimensions, pricing and configurator defaults."""
from decimal import Decimal

# PDF dimensions (millimetres)
LABEL_WIDTH_MM = 280.0  # includes the order number strip
LABEL_HEIGHT_MM = 66.0
ORDER_NUMBER_WIDTH_MM = 10.0  # left strip for the order number
TEXT_MAX_WIDTH_MM = 260.0
TEXT_MAX_HEIGHT_MM = 54.0

# Price per label unit (EUR)
PRICE_PER_UNIT = Decimal("12.90")

MIN_QUANTITY = 1
MAX_QUANTITY = 99

MAX_TEXT_LENGTH = 20
PLACEHOLDER_TEXT = "IHR TEXT"

DEFAULT_FONT_FAMILY = 'Impact, Haettenschweiler, "Arial Black", sans-serif'
DEFAULT_COLOR = "#000000"

# Manual size adjustment granularity (points)
STEP_PT = 5.0

# Line attribute keys understood by the order processing side
ATTR_TEXT = "label_text"
ATTR_FONT_SIZE_PT = "label_font_size_pt"
ATTR_FONT_SIZE_PX = "label_font_size_px"
ATTR_FONT_FAMILY = "label_font_family"
ATTR_COLOR = "label_color"
ATTR_CONFIG_ID = "label_config_id"
