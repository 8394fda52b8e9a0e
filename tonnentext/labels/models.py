"""Label configuration value object."""
import random
import re
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Mapping

from tonnentext.errors import ERROR_INVALID_QUANTITY, ERROR_TEXT_TOO_LONG
from tonnentext.units import px_to_pt
from .constants import (
    ATTR_COLOR,
    ATTR_CONFIG_ID,
    ATTR_FONT_FAMILY,
    ATTR_FONT_SIZE_PT,
    ATTR_FONT_SIZE_PX,
    ATTR_TEXT,
    DEFAULT_COLOR,
    DEFAULT_FONT_FAMILY,
    MAX_QUANTITY,
    MAX_TEXT_LENGTH,
    MIN_QUANTITY,
)

_WHITESPACE_RE = re.compile(r"\s+")
_ID_ALPHABET = string.digits + string.ascii_lowercase


def normalize_text(raw: str | None) -> str:
    """Trim, collapse internal whitespace and upper-case ("straße" -> "STRASSE")."""
    if not raw:
        return ""
    return _WHITESPACE_RE.sub(" ", raw.strip()).upper()


def generate_label_id() -> str:
    """Id of the form ``label_<epoch ms>_<9 base36 chars>`` (36**9 suffixes per millisecond)."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"label_{int(time.time() * 1000)}_{suffix}"


def validate_quantity(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or not MIN_QUANTITY <= quantity <= MAX_QUANTITY:
        raise ValueError(ERROR_INVALID_QUANTITY.format(min=MIN_QUANTITY, max=MAX_QUANTITY))
    return quantity


@dataclass(frozen=True)
class LabelConfiguration:
    """
    One text + size + quantity + appearance unit assembled by the customer.

    Both size representations are captured at creation time. Production
    rendering reuses ``font_size_pt`` as stored, it is never recomputed
    from the (possibly different) box width at purchase time.
    """
    id: str
    text: str
    font_size_pt: float
    font_size_px: float
    quantity: int
    font_family: str = DEFAULT_FONT_FAMILY
    color: str = DEFAULT_COLOR
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        text: str,
        font_size_px: float,
        quantity: int = MIN_QUANTITY,
        font_family: str = DEFAULT_FONT_FAMILY,
        color: str = DEFAULT_COLOR,
    ) -> "LabelConfiguration":
        """
        Build a new configuration with a fresh id.

        Args:
            text: Raw or normalized label text
            font_size_px: Fitted preview size; the point size is derived from it
            quantity: Number of labels (1..99)

        Raises:
            ValueError: If text is empty or too long, or quantity is out of range
        """
        normalized = normalize_text(text)
        if not normalized:
            raise ValueError("text must not be empty")
        if len(normalized) > MAX_TEXT_LENGTH:
            raise ValueError(ERROR_TEXT_TOO_LONG.format(max=MAX_TEXT_LENGTH))
        validate_quantity(quantity)

        return cls(
            id=generate_label_id(),
            text=normalized,
            font_size_pt=px_to_pt(font_size_px),
            font_size_px=font_size_px,
            quantity=quantity,
            font_family=font_family,
            color=color,
        )

    def to_attributes(self) -> Dict[str, str]:
        """Opaque line attributes sent along with the remote add mutation."""
        return {
            ATTR_TEXT: self.text,
            ATTR_FONT_SIZE_PT: str(self.font_size_pt),
            ATTR_FONT_SIZE_PX: str(self.font_size_px),
            ATTR_FONT_FAMILY: self.font_family,
            ATTR_COLOR: self.color,
            ATTR_CONFIG_ID: self.id,
        }

    @classmethod
    def from_attributes(
        cls,
        attributes: Mapping[str, str],
        quantity: int,
        fallback_id: str = "",
    ) -> "LabelConfiguration":
        """Rebuild a configuration from remote line attributes."""
        return cls(
            id=attributes.get(ATTR_CONFIG_ID) or fallback_id,
            text=attributes.get(ATTR_TEXT, ""),
            font_size_pt=_parse_float(attributes.get(ATTR_FONT_SIZE_PT)),
            font_size_px=_parse_float(attributes.get(ATTR_FONT_SIZE_PX)),
            quantity=quantity,
            font_family=attributes.get(ATTR_FONT_FAMILY, ""),
            color=attributes.get(ATTR_COLOR) or DEFAULT_COLOR,
        )


def _parse_float(value: str | None) -> float:
    try:
        return float(value) if value else 0.0
    except ValueError:
        return 0.0
