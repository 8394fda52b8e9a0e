"""Cart read model with Decimal-based pricing."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Tuple

from tonnentext.labels.constants import PRICE_PER_UNIT
from tonnentext.labels.models import LabelConfiguration
from tonnentext.money import format_money, multiply, round_money, to_decimal, total
from tonnentext.storefront import RemoteCart, RemoteLine


@dataclass(frozen=True)
class CartItem:
    """A label configuration as it lives in the remote cart."""
    config: LabelConfiguration
    unit_price: Decimal
    total_price: Decimal
    # Remote handle; absent until the add mutation has been acknowledged
    remote_line_id: Optional[str] = None

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def text(self) -> str:
        return self.config.text

    @property
    def quantity(self) -> int:
        return self.config.quantity

    @property
    def is_addressable(self) -> bool:
        """Only lines with a remote handle can be updated or removed."""
        return bool(self.remote_line_id)

    @classmethod
    def from_remote(cls, line: RemoteLine, unit_price: Decimal = PRICE_PER_UNIT) -> "CartItem":
        config = LabelConfiguration.from_attributes(line.attribute_map, line.quantity, fallback_id=line.id)
        line_total = line.line_total
        if line_total is None or line_total <= 0:
            line_total = multiply(unit_price, line.quantity)
        return cls(
            config=config,
            unit_price=to_decimal(unit_price),
            total_price=round_money(line_total),
            remote_line_id=line.id,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "font_size_pt": self.config.font_size_pt,
            "font_size_px": self.config.font_size_px,
            "quantity": self.quantity,
            "font_family": self.config.font_family,
            "color": self.config.color,
            "unit_price": str(self.unit_price),
            "total_price": str(self.total_price),
            "total_display": format_money(self.total_price),
            "remote_line_id": self.remote_line_id,
        }


@dataclass(frozen=True)
class CartSnapshot:
    """
    Locally held view of the remote cart at one point in time.

    Always derived from a remote response, never merged. ``total_price`` is
    the storefront's own total; ``line_total_sum`` is display-only.
    """
    items: Tuple[CartItem, ...] = ()
    total_quantity: int = 0
    total_price: Decimal = Decimal("0.00")
    cart_id: Optional[str] = None
    checkout_url: Optional[str] = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def empty(cls, cart_id: Optional[str] = None) -> "CartSnapshot":
        return cls(cart_id=cart_id)

    @classmethod
    def from_remote(cls, cart: RemoteCart, unit_price: Decimal = PRICE_PER_UNIT) -> "CartSnapshot":
        items = tuple(CartItem.from_remote(line, unit_price) for line in cart.lines)
        return cls(
            items=items,
            total_quantity=cart.total_quantity,
            total_price=round_money(cart.total_price),
            cart_id=cart.id,
            checkout_url=cart.checkout_url or None,
        )

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def line_ids(self) -> Tuple[str, ...]:
        return tuple(item.remote_line_id for item in self.items if item.remote_line_id)

    @property
    def line_total_sum(self) -> Decimal:
        """Sum of line totals. Display only; ``total_price`` is authoritative."""
        return total(item.total_price for item in self.items)

    def find(self, line_id: Optional[str]) -> Optional[CartItem]:
        if not line_id:
            return None
        return next((item for item in self.items if item.remote_line_id == line_id), None)

    def to_dict(self) -> dict:
        return {
            "cart_id": self.cart_id,
            "checkout_url": self.checkout_url,
            "is_empty": self.is_empty,
            "total_quantity": self.total_quantity,
            "total_price": str(self.total_price),
            "total_display": format_money(self.total_price),
            "items": [item.to_dict() for item in self.items],
        }
