"""Pytest configuration and fixtures"""
import itertools
import os
from decimal import Decimal
from typing import Dict, List, Optional

import pytest

from tonnentext.config import StorefrontSettings
from tonnentext.errors import MeasurementUnavailable, StorefrontUserError
from tonnentext.storefront import RemoteCart

# Set test environment variables
os.environ.setdefault("STOREFRONT_STORE_DOMAIN", "test-shop.myshopify.com")
os.environ.setdefault("STOREFRONT_ACCESS_TOKEN", "test_token")
os.environ.setdefault("LABEL_VARIANT_ID", "4711")
os.environ.setdefault("LOG_LEVEL", "WARNING")


class FakeMeasurer:
    """Monotonic rasterizer stand-in: every glyph is 0.6 em wide."""

    def __init__(self, em_ratio: float = 0.6):
        self.em_ratio = em_ratio
        self.available = True
        self.calls = 0

    def measure(self, text: str, pixel_size: float) -> float:
        self.calls += 1
        if not self.available:
            raise MeasurementUnavailable("layout not attached")
        return len(text) * pixel_size * self.em_ratio


class FakeStorefront:
    """
    In-memory remote cart service speaking the StorefrontClient interface.

    Prices lines at a fixed unit price, like the label product variant.
    """

    def __init__(self, settings: StorefrontSettings, unit_price: Decimal = Decimal("12.90")):
        self.settings = settings
        self.unit_price = unit_price
        self.carts: Dict[str, List[dict]] = {}
        self.calls: List[str] = []
        self.fail_with: Dict[str, Exception] = {}
        self._ids = itertools.count(1)

    def _raise_if_failing(self, name: str) -> None:
        self.calls.append(name)
        exc = self.fail_with.pop(name, None)
        if exc is not None:
            raise exc

    def _require_cart(self, cart_id: str) -> None:
        if cart_id not in self.carts:
            raise StorefrontUserError(["The specified cart does not exist."])

    def _cart(self, cart_id: str) -> RemoteCart:
        lines = self.carts[cart_id]
        total = sum((self.unit_price * line["quantity"] for line in lines), Decimal("0"))
        return RemoteCart.model_validate({
            "id": cart_id,
            "checkoutUrl": f"https://test-shop.myshopify.com/cart/c/{cart_id[-4:]}",
            "totalQuantity": sum(line["quantity"] for line in lines),
            "cost": {"totalAmount": {"amount": str(total), "currencyCode": "EUR"}},
            "lines": {"edges": [
                {"node": {
                    "id": line["id"],
                    "quantity": line["quantity"],
                    "attributes": [{"key": k, "value": v} for k, v in line["attributes"].items()],
                    "cost": {"totalAmount": {
                        "amount": str(self.unit_price * line["quantity"]),
                        "currencyCode": "EUR",
                    }},
                }}
                for line in lines
            ]},
        })

    def forget(self, cart_id: str) -> None:
        """Simulate the remote expiring a cart."""
        self.carts.pop(cart_id, None)

    async def create_cart(self) -> RemoteCart:
        self._raise_if_failing("create_cart")
        cart_id = f"gid://shopify/Cart/c{next(self._ids):04d}"
        self.carts[cart_id] = []
        return self._cart(cart_id)

    async def query_cart(self, cart_id: str) -> Optional[RemoteCart]:
        self._raise_if_failing("query_cart")
        if cart_id not in self.carts:
            return None
        return self._cart(cart_id)

    async def add_line(self, cart_id, variant_id, quantity, attributes) -> RemoteCart:
        self._raise_if_failing("add_line")
        self._require_cart(cart_id)
        line_id = f"gid://shopify/CartLine/l{next(self._ids):04d}"
        self.carts[cart_id].append({"id": line_id, "quantity": quantity, "attributes": dict(attributes)})
        return self._cart(cart_id)

    async def update_line(self, cart_id, line_id, quantity) -> RemoteCart:
        self._raise_if_failing("update_line")
        self._require_cart(cart_id)
        for line in self.carts[cart_id]:
            if line["id"] == line_id:
                line["quantity"] = quantity
        return self._cart(cart_id)

    async def remove_lines(self, cart_id, line_ids) -> RemoteCart:
        self._raise_if_failing("remove_lines")
        self._require_cart(cart_id)
        self.carts[cart_id] = [line for line in self.carts[cart_id] if line["id"] not in line_ids]
        return self._cart(cart_id)


@pytest.fixture
def settings():
    """Configured storefront settings"""
    return StorefrontSettings(
        store_domain="test-shop.myshopify.com",
        access_token="test_token",
        label_variant_id="4711",
        poll_interval=0.05,
    )


@pytest.fixture
def fake_storefront(settings):
    """In-memory remote cart"""
    return FakeStorefront(settings)


@pytest.fixture
def measurer():
    """Deterministic text measurer"""
    return FakeMeasurer()
