"""
Storefront Cart API client.

Speaks the remote cart contract (create / query / add / update / remove)
over the Shopify Storefront GraphQL endpoint. Transport, HTTP and GraphQL
failures raise ``StorefrontError``; mutation ``userErrors`` raise
``StorefrontUserError`` with the messages joined.
"""
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tonnentext.config import StorefrontSettings, get_settings
from tonnentext.errors import (
    ConfigurationError,
    ERROR_MUTATION_FAILED,
    ERROR_STOREFRONT_NOT_CONFIGURED,
    StorefrontError,
    StorefrontUserError,
)
from tonnentext.logging import get_logger, sanitize_id_for_logging

logger = get_logger(__name__)

ACCESS_TOKEN_HEADER = "X-Shopify-Storefront-Access-Token"
VARIANT_GID_PREFIX = "gid://shopify/ProductVariant/"
MAX_CART_LINES = 100


# ==================== WIRE MODELS ====================

class MoneyV2(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    amount: Decimal = Decimal("0")
    currency_code: str = Field(default="EUR", alias="currencyCode")


class Cost(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    total_amount: MoneyV2 = Field(default_factory=MoneyV2, alias="totalAmount")


class Attribute(BaseModel):
    key: str
    value: Optional[str] = None


class RemoteLine(BaseModel):
    """One line of the remote cart."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    quantity: int
    attributes: List[Attribute] = Field(default_factory=list)
    cost: Optional[Cost] = None

    @property
    def attribute_map(self) -> Dict[str, str]:
        return {attr.key: attr.value or "" for attr in self.attributes}

    @property
    def line_total(self) -> Optional[Decimal]:
        return self.cost.total_amount.amount if self.cost else None


class RemoteCart(BaseModel):
    """Authoritative cart state as returned by every query and mutation."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    checkout_url: str = Field(default="", alias="checkoutUrl")
    total_quantity: int = Field(default=0, alias="totalQuantity")
    cost: Optional[Cost] = None
    lines: List[RemoteLine] = Field(default_factory=list)

    @field_validator("lines", mode="before")
    @classmethod
    def _flatten_edges(cls, value: Any) -> Any:
        # GraphQL connection: {"edges": [{"node": {...}}]}
        if isinstance(value, Mapping):
            return [edge["node"] for edge in value.get("edges", [])]
        return value or []

    @property
    def total_price(self) -> Decimal:
        return self.cost.total_amount.amount if self.cost else Decimal("0")


# ==================== GRAPHQL DOCUMENTS ====================

CART_FRAGMENT = f"""
fragment CartFields on Cart {{
  id
  checkoutUrl
  totalQuantity
  cost {{ totalAmount {{ amount currencyCode }} }}
  lines(first: {MAX_CART_LINES}) {{
    edges {{
      node {{
        id
        quantity
        attributes {{ key value }}
        cost {{ totalAmount {{ amount currencyCode }} }}
      }}
    }}
  }}
}}
"""

CART_CREATE = CART_FRAGMENT + """
mutation cartCreate {
  cartCreate {
    cart { ...CartFields }
    userErrors { field message }
  }
}
"""

CART_QUERY = CART_FRAGMENT + """
query cartQuery($id: ID!) {
  cart(id: $id) { ...CartFields }
}
"""

CART_LINES_ADD = CART_FRAGMENT + """
mutation cartLinesAdd($cartId: ID!, $lines: [CartLineInput!]!) {
  cartLinesAdd(cartId: $cartId, lines: $lines) {
    cart { ...CartFields }
    userErrors { field message }
  }
}
"""

CART_LINES_UPDATE = CART_FRAGMENT + """
mutation cartLinesUpdate($cartId: ID!, $lines: [CartLineUpdateInput!]!) {
  cartLinesUpdate(cartId: $cartId, lines: $lines) {
    cart { ...CartFields }
    userErrors { field message }
  }
}
"""

CART_LINES_REMOVE = CART_FRAGMENT + """
mutation cartLinesRemove($cartId: ID!, $lineIds: [ID!]!) {
  cartLinesRemove(cartId: $cartId, lineIds: $lineIds) {
    cart { ...CartFields }
    userErrors { field message }
  }
}
"""


def variant_gid(variant_id: str) -> str:
    """Merchandise reference for a numeric or already-qualified variant id."""
    variant_id = str(variant_id)
    return variant_id if variant_id.startswith("gid://") else f"{VARIANT_GID_PREFIX}{variant_id}"


def parse_cart(payload: Any) -> RemoteCart:
    """Validate a cart object; schema mismatches count as transport failures."""
    try:
        return RemoteCart.model_validate(payload)
    except ValidationError as e:
        raise StorefrontError(f"Invalid storefront response: {e}") from e


class StorefrontClient:
    """Async GraphQL client for the storefront cart."""

    def __init__(
        self,
        settings: Optional[StorefrontSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        # HTTP client (lazy init unless injected)
        self._http_client = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(10.0, connect=5.0, read=10.0, write=10.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _request(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """POST one GraphQL document and return its ``data`` object."""
        if not self.settings.is_configured():
            raise ConfigurationError(ERROR_STOREFRONT_NOT_CONFIGURED)

        client = await self._get_http_client()
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            ACCESS_TOKEN_HEADER: self.settings.access_token,
        }
        try:
            resp = await client.post(
                self.settings.api_url,
                json={"query": query, "variables": variables or {}},
                headers=headers,
            )
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise StorefrontError(f"HTTP {status}: {e.response.reason_phrase}") from e
        except httpx.HTTPError as e:
            raise StorefrontError(f"Storefront request failed: {e}") from e
        except ValueError as e:
            raise StorefrontError(f"Invalid storefront response: {e}") from e

        errors = payload.get("errors")
        if errors:
            raise StorefrontError(", ".join(str(err.get("message", err)) for err in errors))
        return payload.get("data") or {}

    @staticmethod
    def _mutation_cart(data: Dict[str, Any], field: str) -> RemoteCart:
        result = data.get(field) or {}
        user_errors = result.get("userErrors") or []
        if user_errors:
            raise StorefrontUserError([err.get("message", "") for err in user_errors])
        cart = result.get("cart")
        if not cart:
            raise StorefrontError(ERROR_MUTATION_FAILED)
        return parse_cart(cart)

    async def create_cart(self) -> RemoteCart:
        data = await self._request(CART_CREATE)
        cart = self._mutation_cart(data, "cartCreate")
        logger.info("Created cart %s", sanitize_id_for_logging(cart.id))
        return cart

    async def query_cart(self, cart_id: str) -> Optional[RemoteCart]:
        """Current cart state, or None when the storefront does not know ``cart_id``."""
        data = await self._request(CART_QUERY, {"id": cart_id})
        cart = data.get("cart")
        if not cart:
            return None
        return parse_cart(cart)

    async def add_line(
        self,
        cart_id: str,
        variant_id: str,
        quantity: int,
        attributes: Mapping[str, str],
    ) -> RemoteCart:
        variables = {
            "cartId": cart_id,
            "lines": [
                {
                    "merchandiseId": variant_gid(variant_id),
                    "quantity": quantity,
                    "attributes": [{"key": k, "value": v} for k, v in attributes.items()],
                }
            ],
        }
        data = await self._request(CART_LINES_ADD, variables)
        return self._mutation_cart(data, "cartLinesAdd")

    async def update_line(self, cart_id: str, line_id: str, quantity: int) -> RemoteCart:
        variables = {"cartId": cart_id, "lines": [{"id": line_id, "quantity": quantity}]}
        data = await self._request(CART_LINES_UPDATE, variables)
        return self._mutation_cart(data, "cartLinesUpdate")

    async def remove_lines(self, cart_id: str, line_ids: Sequence[str]) -> RemoteCart:
        variables = {"cartId": cart_id, "lineIds": list(line_ids)}
        data = await self._request(CART_LINES_REMOVE, variables)
        return self._mutation_cart(data, "cartLinesRemove")
