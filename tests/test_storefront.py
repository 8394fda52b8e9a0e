"""
Tests for the Storefront GraphQL client
"""

import json
from decimal import Decimal

import httpx
import pytest

from tonnentext.config import StorefrontSettings
from tonnentext.cart import CartStore, MemorySessionStorage
from tonnentext.errors import ConfigurationError, SessionError, StorefrontError, StorefrontUserError
from tonnentext.storefront import ACCESS_TOKEN_HEADER, StorefrontClient, variant_gid

CART = {
    "id": "gid://shopify/Cart/c1",
    "checkoutUrl": "https://test-shop.myshopify.com/cart/c/c1",
    "totalQuantity": 2,
    "cost": {"totalAmount": {"amount": "25.8", "currencyCode": "EUR"}},
    "lines": {"edges": [{"node": {
        "id": "gid://shopify/CartLine/l1",
        "quantity": 2,
        "attributes": [{"key": "label_text", "value": "MÜLLER"}],
        "cost": {"totalAmount": {"amount": "25.8", "currencyCode": "EUR"}},
    }}]},
}


def _client(settings, handler):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return StorefrontClient(settings, http_client=http)


def _respond(data=None, errors=None, status=200):
    body = {}
    if data is not None:
        body["data"] = data
    if errors is not None:
        body["errors"] = errors

    def handler(request: httpx.Request) -> httpx.Response:
        handler.requests.append(request)
        return httpx.Response(status, json=body)

    handler.requests = []
    return handler


class TestRequests:
    """Tests for request shape."""

    @pytest.mark.asyncio
    async def test_posts_to_versioned_endpoint(self, settings):
        handler = _respond({"cartCreate": {"cart": CART, "userErrors": []}})
        client = _client(settings, handler)

        await client.create_cart()

        request = handler.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://test-shop.myshopify.com/api/2024-01/graphql.json"
        assert request.headers[ACCESS_TOKEN_HEADER] == "test_token"
        assert "cartCreate" in json.loads(request.content)["query"]

    @pytest.mark.asyncio
    async def test_add_line_variables(self, settings):
        handler = _respond({"cartLinesAdd": {"cart": CART, "userErrors": []}})
        client = _client(settings, handler)

        await client.add_line("gid://shopify/Cart/c1", "4711", 2, {"label_text": "MÜLLER"})

        variables = json.loads(handler.requests[0].content)["variables"]
        assert variables["cartId"] == "gid://shopify/Cart/c1"
        assert variables["lines"] == [{
            "merchandiseId": "gid://shopify/ProductVariant/4711",
            "quantity": 2,
            "attributes": [{"key": "label_text", "value": "MÜLLER"}],
        }]

    @pytest.mark.asyncio
    async def test_remove_lines_variables(self, settings):
        handler = _respond({"cartLinesRemove": {"cart": CART, "userErrors": []}})
        client = _client(settings, handler)

        await client.remove_lines("gid://shopify/Cart/c1", ("a", "b"))

        variables = json.loads(handler.requests[0].content)["variables"]
        assert variables == {"cartId": "gid://shopify/Cart/c1", "lineIds": ["a", "b"]}

    def test_variant_gid(self):
        assert variant_gid("4711") == "gid://shopify/ProductVariant/4711"
        assert variant_gid("gid://shopify/ProductVariant/1") == "gid://shopify/ProductVariant/1"


class TestResponses:
    """Tests for response parsing and error mapping."""

    @pytest.mark.asyncio
    async def test_parses_cart(self, settings):
        client = _client(settings, _respond({"cart": CART}))

        cart = await client.query_cart("gid://shopify/Cart/c1")

        assert cart.id == "gid://shopify/Cart/c1"
        assert cart.total_quantity == 2
        assert cart.total_price == Decimal("25.8")
        assert cart.lines[0].attribute_map == {"label_text": "MÜLLER"}
        assert cart.lines[0].line_total == Decimal("25.8")

    @pytest.mark.asyncio
    async def test_unknown_cart_is_none(self, settings):
        client = _client(settings, _respond({"cart": None}))
        assert await client.query_cart("gid://shopify/Cart/gone") is None

    @pytest.mark.asyncio
    async def test_user_errors(self, settings):
        handler = _respond({"cartLinesUpdate": {
            "cart": None,
            "userErrors": [{"field": ["lines"], "message": "Too many"}, {"field": None, "message": "Nope"}],
        }})
        client = _client(settings, handler)

        with pytest.raises(StorefrontUserError) as exc_info:
            await client.update_line("gid://shopify/Cart/c1", "l1", 500)

        assert str(exc_info.value) == "Too many, Nope"
        assert exc_info.value.messages == ["Too many", "Nope"]

    @pytest.mark.asyncio
    async def test_graphql_errors(self, settings):
        client = _client(settings, _respond(errors=[{"message": "Throttled"}]))

        with pytest.raises(StorefrontError, match="Throttled"):
            await client.query_cart("gid://shopify/Cart/c1")

    @pytest.mark.asyncio
    async def test_http_error(self, settings):
        client = _client(settings, _respond({}, status=500))

        with pytest.raises(StorefrontError, match="HTTP 500"):
            await client.create_cart()

    @pytest.mark.asyncio
    async def test_transport_error(self, settings):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        client = _client(settings, handler)

        with pytest.raises(StorefrontError) as exc_info:
            await client.create_cart()
        assert not isinstance(exc_info.value, StorefrontUserError)

    @pytest.mark.asyncio
    async def test_mutation_without_cart(self, settings):
        client = _client(settings, _respond({"cartCreate": {"cart": None, "userErrors": []}}))

        with pytest.raises(StorefrontError):
            await client.create_cart()

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        handler = _respond({"cart": CART})
        client = _client(StorefrontSettings(access_token=""), handler)

        with pytest.raises(ConfigurationError):
            await client.query_cart("gid://shopify/Cart/c1")
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_aclose(self, settings):
        client = _client(settings, _respond({"cart": CART}))
        await client.aclose()
        assert client._http_client is None


class TestMalformedResponses:
    """Tests for payloads that do not match the cart schema."""

    BROKEN_CART = {
        "id": "gid://shopify/Cart/c1",
        "lines": {"edges": [{"node": {"id": "gid://shopify/CartLine/l1", "quantity": None}}]},
    }

    @pytest.mark.asyncio
    async def test_query_raises_storefront_error(self, settings):
        client = _client(settings, _respond({"cart": self.BROKEN_CART}))

        with pytest.raises(StorefrontError, match="Invalid storefront response"):
            await client.query_cart("gid://shopify/Cart/c1")

    @pytest.mark.asyncio
    async def test_mutation_raises_storefront_error(self, settings):
        client = _client(settings, _respond({"cartLinesAdd": {"cart": self.BROKEN_CART, "userErrors": []}}))

        with pytest.raises(StorefrontError) as exc_info:
            await client.add_line("gid://shopify/Cart/c1", "4711", 1, {})
        assert not isinstance(exc_info.value, StorefrontUserError)

    @pytest.mark.asyncio
    async def test_store_reports_session_error(self, settings):
        client = _client(settings, _respond({"cart": self.BROKEN_CART}))
        store = CartStore(client, MemorySessionStorage("gid://shopify/Cart/c1"))

        with pytest.raises(SessionError):
            await store.snapshot()
