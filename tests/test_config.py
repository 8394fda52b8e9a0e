"""
Tests for settings, money and logging helpers
"""

from decimal import Decimal

import pytest

from tonnentext.config import StorefrontSettings
from tonnentext.errors import ConfigurationError
from tonnentext.logging import sanitize_id_for_logging, sanitize_string_for_logging
from tonnentext.money import format_money, round_money, to_decimal, total


class TestSettings:

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("STOREFRONT_STORE_DOMAIN", "shop.example.com")
        monkeypatch.setenv("STOREFRONT_ACCESS_TOKEN", "abc")
        monkeypatch.setenv("STOREFRONT_API_VERSION", "2024-04")
        monkeypatch.setenv("CART_POLL_INTERVAL", "5")

        settings = StorefrontSettings.from_env()

        assert settings.api_url == "https://shop.example.com/api/2024-04/graphql.json"
        assert settings.poll_interval == 5.0

    def test_invalid_poll_interval(self, monkeypatch):
        monkeypatch.setenv("CART_POLL_INTERVAL", "soon")
        assert StorefrontSettings.from_env().poll_interval == 2.0

    def test_validate_lists_missing(self):
        settings = StorefrontSettings(store_domain="shop.example.com", access_token="")

        with pytest.raises(ConfigurationError) as exc_info:
            settings.validate()

        message = str(exc_info.value)
        assert "STOREFRONT_ACCESS_TOKEN" in message
        assert "LABEL_VARIANT_ID" in message
        assert "STOREFRONT_STORE_DOMAIN" not in message

    def test_validate_ok(self, settings):
        assert settings.validate() is settings
        assert settings.is_configured() is True


class TestMoney:

    def test_to_decimal(self):
        assert to_decimal("25.8") == Decimal("25.8")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("abc") == Decimal("0")

    def test_round_money(self):
        assert round_money("12.905") == Decimal("12.91")

    def test_total(self):
        assert total(["12.90", Decimal("25.80")]) == Decimal("38.70")

    @pytest.mark.parametrize("value,expected", [
        ("25.8", "25,80 €"),
        (Decimal("0"), "0,00 €"),
        ("1290", "1.290,00 €"),
    ])
    def test_format_money(self, value, expected):
        assert format_money(value) == expected


class TestLogSanitizing:

    def test_id_keeps_tail(self):
        assert sanitize_id_for_logging("gid://shopify/Cart/abcdef123456") == "ef123456"
        assert sanitize_id_for_logging(None) == "N/A"

    def test_string_escapes_newlines(self):
        assert sanitize_string_for_logging("a\nb") == "a\\nb"
        assert sanitize_string_for_logging("x" * 60).endswith("...")

    def test_short_id_kept_whole(self):
        assert sanitize_id_for_logging("l1\nx") == "l1\\nx"
