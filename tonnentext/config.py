"""Storefront configuration and validation."""
import os
from dataclasses import dataclass
from functools import cache
from typing import Dict, Optional

from dotenv import load_dotenv

from tonnentext.errors import ConfigurationError, ERROR_STOREFRONT_NOT_CONFIGURED
from tonnentext.logging import get_logger

logger = get_logger(__name__)

DEFAULT_STORE_DOMAIN = "tonnentext.myshopify.com"
DEFAULT_API_VERSION = "2024-01"
DEFAULT_POLL_INTERVAL = 2.0

# Settings required before any cart operation may run
REQUIRED_ENV_VARS = ("STOREFRONT_STORE_DOMAIN", "STOREFRONT_ACCESS_TOKEN", "LABEL_VARIANT_ID")


@dataclass(frozen=True)
class StorefrontSettings:
    """Environment-driven settings for the storefront and session storage."""
    store_domain: str = DEFAULT_STORE_DOMAIN
    access_token: str = ""
    api_version: str = DEFAULT_API_VERSION
    label_variant_id: str = ""
    poll_interval: float = DEFAULT_POLL_INTERVAL
    redis_url: str = ""
    redis_token: str = ""
    session_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "StorefrontSettings":
        """Read settings from environment variables."""
        raw_interval = os.environ.get("CART_POLL_INTERVAL", "")
        try:
            poll_interval = float(raw_interval) if raw_interval else DEFAULT_POLL_INTERVAL
        except ValueError:
            logger.warning("Invalid CART_POLL_INTERVAL %r, using %s", raw_interval, DEFAULT_POLL_INTERVAL)
            poll_interval = DEFAULT_POLL_INTERVAL

        return cls(
            store_domain=os.environ.get("STOREFRONT_STORE_DOMAIN", DEFAULT_STORE_DOMAIN),
            access_token=os.environ.get("STOREFRONT_ACCESS_TOKEN", ""),
            api_version=os.environ.get("STOREFRONT_API_VERSION", DEFAULT_API_VERSION),
            label_variant_id=os.environ.get("LABEL_VARIANT_ID", ""),
            poll_interval=poll_interval,
            redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
            redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
            session_file=os.environ.get("CART_SESSION_FILE") or None,
        )

    @property
    def store_url(self) -> str:
        return f"https://{self.store_domain}"

    @property
    def api_url(self) -> str:
        return f"{self.store_url}/api/{self.api_version}/graphql.json"

    @property
    def redis_configured(self) -> bool:
        return bool(self.redis_url and self.redis_token)

    def as_env(self) -> Dict[str, str]:
        """Map required env var names to their current values."""
        return {
            "STOREFRONT_STORE_DOMAIN": self.store_domain,
            "STOREFRONT_ACCESS_TOKEN": self.access_token,
            "LABEL_VARIANT_ID": self.label_variant_id,
        }

    def is_configured(self) -> bool:
        """Check the storefront settings without raising."""
        return bool(self.access_token and self.store_domain)

    def validate(self) -> "StorefrontSettings":
        """
        Validate storefront configuration.

        Returns:
            The settings themselves, for chaining

        Raises:
            ConfigurationError: If any required variable is missing
        """
        env = self.as_env()
        missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
        if missing:
            logger.error("Storefront not configured. Missing: %s", missing)
            raise ConfigurationError(f"{ERROR_STOREFRONT_NOT_CONFIGURED}. Set: {', '.join(missing)}")
        return self


@cache
def get_settings() -> StorefrontSettings:
    """Get settings singleton (loads .env once)."""
    load_dotenv()
    return StorefrontSettings.from_env()
