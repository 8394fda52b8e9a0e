"""
Error taxonomy and common error messages.

Centralized error messages to avoid string duplication (SonarQube S1192).
"""

# Configuration errors
ERROR_STOREFRONT_NOT_CONFIGURED = "Storefront API not configured"
ERROR_VARIANT_NOT_CONFIGURED = "Label product variant not configured"

# Session errors
ERROR_CART_CREATE_FAILED = "Failed to create cart"
ERROR_CART_VALIDATION_FAILED = "Failed to validate cart"

# Mutation errors
ERROR_MUTATION_FAILED = "Cart update failed"
ERROR_CART_EMPTY = "Cart is empty"
ERROR_LINE_NOT_FOUND = "Cart line not found"

# Validation errors
ERROR_INVALID_QUANTITY = "quantity must be an integer between {min} and {max}"
ERROR_TEXT_TOO_LONG = "text must be at most {max} characters"


class CartError(Exception):
    """Base class for every cart failure surfaced to callers."""


class ConfigurationError(CartError):
    """Remote service not reachable or not configured. Fatal to cart operations."""


class SessionError(CartError):
    """Creating or validating the cart session failed."""


class MutationError(CartError):
    """
    A specific add/update/remove/clear failed.

    ``remote_message`` carries the joined remote user errors when the
    storefront reported them; ``is_user_error`` tells those apart from
    transport failures.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        remote_message: str | None = None,
        is_user_error: bool = False,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.remote_message = remote_message
        self.is_user_error = is_user_error


class NotFoundError(CartError):
    """Operation targeted a line without a known remote handle."""

    def __init__(self, line_id: str | None) -> None:
        super().__init__(f"{ERROR_LINE_NOT_FOUND}: {line_id or 'N/A'}")
        self.line_id = line_id


class StorefrontError(Exception):
    """Transport, HTTP or GraphQL-level failure talking to the storefront."""


class StorefrontUserError(StorefrontError):
    """The storefront rejected a mutation with a list of user errors."""

    def __init__(self, messages: list[str]) -> None:
        self.messages = [m for m in messages if m]
        super().__init__(", ".join(self.messages) or ERROR_MUTATION_FAILED)


class MeasurementUnavailable(Exception):
    """The rendering surface cannot measure text right now."""
