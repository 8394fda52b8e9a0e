"""
Tonnentext Core Module

This package contains the label configurator back end:
- units: shared px / pt / mm conversion
- labels: label configuration value object and PDF artifact
- sizing: auto-fit font sizing engine
- storefront: GraphQL client for the remote cart service
- cart: cart store reconciling the local snapshot with the remote cart

Note: Imports are lazy so that importing the sizing engine does not pull in
the HTTP and Redis stacks.
"""

__all__ = [
    "CartStore",
    "SizingEngine",
    "StorefrontClient",
    "get_settings",
]


def __getattr__(name):
    """Lazy attribute access for the public entry points."""
    if name == "CartStore":
        from tonnentext.cart import CartStore
        return CartStore
    if name == "SizingEngine":
        from tonnentext.sizing import SizingEngine
        return SizingEngine
    if name == "StorefrontClient":
        from tonnentext.storefront import StorefrontClient
        return StorefrontClient
    if name == "get_settings":
        from tonnentext.config import get_settings
        return get_settings
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
