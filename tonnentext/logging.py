"""
Logging for the configurator back end.

Modules log through ``get_logger(__name__)``. Cart and line handles and
customer label text go through the sanitizers before they reach a record.
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# Third-party loggers kept at WARNING; the storefront client logs its own calls
QUIET_LOGGERS = ("httpx", "httpcore", "PIL", "reportlab")

# Storefront GIDs differ only after "gid://shopify/Cart/"
HANDLE_TAIL_LENGTH = 8


def _is_production() -> bool:
    return (
        os.environ.get("VERCEL") == "1"
        or os.environ.get("TONNENTEXT_ENV", "").lower() == "production"
    )


def _configure_root_logger() -> None:
    root = logging.getLogger()
    if root.handlers:
        return

    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if _is_production() else LOG_FORMAT))

    root.setLevel(level)
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_configure_root_logger()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _escape(value: str) -> str:
    """Neutralise line breaks and NULs so one record stays one line (CWE-117)."""
    return (
        value.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )


def sanitize_id_for_logging(id_value: str | None) -> str:
    """Last ``HANDLE_TAIL_LENGTH`` characters of a cart or line handle, or "N/A"."""
    if not id_value:
        return "N/A"
    return _escape(str(id_value))[-HANDLE_TAIL_LENGTH:]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """
    Escaped label text or remote message, cut to ``max_length`` with "...".

    Returns "N/A" for empty input.
    """
    if not value:
        return "N/A"
    safe_value = _escape(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
