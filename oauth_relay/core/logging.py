"""
Logging utilities for the relay application and its operational scripts.

Provides a consistent logging format and configuration.
"""

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


def redact_handle(handle: str | None) -> str:
    """Shorten a correlation handle so logs never carry a usable value."""
    if not handle:
        return "<none>"
    return f"{handle[:6]}…"


__all__ = ["configure_logging", "redact_handle"]
