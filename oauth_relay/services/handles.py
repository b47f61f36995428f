"""Correlation handle generation."""

from __future__ import annotations

import secrets

HANDLE_BYTES = 32


def generate_handle() -> str:
    """Return a URL-safe handle carrying 256 bits from the OS CSPRNG."""
    return secrets.token_urlsafe(HANDLE_BYTES)


__all__ = ["HANDLE_BYTES", "generate_handle"]
