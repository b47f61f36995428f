"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_correlation_service,
    get_key_value_store,
    get_token_cipher_service,
    get_token_exchange_client,
)
from .config import get_app_settings, get_provider_settings

__all__ = [
    "get_app_settings",
    "get_correlation_service",
    "get_key_value_store",
    "get_provider_settings",
    "get_token_cipher_service",
    "get_token_exchange_client",
]
