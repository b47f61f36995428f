"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from oauth_relay.clients import (
    DynamoDBKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    SQLiteKeyValueStore,
    TokenExchangeClient,
)
from oauth_relay.core.config import get_settings
from oauth_relay.services import CorrelationService, TokenCipherService


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_key_value_store() -> KeyValueStore:
    """Provide the configured ephemeral store backend."""
    store_settings = _settings().store
    if store_settings.backend == "dynamodb":
        return DynamoDBKeyValueStore(store_settings)
    if store_settings.backend == "memory":
        return InMemoryKeyValueStore()
    return SQLiteKeyValueStore(store_settings.sqlite_path)


@lru_cache()
def get_token_exchange_client() -> TokenExchangeClient:
    """Provide the provider token endpoint client."""
    return TokenExchangeClient()


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide the sealing helper for parked token bundles."""
    return TokenCipherService(secret=_settings().security.token_encryption_secret)


def get_correlation_service() -> CorrelationService:
    """Build the correlation protocol over the shared store and clients."""
    return CorrelationService(
        store=get_key_value_store(),
        exchange_client=get_token_exchange_client(),
        relay_settings=_settings().relay,
        token_cipher=get_token_cipher_service(),
    )


__all__ = [
    "get_correlation_service",
    "get_key_value_store",
    "get_token_cipher_service",
    "get_token_exchange_client",
]
