"""Expose constructed client wrappers."""

from .dynamodb import DynamoDBKeyValueStore
from .kv_store import KeyValueStore
from .memory_store import InMemoryKeyValueStore
from .sqlite_store import SQLiteKeyValueStore
from .token_exchange import ExchangeResponse, TokenExchangeClient

__all__ = [
    "DynamoDBKeyValueStore",
    "ExchangeResponse",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SQLiteKeyValueStore",
    "TokenExchangeClient",
]
