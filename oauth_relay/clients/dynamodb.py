"""
DynamoDB-backed key-value store for multi-instance deployments.
"""

from __future__ import annotations

import asyncio
import math
import time
from typing import Any, Callable, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from oauth_relay.core.config import StoreSettings
from oauth_relay.core.errors import KeyValueStoreError


class DynamoDBKeyValueStore:
    """Store entries as ``{pk, value, expires_at}`` items.

    ``expires_at`` is epoch seconds so the table's native TTL feature can reap
    old items. DynamoDB deletes expired items lazily (up to days later), so
    reads also compare ``expires_at`` against the clock.
    """

    def __init__(
        self,
        settings: StoreSettings,
        *,
        table: Any = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._clock = clock
        if table is not None:
            self._table = table
            return
        if not settings.dynamodb_table_name:
            raise ValueError("DYNAMODB_TABLE_NAME is required for the dynamodb store backend.")
        resource = boto3.resource("dynamodb", region_name=settings.region_name)
        self._table = resource.Table(settings.dynamodb_table_name)

    def _is_live(self, item: Optional[dict]) -> bool:
        if not item:
            return False
        return float(item.get("expires_at", 0)) > self._clock()

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Write the entry, replacing any previous value for the key."""
        expires_at = int(math.ceil(self._clock() + ttl_seconds))

        def _execute_put() -> None:
            try:
                self._table.put_item(
                    Item={"pk": key, "value": value, "expires_at": expires_at}
                )
            except (BotoCoreError, ClientError) as exc:
                raise KeyValueStoreError(f"DynamoDB put failed: {exc}") from exc

        await asyncio.to_thread(_execute_put)

    async def get(self, key: str) -> Optional[str]:
        """Read the entry with a strongly consistent read."""

        def _execute_get() -> Optional[dict]:
            try:
                response = self._table.get_item(Key={"pk": key}, ConsistentRead=True)
            except (BotoCoreError, ClientError) as exc:
                raise KeyValueStoreError(f"DynamoDB get failed: {exc}") from exc
            return response.get("Item")

        item = await asyncio.to_thread(_execute_get)
        if not self._is_live(item):
            return None
        return item["value"]

    async def delete(self, key: str) -> None:
        def _execute_delete() -> None:
            try:
                self._table.delete_item(Key={"pk": key})
            except (BotoCoreError, ClientError) as exc:
                raise KeyValueStoreError(f"DynamoDB delete failed: {exc}") from exc

        await asyncio.to_thread(_execute_delete)

    async def take(self, key: str) -> Optional[str]:
        """Delete the item and hand back what was removed, in one request."""

        def _execute_take() -> Optional[dict]:
            try:
                response = self._table.delete_item(
                    Key={"pk": key}, ReturnValues="ALL_OLD"
                )
            except (BotoCoreError, ClientError) as exc:
                raise KeyValueStoreError(f"DynamoDB delete failed: {exc}") from exc
            return response.get("Attributes")

        item = await asyncio.to_thread(_execute_take)
        if not self._is_live(item):
            return None
        return item["value"]


__all__ = ["DynamoDBKeyValueStore"]
