"""Interface for the short-lived key-value store backing the relay."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Key-value store with per-key expiry.

    Implementations must be atomic per key and must stop returning a value once
    its TTL has lapsed, even if the physical record is still around.
    Failures to reach the backing service are raised as
    :class:`~oauth_relay.core.errors.KeyValueStoreError`.
    """

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    async def get(self, key: str) -> Optional[str]:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def take(self, key: str) -> Optional[str]:
        """Return the live value for ``key`` and remove it in one step."""
        ...


__all__ = ["KeyValueStore"]
