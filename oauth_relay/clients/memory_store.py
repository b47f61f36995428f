"""Process-local key-value store used for development and tests."""

from __future__ import annotations

import time
from typing import Callable, Dict, Optional, Tuple


class InMemoryKeyValueStore:
    """Dictionary-backed store with lazy TTL expiry.

    The clock is injectable so expiry can be driven by a simulated time source.
    Only suitable for a single process; entries are not shared between workers.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (value, self._clock() + ttl_seconds)

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def take(self, key: str) -> Optional[str]:
        entry = self._entries.pop(key, None)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            return None
        return value

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["InMemoryKeyValueStore"]
