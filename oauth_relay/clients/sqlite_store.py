"""SQLite-backed key-value store with TTL expiry."""

from __future__ import annotations

import asyncio
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

from oauth_relay.core.errors import KeyValueStoreError


class SQLiteKeyValueStore:
    """Key-value store on a single table keyed by ``key`` with an expiry column.

    Expired rows are hidden from reads and lazily removed; there is no
    background sweep. ``take`` runs inside an immediate transaction so two
    workers sharing the database file cannot both consume the same row.
    """

    def __init__(self, db_path: str, clock: Callable[[], float] = time.time) -> None:
        self._db_path = Path(db_path)
        self._clock = clock
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(
                self._db_path, check_same_thread=False, isolation_level=None
            )
        except sqlite3.Error as exc:
            raise KeyValueStoreError(f"Unable to open key-value store: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as exc:
            raise KeyValueStoreError(f"Key-value store operation failed: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS relay_entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    expires_at REAL NOT NULL
                )
                """
            )

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        expires_at = self._clock() + ttl_seconds

        def _execute_put() -> None:
            with self._connection() as conn:
                conn.execute(
                    """
                    INSERT INTO relay_entries (key, value, expires_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        expires_at = excluded.expires_at
                    """,
                    (key, value, expires_at),
                )

        await asyncio.to_thread(_execute_put)

    async def get(self, key: str) -> Optional[str]:
        now = self._clock()

        def _execute_get() -> Optional[str]:
            with self._connection() as conn:
                row = conn.execute(
                    "SELECT value, expires_at FROM relay_entries WHERE key = ?",
                    (key,),
                ).fetchone()
                if not row:
                    return None
                if row["expires_at"] <= now:
                    conn.execute(
                        "DELETE FROM relay_entries WHERE key = ? AND expires_at <= ?",
                        (key, now),
                    )
                    return None
            return row["value"]

        return await asyncio.to_thread(_execute_get)

    async def delete(self, key: str) -> None:
        def _execute_delete() -> None:
            with self._connection() as conn:
                conn.execute("DELETE FROM relay_entries WHERE key = ?", (key,))

        await asyncio.to_thread(_execute_delete)

    async def take(self, key: str) -> Optional[str]:
        now = self._clock()

        def _execute_take() -> Optional[sqlite3.Row]:
            with self._connection() as conn:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    row = conn.execute(
                        "SELECT value, expires_at FROM relay_entries WHERE key = ?",
                        (key,),
                    ).fetchone()
                    if row:
                        conn.execute("DELETE FROM relay_entries WHERE key = ?", (key,))
                    conn.execute("COMMIT")
                except sqlite3.Error:
                    conn.execute("ROLLBACK")
                    raise
            return row

        row = await asyncio.to_thread(_execute_take)
        if not row or row["expires_at"] <= now:
            return None
        return row["value"]


__all__ = ["SQLiteKeyValueStore"]
