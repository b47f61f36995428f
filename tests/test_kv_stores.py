"""Behaviour shared by the in-memory and SQLite store backends."""

from __future__ import annotations

import asyncio

import pytest

from oauth_relay.clients import InMemoryKeyValueStore, KeyValueStore, SQLiteKeyValueStore


@pytest.fixture(params=["memory", "sqlite"])
def store(request, clock, tmp_path):
    if request.param == "memory":
        return InMemoryKeyValueStore(clock=clock)
    return SQLiteKeyValueStore(str(tmp_path / "nested" / "relay.db"), clock=clock)


def test_backends_satisfy_protocol(store) -> None:
    assert isinstance(store, KeyValueStore)


@pytest.mark.anyio
async def test_put_then_get_returns_value(store) -> None:
    await store.put("readKey:w1", "r1", 60)

    assert await store.get("readKey:w1") == "r1"
    assert await store.get("readKey:other") is None


@pytest.mark.anyio
async def test_put_overwrites_value_and_ttl(store, clock) -> None:
    await store.put("k", "first", 10)
    await store.put("k", "second", 100)
    clock.advance(50)

    assert await store.get("k") == "second"


@pytest.mark.anyio
async def test_value_disappears_once_ttl_lapses(store, clock) -> None:
    await store.put("k", "v", 60)

    clock.advance(59)
    assert await store.get("k") == "v"

    clock.advance(1)
    assert await store.get("k") is None


@pytest.mark.anyio
async def test_get_does_not_consume(store) -> None:
    await store.put("k", "v", 60)

    assert await store.get("k") == "v"
    assert await store.get("k") == "v"


@pytest.mark.anyio
async def test_take_returns_value_exactly_once(store) -> None:
    await store.put("tokens:r1", '{"access_token": "tok"}', 300)

    assert await store.take("tokens:r1") == '{"access_token": "tok"}'
    assert await store.take("tokens:r1") is None
    assert await store.get("tokens:r1") is None


@pytest.mark.anyio
async def test_take_ignores_expired_entry(store, clock) -> None:
    await store.put("k", "v", 5)
    clock.advance(10)

    assert await store.take("k") is None


@pytest.mark.anyio
async def test_delete_removes_entry_and_tolerates_missing_key(store) -> None:
    await store.put("k", "v", 60)

    await store.delete("k")
    await store.delete("never-written")

    assert await store.get("k") is None


@pytest.mark.anyio
async def test_concurrent_takes_hand_out_value_once(store) -> None:
    await store.put("tokens:r1", '{"access_token": "tok"}', 300)

    results = await asyncio.gather(*(store.take("tokens:r1") for _ in range(8)))

    assert [value for value in results if value is not None] == ['{"access_token": "tok"}']


@pytest.mark.anyio
async def test_sqlite_takes_from_separate_instances_race_safely(tmp_path, clock) -> None:
    db_path = str(tmp_path / "race.db")
    stores = [SQLiteKeyValueStore(db_path, clock=clock) for _ in range(4)]
    await stores[0].put("tokens:r1", "bundle", 300)

    results = await asyncio.gather(*(store.take("tokens:r1") for store in stores))

    assert results.count("bundle") == 1
    assert results.count(None) == 3


@pytest.mark.anyio
async def test_sqlite_entries_are_shared_between_instances(tmp_path, clock) -> None:
    db_path = str(tmp_path / "shared.db")
    writer = SQLiteKeyValueStore(db_path, clock=clock)
    reader = SQLiteKeyValueStore(db_path, clock=clock)

    await writer.put("readKey:w1", "r1", 60)

    assert await reader.get("readKey:w1") == "r1"
    assert await reader.take("readKey:w1") == "r1"
    assert await writer.get("readKey:w1") is None
