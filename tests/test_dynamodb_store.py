from __future__ import annotations

import asyncio
import time

import pytest
from botocore.exceptions import ClientError

from oauth_relay.clients import DynamoDBKeyValueStore
from oauth_relay.core.config import StoreSettings
from oauth_relay.core.errors import KeyValueStoreError


class FakeTable:
    """Mimics the subset of the boto3 Table resource used by the store."""

    def __init__(self) -> None:
        self.items: dict[str, dict] = {}
        self.get_calls: list[dict] = []

    def put_item(self, *, Item: dict) -> dict:
        self.items[Item["pk"]] = dict(Item)
        return {}

    def get_item(self, *, Key: dict, ConsistentRead: bool = False) -> dict:
        self.get_calls.append({"Key": Key, "ConsistentRead": ConsistentRead})
        item = self.items.get(Key["pk"])
        return {"Item": dict(item)} if item else {}

    def delete_item(self, *, Key: dict, ReturnValues: str = "NONE") -> dict:
        item = self.items.pop(Key["pk"], None)
        if ReturnValues == "ALL_OLD" and item:
            return {"Attributes": item}
        return {}


class FailingTable:
    def _fail(self, **_: object) -> dict:
        raise ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "no table"}},
            "PutItem",
        )

    put_item = get_item = delete_item = _fail


def _store(table, clock) -> DynamoDBKeyValueStore:
    return DynamoDBKeyValueStore(StoreSettings(), table=table, clock=clock)


@pytest.mark.asyncio
async def test_put_writes_ttl_attribute_in_epoch_seconds(clock) -> None:
    table = FakeTable()
    store = _store(table, clock)

    await store.put("readKey:w1", "r1", 60)

    item = table.items["readKey:w1"]
    assert item["value"] == "r1"
    assert item["expires_at"] == int(clock.now) + 60


@pytest.mark.asyncio
async def test_get_uses_consistent_reads_and_hides_expired_items(clock) -> None:
    table = FakeTable()
    store = _store(table, clock)
    await store.put("readKey:w1", "r1", 60)

    assert await store.get("readKey:w1") == "r1"
    assert table.get_calls[-1]["ConsistentRead"] is True

    # TTL deletion in DynamoDB is lazy; the item is still physically present.
    clock.advance(61)
    assert "readKey:w1" in table.items
    assert await store.get("readKey:w1") is None


@pytest.mark.asyncio
async def test_take_deletes_and_returns_previous_value_once(clock) -> None:
    table = FakeTable()
    store = _store(table, clock)
    await store.put("tokens:r1", '{"access_token": "tok"}', 300)

    assert await store.take("tokens:r1") == '{"access_token": "tok"}'
    assert "tokens:r1" not in table.items
    assert await store.take("tokens:r1") is None


@pytest.mark.asyncio
async def test_take_of_expired_item_returns_nothing(clock) -> None:
    table = FakeTable()
    store = _store(table, clock)
    await store.put("tokens:r1", "{}", 300)
    clock.advance(301)

    assert await store.take("tokens:r1") is None


@pytest.mark.asyncio
async def test_delete_removes_item(clock) -> None:
    table = FakeTable()
    store = _store(table, clock)
    await store.put("k", "v", 60)

    await store.delete("k")

    assert table.items == {}


@pytest.mark.asyncio
async def test_client_errors_become_store_errors(clock) -> None:
    store = _store(FailingTable(), clock)

    with pytest.raises(KeyValueStoreError):
        await store.put("k", "v", 60)
    with pytest.raises(KeyValueStoreError):
        await store.get("k")
    with pytest.raises(KeyValueStoreError):
        await store.take("k")


def test_table_name_required_without_injected_table() -> None:
    with pytest.raises(ValueError):
        DynamoDBKeyValueStore(StoreSettings(dynamodb_table_name=None))


class SlowTable(FakeTable):
    """Table whose reads block the calling thread like a real network round trip."""

    def __init__(self, delay: float) -> None:
        super().__init__()
        self.delay = delay

    def get_item(self, *, Key: dict, ConsistentRead: bool = False) -> dict:
        time.sleep(self.delay)
        return super().get_item(Key=Key, ConsistentRead=ConsistentRead)


@pytest.mark.asyncio
async def test_slow_reads_do_not_block_the_event_loop(clock) -> None:
    table = SlowTable(delay=0.4)
    store = _store(table, clock)
    await store.put("a", "1", 60)
    await store.put("b", "2", 60)
    started = time.perf_counter()
    ticks: list[float] = []

    async def ticker() -> None:
        for _ in range(4):
            await asyncio.sleep(0.05)
            ticks.append(time.perf_counter() - started)

    first, second, _ = await asyncio.gather(store.get("a"), store.get("b"), ticker())

    assert (first, second) == ("1", "2")
    assert time.perf_counter() - started < 0.75
    assert ticks[0] < 0.3


@pytest.mark.asyncio
async def test_concurrent_takes_deliver_item_once(clock) -> None:
    table = FakeTable()
    store = _store(table, clock)
    await store.put("tokens:r1", "bundle", 300)

    results = await asyncio.gather(*(store.take("tokens:r1") for _ in range(6)))

    assert results.count("bundle") == 1
