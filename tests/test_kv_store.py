from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from teastore.integrations.kv_store import MemoryKeyValueStore, RedisKeyValueStore, create_kv_store


@dataclass
class FakeAsyncRedis:
    data: dict[str, str] = field(default_factory=dict)
    fail_ping: bool = False
    fail_ops: bool = False
    closed: bool = False

    async def ping(self) -> bool:
        if self.fail_ping:
            raise ConnectionError("connection refused")
        return True

    async def get(self, key: str):
        if self.fail_ops:
            raise ConnectionError("connection lost")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> bool:
        if self.fail_ops:
            raise ConnectionError("connection lost")
        self.data[key] = value
        return True

    async def delete(self, key: str) -> int:
        if self.fail_ops:
            raise ConnectionError("connection lost")
        return 1 if self.data.pop(key, None) is not None else 0

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis(monkeypatch):
    import teastore.integrations.kv_store as kv_store_module

    client = FakeAsyncRedis()
    monkeypatch.setattr(kv_store_module.aioredis, "from_url", lambda *args, **kwargs: client)
    return client


async def test_redis_store_is_shared_between_instances(fake_redis) -> None:
    store_a = RedisKeyValueStore("redis://fake")
    store_b = RedisKeyValueStore("redis://fake")

    await store_a.set("cartItems", "[]")

    assert fake_redis.data == {"teastore:cartItems": "[]"}
    assert await store_b.get("cartItems") == "[]"
    await store_b.remove("cartItems")
    assert await store_a.get("cartItems") is None


async def test_redis_store_falls_back_when_ping_fails(fake_redis) -> None:
    fake_redis.fail_ping = True
    store = RedisKeyValueStore("redis://fake")

    await store.set("cartItems", "[1]")

    assert store.using_fallback
    assert await store.get("cartItems") == "[1]"
    assert fake_redis.data == {}


async def test_redis_store_falls_back_on_operation_error(fake_redis) -> None:
    store = RedisKeyValueStore("redis://fake")
    await store.get("cartItems")
    fake_redis.fail_ops = True

    await store.set("cartItems", "[2]")

    assert store.using_fallback
    assert await store.get("cartItems") == "[2]"


async def test_redis_store_close(fake_redis) -> None:
    store = RedisKeyValueStore("redis://fake")
    await store.get("x")
    await store.close()
    assert fake_redis.closed


async def test_create_kv_store_without_url_uses_memory() -> None:
    store = create_kv_store(None)
    assert isinstance(store, MemoryKeyValueStore)
    await store.set("k", "v")
    assert await store.get("k") == "v"


def test_create_kv_store_with_url_uses_redis() -> None:
    assert isinstance(create_kv_store("redis://localhost:6379/0"), RedisKeyValueStore)
