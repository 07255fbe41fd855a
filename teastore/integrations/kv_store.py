"""Durable key-value storage: Redis with in-memory fallback."""
from __future__ import annotations

import os
from typing import Protocol

from redis import asyncio as aioredis

from teastore.logging_config import logger


class KeyValueStore(Protocol):
    """String key-value storage used for the cart and the auth session."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """Process-local store; contents are lost on restart."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)


class RedisKeyValueStore:
    """Redis-backed store that degrades to memory when Redis is unreachable."""

    def __init__(self, redis_url: str | None = None, *, namespace: str = "teastore"):
        self._redis_url = redis_url or os.getenv("REDIS_URL")
        self._namespace = namespace
        self._client = None
        self._connected = False
        self._memory = MemoryKeyValueStore()

    @property
    def using_fallback(self) -> bool:
        return self._connected and self._client is None

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}" if self._namespace else key

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Redis storage fallback to memory mode: %s", reason)
        self._client = None

    async def _ensure_client(self):
        if self._connected:
            return self._client
        self._connected = True

        if not self._redis_url:
            logger.warning("REDIS_URL is not set; storage uses in-memory fallback")
            return None

        try:
            client = aioredis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            await client.ping()
            logger.info("Redis storage enabled")
            self._client = client
        except Exception as exc:
            logger.warning("Redis storage init failed, fallback to in-memory: %s", exc)
            self._client = None
        return self._client

    async def get(self, key: str) -> str | None:
        client = await self._ensure_client()
        if client is None:
            return await self._memory.get(key)
        try:
            return await client.get(self._key(key))
        except Exception as exc:
            self._switch_to_memory_fallback(exc)
            return await self._memory.get(key)

    async def set(self, key: str, value: str) -> None:
        client = await self._ensure_client()
        if client is not None:
            try:
                await client.set(self._key(key), value)
                return
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        await self._memory.set(key, value)

    async def remove(self, key: str) -> None:
        client = await self._ensure_client()
        if client is not None:
            try:
                await client.delete(self._key(key))
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        await self._memory.remove(key)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
        self._client = None
        self._connected = False


def create_kv_store(redis_url: str | None) -> KeyValueStore:
    if redis_url:
        return RedisKeyValueStore(redis_url)
    logger.info("No REDIS_URL configured; cart persists in memory only")
    return MemoryKeyValueStore()
