"""Key-value store contract and its backends.

The session and verification stores only talk to a ``KeyValueStore``. Expiry is
owned by the backend: an expired key must read as absent.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import timedelta
from typing import Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.shared.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Async key-value contract with per-key TTL and set values."""

    async def set(self, key: str, value: str, ttl: timedelta) -> None: ...

    async def get(self, key: str) -> str | None: ...

    async def delete(self, key: str) -> None: ...

    async def add_to_set(self, set_key: str, member: str) -> None: ...

    async def members_of(self, set_key: str) -> set[str]: ...

    async def remove_from_set(self, set_key: str, member: str) -> None: ...

    async def set_expiry(self, key: str, ttl: timedelta) -> None: ...


def _ttl_millis(ttl: timedelta) -> int:
    millis = int(ttl.total_seconds() * 1000)
    if millis <= 0:
        raise ValueError(f"TTL must be positive, got {ttl}")
    return millis


@contextmanager
def _translate_errors(operation: str, key: str) -> Iterator[None]:
    # Keys embed refresh tokens; only the namespace is logged
    try:
        yield
    except RedisError as err:
        logger.error(f"Redis {operation} failed in namespace {key.split(':', 1)[0]}: {err}")
        raise StoreUnavailable(f"redis {operation} failed") from err


class RedisKeyValueStore:
    """Redis backend. TTLs rely on Redis native expiry."""

    def __init__(self, client: aioredis.Redis):
        self.client = client

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        with _translate_errors("set", key):
            await self.client.set(key, value, px=_ttl_millis(ttl))

    async def get(self, key: str) -> str | None:
        with _translate_errors("get", key):
            return await self.client.get(key)

    async def delete(self, key: str) -> None:
        with _translate_errors("delete", key):
            await self.client.delete(key)

    async def add_to_set(self, set_key: str, member: str) -> None:
        with _translate_errors("sadd", set_key):
            await self.client.sadd(set_key, member)

    async def members_of(self, set_key: str) -> set[str]:
        with _translate_errors("smembers", set_key):
            return set(await self.client.smembers(set_key))

    async def remove_from_set(self, set_key: str, member: str) -> None:
        with _translate_errors("srem", set_key):
            await self.client.srem(set_key, member)

    async def set_expiry(self, key: str, ttl: timedelta) -> None:
        with _translate_errors("pexpire", key):
            await self.client.pexpire(key, _ttl_millis(ttl))


class MemoryKeyValueStore:
    """In-process backend with explicit expiry checks.

    Expired keys are evicted lazily on access. The clock is injectable so
    callers can move time forward deterministically.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._values: dict[str, str] = {}
        self._sets: dict[str, set[str]] = {}
        self._expires_at: dict[str, float] = {}

    def _evict(self, key: str) -> None:
        self._values.pop(key, None)
        self._sets.pop(key, None)
        self._expires_at.pop(key, None)

    def _alive(self, key: str) -> bool:
        expires_at = self._expires_at.get(key)
        if expires_at is not None and expires_at <= self._clock():
            self._evict(key)
        return key in self._values or key in self._sets

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        millis = _ttl_millis(ttl)
        self._evict(key)
        self._values[key] = value
        self._expires_at[key] = self._clock() + millis / 1000

    async def get(self, key: str) -> str | None:
        if not self._alive(key):
            return None
        return self._values.get(key)

    async def delete(self, key: str) -> None:
        self._evict(key)

    async def add_to_set(self, set_key: str, member: str) -> None:
        if not self._alive(set_key):
            self._evict(set_key)
        self._sets.setdefault(set_key, set()).add(member)

    async def members_of(self, set_key: str) -> set[str]:
        if not self._alive(set_key):
            return set()
        return set(self._sets.get(set_key, ()))

    async def remove_from_set(self, set_key: str, member: str) -> None:
        if not self._alive(set_key):
            return
        members = self._sets.get(set_key)
        if members is None:
            return
        members.discard(member)
        # Redis drops empty sets
        if not members:
            self._evict(set_key)

    async def set_expiry(self, key: str, ttl: timedelta) -> None:
        millis = _ttl_millis(ttl)
        if self._alive(key):
            self._expires_at[key] = self._clock() + millis / 1000
