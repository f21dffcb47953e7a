"""
Per-tiger ingestion locks.

Two concurrent ingestions for the same tiger would otherwise interleave
their read of the last sighting with the write of the new one, letting
two near-duplicate sightings both pass the proximity gate.

Backends
--------
* ``KeyedAsyncLock``    -- one ``asyncio.Lock`` per key; single process.
* ``RedisSubjectLocks`` -- Redis ``DistributedLock`` per key; works across
  API processes.  SET NX EX for acquire and a Lua script for atomic
  check-and-delete on release.
* ``NullSubjectLocks``  -- no serialisation.
"""

from __future__ import annotations

import asyncio
import uuid
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import AsyncIterator, Protocol

import redis.asyncio as aioredis

from src.domain.errors import LockUnavailable


class SubjectLocks(Protocol):
    def hold(self, key: int) -> AbstractAsyncContextManager[None]:
        ...


class DistributedLock:
    def __init__(
        self,
        client: aioredis.Redis,
        key: str,
        ttl_seconds: int = 30,
        poll_interval: float = 0.05,
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.poll_interval = poll_interval
        self.token = str(uuid.uuid4())

    async def acquire(self) -> bool:
        """Try to acquire once. Returns True on success."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def acquire_within(self, wait_seconds: float) -> bool:
        """Poll until acquired or *wait_seconds* elapse."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + wait_seconds
        while True:
            if await self.acquire():
                return True
            if loop.time() >= deadline:
                return False
            await asyncio.sleep(self.poll_interval)

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        lua = """
        if redis.call("get", KEYS[1]) == ARGV[1] then
            return redis.call("del", KEYS[1])
        else
            return 0
        end
        """
        await self.redis.eval(lua, 1, self.key, self.token)

    # context-manager support
    async def __aenter__(self):
        if not await self.acquire():
            raise RuntimeError(f"Could not acquire lock: {self.key}")
        return self

    async def __aexit__(self, *args):
        await self.release()


class KeyedAsyncLock:
    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._holders: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, key: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                # Nobody holds or waits on it any more
                del self._holders[key]
                del self._locks[key]


class RedisSubjectLocks:
    def __init__(
        self,
        client: aioredis.Redis,
        ttl_seconds: int = 30,
        wait_seconds: float = 10.0,
    ):
        self.redis = client
        self.ttl = ttl_seconds
        self.wait = wait_seconds

    @asynccontextmanager
    async def hold(self, key: int) -> AsyncIterator[None]:
        lock = DistributedLock(self.redis, f"tiger:{key}", ttl_seconds=self.ttl)
        if not await lock.acquire_within(self.wait):
            raise LockUnavailable(f"Tiger {key} is locked by another ingestion")
        try:
            yield
        finally:
            await lock.release()


class NullSubjectLocks:
    @asynccontextmanager
    async def hold(self, key: int) -> AsyncIterator[None]:
        yield


def build_subject_locks(backend: str, ttl_seconds: int, wait_seconds: float) -> SubjectLocks:
    if backend == "memory":
        return KeyedAsyncLock()
    if backend == "redis":
        from .redis_client import get_redis

        return RedisSubjectLocks(get_redis(), ttl_seconds, wait_seconds)
    if backend == "none":
        return NullSubjectLocks()
    raise ValueError(f"Unknown subject lock backend: {backend!r}")
