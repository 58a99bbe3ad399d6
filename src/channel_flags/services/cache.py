"""Cache helpers for channel flag lookups (Redis and process-local)."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, TypeVar

from redis.asyncio import Redis

from ..models.dto import MEMBERSHIP_FLAG_TYPE, ChannelFlagType
from .metrics import CACHE_HITS, CACHE_MISSES

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class MembershipKey:
    """Cached answer to "is this channel flagged with the membership type?"."""

    query: ClassVar[str] = "membership"

    channel_id: int
    flag_type: ChannelFlagType = MEMBERSHIP_FLAG_TYPE

    def render(self) -> str:
        return f"{self.query}:{self.flag_type.value}:{self.channel_id}"


@dataclass(frozen=True)
class ChannelListKey:
    """Cached list of channel ids carrying one flag type."""

    query: ClassVar[str] = "channels"

    flag_type: ChannelFlagType

    def render(self) -> str:
        return f"{self.query}:{self.flag_type.value}"


FlagCacheKey = MembershipKey | ChannelListKey


class FlagCache(Protocol):
    async def get_or_populate(
        self,
        key: FlagCacheKey,
        populate: Callable[[], Awaitable[T]],
        ttl_seconds: int,
    ) -> T: ...

    async def evict(self, key: FlagCacheKey) -> None: ...


class RedisFlagCache:
    """Stores JSON-encoded lookup results in Redis with a per-entry TTL."""

    def __init__(self, redis_client: Redis, namespace: str = "channel_flags") -> None:
        self._redis = redis_client
        self._namespace = namespace

    def _key(self, key: FlagCacheKey) -> str:
        return f"{self._namespace}:{key.render()}"

    async def get_or_populate(
        self,
        key: FlagCacheKey,
        populate: Callable[[], Awaitable[T]],
        ttl_seconds: int,
    ) -> T:
        redis_key = self._key(key)
        raw = await self._redis.get(redis_key)
        if raw is not None:
            CACHE_HITS.labels(query=key.query).inc()
            return json.loads(raw)

        CACHE_MISSES.labels(query=key.query).inc()
        LOGGER.debug("Cache miss for %s", redis_key)
        value = await populate()
        await self._redis.set(redis_key, json.dumps(value), ex=ttl_seconds)
        return value

    async def evict(self, key: FlagCacheKey) -> None:
        await self._redis.delete(self._key(key))


class InMemoryFlagCache:
    """Process-local cache; entries expire ``ttl_seconds`` after they are written.

    Expired entries are dropped when their key is read, and every
    ``sweep_interval_seconds`` a miss also scans out all other expired entries.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval_seconds: float = 300.0,
    ) -> None:
        self._clock = clock
        self._sweep_interval = sweep_interval_seconds
        self._next_sweep = clock() + sweep_interval_seconds
        self._entries: dict[FlagCacheKey, tuple[float, Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    async def get_or_populate(
        self,
        key: FlagCacheKey,
        populate: Callable[[], Awaitable[T]],
        ttl_seconds: int,
    ) -> T:
        entry = self._entries.get(key)
        if entry is not None:
            expires_at, value = entry
            if self._clock() < expires_at:
                CACHE_HITS.labels(query=key.query).inc()
                return value
            self._entries.pop(key, None)

        CACHE_MISSES.labels(query=key.query).inc()
        LOGGER.debug("Cache miss for %s", key.render())
        self._sweep_expired()
        value = await populate()
        self._entries[key] = (self._clock() + ttl_seconds, value)
        return value

    async def evict(self, key: FlagCacheKey) -> None:
        self._entries.pop(key, None)

    def _sweep_expired(self) -> None:
        now = self._clock()
        if now < self._next_sweep:
            return
        self._next_sweep = now + self._sweep_interval
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            LOGGER.debug("Swept %d expired cache entries", len(expired))
