"""Factory wiring settings, MongoDB, Redis and the channel flag service."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import redis.asyncio as redis
from motor.motor_asyncio import AsyncIOMotorClient

from .config import Settings, get_settings
from .services.cache import FlagCache, InMemoryFlagCache, RedisFlagCache
from .services.channel_flags import ChannelFlagService
from .services.flag_store import MongoChannelFlagStore
from .services.permissions import MongoPermissionService
from .utils.logging import configure_logging

LOGGER = logging.getLogger(__name__)


@dataclass
class ChannelFlagRuntime:
    service: ChannelFlagService
    store: MongoChannelFlagStore
    mongo_client: AsyncIOMotorClient
    redis_client: redis.Redis | None

    async def close(self) -> None:
        LOGGER.info("Stopping channel flag service")
        self.mongo_client.close()
        if self.redis_client is not None:
            await self.redis_client.aclose()


def create_channel_flag_service(settings: Settings | None = None) -> ChannelFlagRuntime:
    """Build the service; clients connect lazily on their first query."""

    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.app_env)

    mongo_client: AsyncIOMotorClient = AsyncIOMotorClient(settings.mongodb_uri)
    mongo_db = mongo_client[settings.mongodb_db]
    store = MongoChannelFlagStore(mongo_db[settings.channel_flags_collection])
    permissions = MongoPermissionService(mongo_db[settings.permissions_collection])

    redis_client: redis.Redis | None = None
    cache: FlagCache
    if settings.cache_backend == "redis":
        redis_client = redis.from_url(settings.redis_url, decode_responses=True)
        cache = RedisFlagCache(redis_client, namespace=settings.cache_namespace)
    else:
        cache = InMemoryFlagCache()

    LOGGER.info(
        "Starting channel flag service with %s cache", settings.cache_backend
    )
    service = ChannelFlagService(
        store=store,
        cache=cache,
        permissions=permissions,
        ttl_seconds=settings.channel_flag_cache_ttl_seconds,
    )
    return ChannelFlagRuntime(
        service=service,
        store=store,
        mongo_client=mongo_client,
        redis_client=redis_client,
    )
