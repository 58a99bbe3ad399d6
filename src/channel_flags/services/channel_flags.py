"""ChannelFlagService: permission-gated flag mutations over a cache-aside read path."""

from __future__ import annotations

import logging

from ..errors import AmbiguousFlagError, FlagNotFoundError
from ..models.dto import (
    MEMBERSHIP_FLAG_TYPE,
    ChannelFlagType,
    PermissionType,
    PermissionUser,
    ServiceResponse,
)
from .cache import ChannelListKey, FlagCache, MembershipKey
from .flag_store import ChannelFlagStore
from .metrics import FLAG_MUTATIONS
from .permissions import PermissionChecker

LOGGER = logging.getLogger(__name__)


class ChannelFlagService:
    """Answers flag queries from cache and keeps the cache in step with the store.

    Every mutation commits to the store before the affected cache keys are evicted.
    A read racing a write may still repopulate a stale entry after the eviction; it
    lives until the next write to the same keys or until its TTL runs out.
    """

    def __init__(
        self,
        store: ChannelFlagStore,
        cache: FlagCache,
        permissions: PermissionChecker,
        ttl_seconds: int,
    ) -> None:
        self._store = store
        self._cache = cache
        self._permissions = permissions
        self._ttl = ttl_seconds

    async def is_channel_ignored_from_xp(self, channel_id: int) -> bool:
        return await self._cache.get_or_populate(
            MembershipKey(channel_id),
            lambda: self._store.exists(channel_id, MEMBERSHIP_FLAG_TYPE),
            self._ttl,
        )

    async def get_channels_with_flag(self, flag_type: ChannelFlagType) -> list[int]:
        channel_ids = await self._cache.get_or_populate(
            ChannelListKey(flag_type),
            lambda: self._store.list_channel_ids(flag_type),
            self._ttl,
        )
        return list(channel_ids)

    async def add_flag(
        self, user: PermissionUser, flag_type: ChannelFlagType, channel_id: int
    ) -> ServiceResponse:
        if not await self._can_manage_flags(user, "add", flag_type, channel_id):
            return ServiceResponse.fail("Missing permission", "missing_permission")

        if await self._store.exists(channel_id, flag_type):
            FLAG_MUTATIONS.labels(operation="add", outcome="noop").inc()
            return ServiceResponse.ok()

        await self._store.insert(channel_id, flag_type)
        await self._evict(flag_type, channel_id)

        FLAG_MUTATIONS.labels(operation="add", outcome="applied").inc()
        LOGGER.info(
            "User %s added flag %s to channel %s",
            user.user_id,
            flag_type.value,
            channel_id,
        )
        return ServiceResponse.ok()

    async def delete_flag(
        self, user: PermissionUser, flag_type: ChannelFlagType, channel_id: int
    ) -> ServiceResponse:
        # Deletion is gated by the same capability as adding.
        if not await self._can_manage_flags(user, "delete", flag_type, channel_id):
            return ServiceResponse.fail("Missing permission", "missing_permission")

        try:
            await self._store.delete_unique(channel_id, flag_type)
        except FlagNotFoundError as exc:
            FLAG_MUTATIONS.labels(operation="delete", outcome="rejected").inc()
            LOGGER.warning("Flag delete rejected: %s", exc)
            return ServiceResponse.fail(str(exc), "flag_not_found")
        except AmbiguousFlagError as exc:
            FLAG_MUTATIONS.labels(operation="delete", outcome="rejected").inc()
            LOGGER.warning("Flag delete rejected: %s", exc)
            return ServiceResponse.fail(str(exc), "ambiguous_flag")

        await self._evict(flag_type, channel_id)

        FLAG_MUTATIONS.labels(operation="delete", outcome="applied").inc()
        LOGGER.info(
            "User %s removed flag %s from channel %s",
            user.user_id,
            flag_type.value,
            channel_id,
        )
        return ServiceResponse.ok()

    async def _can_manage_flags(
        self,
        user: PermissionUser,
        operation: str,
        flag_type: ChannelFlagType,
        channel_id: int,
    ) -> bool:
        if await self._permissions.user_has_permission(user, PermissionType.ADD_FLAGS):
            return True

        FLAG_MUTATIONS.labels(operation=operation, outcome="denied").inc()
        LOGGER.warning(
            "User %s lacks %s; refusing to %s flag %s on channel %s",
            user.user_id,
            PermissionType.ADD_FLAGS.value,
            operation,
            flag_type.value,
            channel_id,
        )
        return False

    async def _evict(self, flag_type: ChannelFlagType, channel_id: int) -> None:
        # The membership entry is dropped whatever type changed.
        await self._cache.evict(MembershipKey(channel_id))
        await self._cache.evict(ChannelListKey(flag_type))
