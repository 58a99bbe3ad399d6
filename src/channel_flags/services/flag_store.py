"""Durable storage of (channel, flag type) records."""

from __future__ import annotations

from typing import Any, Protocol

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING

from ..errors import AmbiguousFlagError, DuplicateFlagError, FlagNotFoundError
from ..models.dto import ChannelFlag, ChannelFlagType


class ChannelFlagStore(Protocol):
    async def exists(self, channel_id: int, flag_type: ChannelFlagType) -> bool: ...

    async def insert(self, channel_id: int, flag_type: ChannelFlagType) -> None: ...

    async def delete_unique(
        self, channel_id: int, flag_type: ChannelFlagType
    ) -> None: ...

    async def list_channel_ids(self, flag_type: ChannelFlagType) -> list[int]: ...


class MongoChannelFlagStore:
    """Flag records kept in a MongoDB collection.

    Channel ids are unsigned 64-bit values and BSON integers are signed, so ids are
    stored as decimal strings. Uniqueness of a (channel, flag type) pair is enforced
    by the service checking existence before insert, not by an index.
    """

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self._collection = collection

    @staticmethod
    def _query(channel_id: int, flag_type: ChannelFlagType) -> dict[str, Any]:
        flag = ChannelFlag(channel_id=channel_id, flag_type=flag_type)
        return {"channel_id": str(flag.channel_id), "flag_type": flag.flag_type.value}

    async def ensure_indexes(self) -> None:
        await self._collection.create_index(
            [("flag_type", ASCENDING), ("channel_id", ASCENDING)]
        )

    async def exists(self, channel_id: int, flag_type: ChannelFlagType) -> bool:
        doc = await self._collection.find_one(
            self._query(channel_id, flag_type), projection={"_id": 1}
        )
        return doc is not None

    async def insert(self, channel_id: int, flag_type: ChannelFlagType) -> None:
        await self._collection.insert_one(self._query(channel_id, flag_type))

    async def delete_unique(self, channel_id: int, flag_type: ChannelFlagType) -> None:
        query = self._query(channel_id, flag_type)
        matches = await self._collection.find(query, projection={"_id": 1}).to_list(
            length=2
        )
        if not matches:
            raise FlagNotFoundError(channel_id, flag_type)
        if len(matches) > 1:
            total = await self._collection.count_documents(query)
            raise AmbiguousFlagError(channel_id, flag_type, matches=total)

        result = await self._collection.delete_one({"_id": matches[0]["_id"]})
        # Another delete removed the record between the lookup and this call.
        if result.deleted_count == 0:
            raise FlagNotFoundError(channel_id, flag_type)

    async def list_channel_ids(self, flag_type: ChannelFlagType) -> list[int]:
        documents = await self._collection.find(
            {"flag_type": flag_type.value}, projection={"channel_id": 1}
        ).to_list(length=None)
        return [int(doc["channel_id"]) for doc in documents]


class InMemoryChannelFlagStore:
    """List-backed store used for local runs and tests."""

    def __init__(self, flags: list[ChannelFlag] | None = None) -> None:
        self._flags: list[ChannelFlag] = list(flags or [])

    def _matching(self, channel_id: int, flag_type: ChannelFlagType) -> list[ChannelFlag]:
        return [
            flag
            for flag in self._flags
            if flag.channel_id == channel_id and flag.flag_type == flag_type
        ]

    async def exists(self, channel_id: int, flag_type: ChannelFlagType) -> bool:
        return bool(self._matching(channel_id, flag_type))

    async def insert(self, channel_id: int, flag_type: ChannelFlagType) -> None:
        if self._matching(channel_id, flag_type):
            raise DuplicateFlagError(channel_id, flag_type)
        self._flags.append(ChannelFlag(channel_id=channel_id, flag_type=flag_type))

    async def delete_unique(self, channel_id: int, flag_type: ChannelFlagType) -> None:
        matches = self._matching(channel_id, flag_type)
        if not matches:
            raise FlagNotFoundError(channel_id, flag_type)
        if len(matches) > 1:
            raise AmbiguousFlagError(channel_id, flag_type, matches=len(matches))
        self._flags.remove(matches[0])

    async def list_channel_ids(self, flag_type: ChannelFlagType) -> list[int]:
        return [flag.channel_id for flag in self._flags if flag.flag_type == flag_type]
