"""Permission lookups backed by MongoDB."""

from __future__ import annotations

from typing import Protocol

from motor.motor_asyncio import AsyncIOMotorCollection

from ..models.dto import PermissionType, PermissionUser


class PermissionChecker(Protocol):
    async def user_has_permission(
        self, user: PermissionUser, permission: PermissionType
    ) -> bool: ...


class MongoPermissionService:
    """Grants come from the user id itself or any of the user's roles."""

    def __init__(self, collection: AsyncIOMotorCollection) -> None:
        self._collection = collection

    async def user_has_permission(
        self, user: PermissionUser, permission: PermissionType
    ) -> bool:
        subjects: list[dict[str, object]] = [
            {"subject_type": "user", "subject_id": str(user.user_id)}
        ]
        if user.role_ids:
            subjects.append(
                {
                    "subject_type": "role",
                    "subject_id": {"$in": [str(role_id) for role_id in user.role_ids]},
                }
            )

        doc = await self._collection.find_one(
            {"permission": permission.value, "$or": subjects},
            projection={"_id": 1},
        )
        return doc is not None
