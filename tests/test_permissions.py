from __future__ import annotations

import pytest

from channel_flags.models.dto import PermissionType, PermissionUser
from channel_flags.services.permissions import MongoPermissionService

GRANTS = [
    {"permission": "add_flags", "subject_type": "user", "subject_id": "10"},
    {"permission": "add_flags", "subject_type": "role", "subject_id": "500"},
    {"permission": "manage_roles", "subject_type": "user", "subject_id": "20"},
]


@pytest.mark.asyncio
async def test_direct_user_grant(fake_collection_factory) -> None:
    service = MongoPermissionService(fake_collection_factory(GRANTS))

    assert await service.user_has_permission(
        PermissionUser(user_id=10), PermissionType.ADD_FLAGS
    )


@pytest.mark.asyncio
async def test_grant_through_role(fake_collection_factory) -> None:
    service = MongoPermissionService(fake_collection_factory(GRANTS))

    assert await service.user_has_permission(
        PermissionUser(user_id=30, role_ids=[400, 500]), PermissionType.ADD_FLAGS
    )


@pytest.mark.asyncio
async def test_other_permissions_do_not_count(fake_collection_factory) -> None:
    service = MongoPermissionService(fake_collection_factory(GRANTS))

    assert not await service.user_has_permission(
        PermissionUser(user_id=20, role_ids=[400]), PermissionType.ADD_FLAGS
    )


@pytest.mark.asyncio
async def test_role_id_is_not_confused_with_user_id(fake_collection_factory) -> None:
    service = MongoPermissionService(fake_collection_factory(GRANTS))

    assert not await service.user_has_permission(
        PermissionUser(user_id=500), PermissionType.ADD_FLAGS
    )
