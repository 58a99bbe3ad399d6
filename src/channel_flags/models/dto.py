"""Pydantic DTOs shared by the flag service, its stores and callers."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

MAX_SNOWFLAKE = 2**64 - 1


class ChannelFlagType(str, Enum):
    """Kinds of tags a channel can carry."""

    IGNORED_FROM_XP = "ignored_from_xp"
    IGNORED_FROM_MESSAGE_LOG = "ignored_from_message_log"


# The membership check only ever looks at this flag type.
MEMBERSHIP_FLAG_TYPE = ChannelFlagType.IGNORED_FROM_XP


class PermissionType(str, Enum):
    ADD_FLAGS = "add_flags"


class PermissionUser(BaseModel):
    """Identity of the member asking to change flags."""

    user_id: int = Field(..., ge=0, le=MAX_SNOWFLAKE)
    role_ids: list[int] = Field(default_factory=list)


class ChannelFlag(BaseModel):
    channel_id: int = Field(..., ge=0, le=MAX_SNOWFLAKE)
    flag_type: ChannelFlagType


FailureReason = Literal["missing_permission", "flag_not_found", "ambiguous_flag"]


class ServiceResponse(BaseModel):
    """Outcome of a flag mutation returned to callers."""

    success: bool
    message: str | None = None
    reason: FailureReason | None = None

    @classmethod
    def ok(cls) -> ServiceResponse:
        return cls(success=True)

    @classmethod
    def fail(cls, message: str, reason: FailureReason) -> ServiceResponse:
        return cls(success=False, message=message, reason=reason)
