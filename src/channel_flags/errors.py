"""Exceptions raised by flag stores and surfaced by the flag service."""

from __future__ import annotations

from .models.dto import ChannelFlagType


class ChannelFlagError(Exception):
    """Base class for channel flag failures."""


class DuplicateFlagError(ChannelFlagError):
    """A store refused to insert a (channel, flag type) pair it already holds."""

    def __init__(self, channel_id: int, flag_type: ChannelFlagType) -> None:
        super().__init__(
            f"Channel {channel_id} already carries flag {flag_type.value}"
        )
        self.channel_id = channel_id
        self.flag_type = flag_type


class FlagPreconditionError(ChannelFlagError):
    """Delete expected exactly one matching record but found another count."""

    def __init__(
        self, channel_id: int, flag_type: ChannelFlagType, matches: int
    ) -> None:
        super().__init__(
            f"Expected exactly one {flag_type.value} flag for channel {channel_id}, "
            f"found {matches}"
        )
        self.channel_id = channel_id
        self.flag_type = flag_type
        self.matches = matches


class FlagNotFoundError(FlagPreconditionError):
    def __init__(self, channel_id: int, flag_type: ChannelFlagType) -> None:
        super().__init__(channel_id, flag_type, matches=0)


class AmbiguousFlagError(FlagPreconditionError):
    pass
