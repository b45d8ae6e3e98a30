"""
Type-safe wrapper classes for Discord identifiers.

Discord snowflakes are 64-bit integers that are often carried around as
strings. These wrappers give guild, user, channel and role IDs a distinct type
while still comparing and hashing equal to the plain integer, so a
``GuildID`` key and an ``int`` key address the same dictionary slot.
"""

from __future__ import annotations

from typing import Union


class DiscordID:
    """
    Base wrapper for a Discord snowflake.

    Example:
        >>> gid = GuildID(123456789012345678)
        >>> gid.to_int()
        123456789012345678
        >>> gid == 123456789012345678
        True
        >>> GuildID("123456789012345678") == gid
        True
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "DiscordID"]) -> None:
        """
        Initialize from a string, int, or another wrapper.

        Raises:
            ValueError: If the value cannot be converted to a snowflake.
        """
        if isinstance(value, DiscordID):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create {type(self).__name__} from bool: {value}")
        elif isinstance(value, int):
            self._value = value
        elif isinstance(value, str):
            self._value = int(value.strip())
        else:
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value}")

    @classmethod
    def from_int(cls, value: int):
        return cls(value)

    @classmethod
    def from_object(cls, obj):
        """Create an ID from any Discord model exposing ``.id``."""
        return cls(obj.id)

    def to_int(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DiscordID):
            return self._value == other._value
        if isinstance(other, bool):
            return NotImplemented
        if isinstance(other, int):
            return self._value == other
        if isinstance(other, str):
            return str(self._value) == other.strip()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)


class GuildID(DiscordID):
    """Snowflake of a guild (server)."""

    __slots__ = ()


class UserID(DiscordID):
    """Snowflake of a user or member."""

    __slots__ = ()


class ChannelID(DiscordID):
    """Snowflake of a channel or thread."""

    __slots__ = ()
