"""
Type-safe wrapper classes for Discord identifiers.

Guild, channel and role identifiers are persisted as strings (at most
``MAX_ID_LENGTH`` characters). The wrappers keep that string form, compare
equal to the raw ``str``/``int`` values callers tend to pass around, and only
turn into integers when a numeric snowflake is actually needed.
"""

from __future__ import annotations

from typing import Union
import discord


# Width of the identifier columns in the settings tables
MAX_ID_LENGTH = 24


class DiscordID:
    """
    Base class for Discord identifier wrappers.

    The value is stored as a stripped, non-empty string. Numeric snowflakes
    are the normal case, but arbitrary identifiers are accepted so records
    keyed by legacy or test identifiers still load.

    Attributes:
        _value (str): The identifier in its persisted string form.

    Example:
        >>> gid = GuildID(123456789012345678)
        >>> str(gid)
        '123456789012345678'
        >>> gid == "123456789012345678"
        True
        >>> gid.to_int()
        123456789012345678
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "DiscordID"]) -> None:
        """
        Args:
            value: The identifier as a string, int, or wrapper of the same type.

        Raises:
            ValueError: If the value is empty, a bool, or of an unsupported type.
        """
        if isinstance(value, type(self)):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create {type(self).__name__} from bool: {value}")
        elif isinstance(value, int):
            self._value = str(value)
        elif isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValueError(f"Cannot create {type(self).__name__} from an empty string")
            self._value = stripped
        else:
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value}")

    @classmethod
    def from_int(cls, value: int):
        """Create a wrapper from an integer snowflake."""
        return cls(value)

    def to_int(self) -> int:
        """
        Convert to an integer for Discord API calls.

        Raises:
            ValueError: If the identifier is not a numeric snowflake.
        """
        return int(self._value)

    def is_well_formed(self) -> bool:
        """True if the identifier fits the persisted column width."""
        return len(self._value) <= MAX_ID_LENGTH

    def __int__(self) -> int:
        return self.to_int()

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DiscordID):
            return type(self) is type(other) and self._value == other._value
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __lt__(self, other: "DiscordID") -> bool:
        if not isinstance(other, DiscordID):
            return NotImplemented
        return self._value < other._value


class GuildID(DiscordID):
    """Identifier of a Discord guild; the key of every settings record."""

    __slots__ = ()

    @classmethod
    def from_guild(cls, guild: discord.Guild) -> "GuildID":
        """Create a GuildID from a Discord Guild object."""
        return cls(guild.id)


class ChannelID(DiscordID):
    """Identifier of a Discord channel, e.g. the announcement room."""

    __slots__ = ()

    @classmethod
    def from_channel(cls, channel: discord.abc.GuildChannel) -> "ChannelID":
        """Create a ChannelID from a Discord channel object."""
        return cls(channel.id)


class RoleID(DiscordID):
    """Identifier of a Discord role bound to a guild."""

    __slots__ = ()

    @classmethod
    def from_role(cls, role: discord.Role) -> "RoleID":
        """Create a RoleID from a Discord Role object."""
        return cls(role.id)
