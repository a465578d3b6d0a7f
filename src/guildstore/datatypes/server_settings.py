"""
Per-guild bot settings.

Database schema:
- server_settings table with columns: guild_id, language,
  system_announcement_type, announcement_room_channel_id
- guild_roles table with columns: guild_id, role_id, role_type
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from guildstore.datatypes.discord_datatypes import ChannelID, GuildID, RoleID


DEFAULT_LANGUAGE = "en-US"
MAX_LANGUAGE_LENGTH = 5
MAX_ROLE_TYPE_LENGTH = 32


class SystemAnnouncementType(Enum):
    """Which bot system announcements a guild wants posted."""

    NONE = "none"
    ROLE_CHANGE = "role_change"
    UPDATES = "updates"
    ALL = "all"

    @classmethod
    def from_name(cls, name: Optional[str]) -> "SystemAnnouncementType":
        """
        Resolve a persisted enum name.

        Raises:
            KeyError: If ``name`` is not a member name.
        """
        if name is None:
            raise KeyError(name)
        return cls[name.strip().upper()]


@dataclass(slots=True)
class SystemAnnouncement:
    """Where and which system announcements are posted in a guild."""

    system_announcement_type: SystemAnnouncementType = SystemAnnouncementType.NONE
    announcement_room_channel_id: Optional[ChannelID] = None

    def __post_init__(self) -> None:
        if self.announcement_room_channel_id is not None:
            self.announcement_room_channel_id = ChannelID(self.announcement_room_channel_id)


@dataclass(slots=True, order=True)
class GuildRole:
    """A Discord role the bot uses in a guild, tagged with what it is for."""

    role_type: str
    role_id: RoleID

    def __post_init__(self) -> None:
        self.role_id = RoleID(self.role_id)


def _role_sort_key(role: GuildRole) -> tuple:
    return (str(role.role_type), str(role.role_id))


@dataclass(slots=True)
class ServerSettings:
    """
    Settings record for one guild.

    A guild without a stored record behaves exactly like
    ``ServerSettings(guild_id=...)``. ``guild_roles`` lives in its own table
    and is compared as a set: two records with the same roles are equal no
    matter what order the roles are listed in.
    """

    guild_id: GuildID
    language: str = DEFAULT_LANGUAGE
    system_announcement: SystemAnnouncement = field(default_factory=SystemAnnouncement)
    guild_roles: List[GuildRole] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.guild_id = GuildID(self.guild_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ServerSettings):
            return NotImplemented
        return (
            self.guild_id == other.guild_id
            and self.language == other.language
            and self.system_announcement == other.system_announcement
            and sorted(self.guild_roles, key=_role_sort_key) == sorted(other.guild_roles, key=_role_sort_key)
        )

    @classmethod
    def default(cls, guild_id: Union[GuildID, str, int]) -> "ServerSettings":
        """The record a guild has before anything was saved for it."""
        return cls(guild_id=GuildID(guild_id))
