from guildstore.datatypes.coords import Coords
from guildstore.datatypes.discord_datatypes import ChannelID, DiscordID, GuildID, RoleID
from guildstore.datatypes.server_settings import (
    GuildRole,
    ServerSettings,
    SystemAnnouncement,
    SystemAnnouncementType,
)

__all__ = [
    "Coords",
    "ChannelID",
    "DiscordID",
    "GuildID",
    "RoleID",
    "GuildRole",
    "ServerSettings",
    "SystemAnnouncement",
    "SystemAnnouncementType",
]
