"""Repository layer for guild settings database access."""
from guildstore.settings.repositories.server_settings_repo import ServerSettingsRepository, ServerSettingsRow
from guildstore.settings.repositories.guild_roles_repo import GuildRolesRepository

__all__ = [
    "ServerSettingsRepository",
    "ServerSettingsRow",
    "GuildRolesRepository",
]
