"""
SettingsStore: per-guild settings persistence across both repositories.

Responsibilities:
- Load every stored guild with its roles (two queries, one snapshot)
- Load one guild, falling back to defaults when nothing is stored
- Upsert a guild's complete settings and replace its roles in one transaction

All SQL lives in the repositories; the store only opens scopes, validates
and converts between ServerSettings and repository rows.
"""

from __future__ import annotations

from typing import List, Optional, Union

from guildstore.database.db_connection import ConnectionManager, db_connection
from guildstore.datatypes.discord_datatypes import ChannelID, GuildID, RoleID
from guildstore.datatypes.server_settings import (
    MAX_LANGUAGE_LENGTH,
    MAX_ROLE_TYPE_LENGTH,
    GuildRole,
    ServerSettings,
    SystemAnnouncement,
    SystemAnnouncementType,
)
from guildstore.exceptions import SettingsValidationError
from guildstore.settings.repositories import (
    GuildRolesRepository,
    ServerSettingsRepository,
    ServerSettingsRow,
)
from guildstore.util.logger import get_logger

logger = get_logger("settings_store")


class SettingsStore:
    """
    Durable mapping guild_id -> ServerSettings.

    - Reads never fail for a missing guild; they return defaults.
    - Writes replace the whole record (no merge) and the guild's roles
      together, or not at all.
    - No caching: every call hits the database.
    """

    def __init__(self, connection: Optional[ConnectionManager] = None) -> None:
        self._connection = connection if connection is not None else db_connection
        self._server_settings_repo = ServerSettingsRepository()
        self._guild_roles_repo = GuildRolesRepository()

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    async def load_all(self) -> List[ServerSettings]:
        """Return every stored guild's settings joined with its roles.

        Order is unspecified. An empty store returns an empty list.
        """
        async with self._connection.read() as conn:
            rows = await self._server_settings_repo.get_all(conn)
            if not rows:
                return []
            roles_by_guild = await self._guild_roles_repo.get_for_guilds(conn, list(rows))

        result = [_row_to_settings(row, roles_by_guild.get(gid, [])) for gid, row in rows.items()]
        logger.info("[SETTINGS STORE] Loaded %d guilds from database", len(result))
        return result

    async def load(self, guild_id: Union[GuildID, str, int]) -> ServerSettings:
        """Return a guild's settings, or defaults if none are stored.

        The default record carries the given guild_id, language ``en-US``,
        no announcements and no roles. Identifier length is not checked here.
        """
        guild_id = GuildID(guild_id)
        async with self._connection.read() as conn:
            row = await self._server_settings_repo.get(conn, guild_id)
            if row is None:
                logger.debug("[SETTINGS STORE] No settings stored for guild %s, using defaults", guild_id)
                return ServerSettings.default(guild_id)
            roles = await self._guild_roles_repo.get_for_guild(conn, guild_id)

        return _row_to_settings(row, roles)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    async def update(self, settings: ServerSettings) -> None:
        """
        Upsert a guild's settings and replace its roles atomically.

        Raises:
            SettingsValidationError: If a field does not fit the schema.
                Nothing is written in that case.
            aiosqlite.Error: If the database rejects the write. Both
                writes are rolled back.
        """
        validate_settings(settings)
        row = _settings_to_row(settings)

        try:
            async with self._connection.transaction() as conn:
                await self._server_settings_repo.upsert(conn, row)
                await self._guild_roles_repo.replace(conn, settings.guild_id, settings.guild_roles)
        except Exception:
            logger.exception("[SETTINGS STORE] Failed to persist guild %s", settings.guild_id)
            raise

        logger.debug("[SETTINGS STORE] Persisted guild %s", settings.guild_id)


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------

def validate_settings(settings: ServerSettings) -> None:
    """
    Check a record against the column bounds of the settings tables.

    Raises:
        SettingsValidationError: On the first field that does not fit.
    """
    if not GuildID(settings.guild_id).is_well_formed():
        raise SettingsValidationError("guild_id", f"longer than 24 characters: {settings.guild_id}")

    if not isinstance(settings.language, str) or not settings.language.strip():
        raise SettingsValidationError("language", "must be a non-empty locale tag")
    if len(settings.language) > MAX_LANGUAGE_LENGTH:
        raise SettingsValidationError(
            "language", f"longer than {MAX_LANGUAGE_LENGTH} characters: {settings.language!r}"
        )

    announcement = settings.system_announcement
    if not isinstance(announcement.system_announcement_type, SystemAnnouncementType):
        raise SettingsValidationError(
            "system_announcement_type", f"not a SystemAnnouncementType: {announcement.system_announcement_type!r}"
        )
    channel_id = announcement.announcement_room_channel_id
    if channel_id is not None and not ChannelID(channel_id).is_well_formed():
        raise SettingsValidationError(
            "announcement_room_channel_id", f"longer than 24 characters: {channel_id}"
        )

    seen = set()
    for role in settings.guild_roles:
        if not RoleID(role.role_id).is_well_formed():
            raise SettingsValidationError("guild_roles", f"role id longer than 24 characters: {role.role_id}")
        if not isinstance(role.role_type, str) or not role.role_type.strip():
            raise SettingsValidationError("guild_roles", f"role {role.role_id} has an empty role type")
        if len(role.role_type) > MAX_ROLE_TYPE_LENGTH:
            raise SettingsValidationError(
                "guild_roles", f"role type longer than {MAX_ROLE_TYPE_LENGTH} characters: {role.role_type!r}"
            )
        if str(role.role_id) in seen:
            raise SettingsValidationError("guild_roles", f"role {role.role_id} listed twice")
        seen.add(str(role.role_id))


# ------------------------------------------------------------------
# Private helpers: ServerSettings <-> repository rows
# ------------------------------------------------------------------

def _row_to_settings(row: ServerSettingsRow, roles: List[GuildRole]) -> ServerSettings:
    return ServerSettings(
        guild_id=GuildID(row.guild_id),
        language=row.language,
        system_announcement=SystemAnnouncement(
            system_announcement_type=row.system_announcement_type,
            announcement_room_channel_id=row.announcement_room_channel_id,
        ),
        guild_roles=list(roles),
    )


def _settings_to_row(settings: ServerSettings) -> ServerSettingsRow:
    channel_id = settings.system_announcement.announcement_room_channel_id
    return ServerSettingsRow(
        guild_id=str(settings.guild_id),
        language=settings.language,
        system_announcement_type=settings.system_announcement.system_announcement_type,
        announcement_room_channel_id=str(channel_id) if channel_id is not None else None,
    )


# Shared store bound to the shared connection
settings_store = SettingsStore()
