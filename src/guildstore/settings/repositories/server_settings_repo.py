"""
Repository for the server_settings table.

Handles only the server_settings table. Roles live in guild_roles and are
joined by the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import aiosqlite

from guildstore.datatypes.discord_datatypes import GuildID
from guildstore.datatypes.server_settings import SystemAnnouncementType
from guildstore.util.logger import get_logger

logger = get_logger("server_settings_repo")

_SELECT_COLUMNS = """
    SELECT guild_id, language, system_announcement_type, announcement_room_channel_id
    FROM server_settings
"""


@dataclass
class ServerSettingsRow:
    """Raw DB row for a guild's settings."""
    guild_id: str
    language: str
    system_announcement_type: SystemAnnouncementType
    announcement_room_channel_id: Optional[str]


def _parse_announcement_type(guild_id: str, raw: Optional[str]) -> SystemAnnouncementType:
    try:
        return SystemAnnouncementType.from_name(raw)
    except KeyError:
        logger.warning(
            "[SERVER SETTINGS REPO] Unknown system_announcement_type %r for guild %s, using NONE",
            raw,
            guild_id,
        )
        return SystemAnnouncementType.NONE


def _to_row(row: aiosqlite.Row) -> ServerSettingsRow:
    guild_id = row["guild_id"]
    return ServerSettingsRow(
        guild_id=guild_id,
        language=row["language"],
        system_announcement_type=_parse_announcement_type(guild_id, row["system_announcement_type"]),
        announcement_room_channel_id=row["announcement_room_channel_id"],
    )


class ServerSettingsRepository:
    """CRUD for the server_settings table only."""

    async def get(
        self, conn: aiosqlite.Connection, guild_id: GuildID
    ) -> ServerSettingsRow | None:
        """Fetch a single guild's settings row, or None if it has none."""
        async with conn.execute(
            _SELECT_COLUMNS + " WHERE guild_id = ?",
            (str(guild_id),),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None
        return _to_row(row)

    async def get_all(
        self, conn: aiosqlite.Connection
    ) -> Dict[str, ServerSettingsRow]:
        """Fetch every settings row keyed by guild_id."""
        async with conn.execute(_SELECT_COLUMNS) as cursor:
            rows = await cursor.fetchall()

        return {row["guild_id"]: _to_row(row) for row in rows}

    async def upsert(
        self, conn: aiosqlite.Connection, row: ServerSettingsRow
    ) -> None:
        """Insert a guild's row, or overwrite every column of the existing one."""
        await conn.execute(
            """
            INSERT INTO server_settings (
                guild_id, language, system_announcement_type, announcement_room_channel_id
            ) VALUES (?, ?, ?, ?)
            ON CONFLICT(guild_id) DO UPDATE SET
                language                     = excluded.language,
                system_announcement_type     = excluded.system_announcement_type,
                announcement_room_channel_id = excluded.announcement_room_channel_id
            """,
            (
                row.guild_id,
                row.language,
                row.system_announcement_type.name,
                row.announcement_room_channel_id,
            ),
        )
