"""
Repository for the guild_roles table.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

import aiosqlite

from guildstore.datatypes.discord_datatypes import GuildID
from guildstore.datatypes.server_settings import GuildRole
from guildstore.util.logger import get_logger

logger = get_logger("guild_roles_repo")

_MAX_IN_PARAMS = 500


class GuildRolesRepository:
    """CRUD for the guild_roles table."""

    async def get_for_guild(
        self, conn: aiosqlite.Connection, guild_id: GuildID
    ) -> List[GuildRole]:
        """Return the role bindings of a single guild, sorted."""
        async with conn.execute(
            "SELECT role_id, role_type FROM guild_roles WHERE guild_id = ?",
            (str(guild_id),),
        ) as cursor:
            rows = await cursor.fetchall()
        return sorted(GuildRole(role_type=row["role_type"], role_id=row["role_id"]) for row in rows)

    async def get_for_guilds(
        self, conn: aiosqlite.Connection, guild_ids: List[str]
    ) -> Dict[str, List[GuildRole]]:
        """Return role bindings for several guilds in one query.

        Every requested guild gets an entry, empty if it has no roles.
        """
        if not guild_ids:
            return {}

        result: Dict[str, List[GuildRole]] = {gid: [] for gid in guild_ids}

        # Stay under SQLite's bound-parameter limit
        for start in range(0, len(guild_ids), _MAX_IN_PARAMS):
            chunk = guild_ids[start:start + _MAX_IN_PARAMS]
            placeholders = ",".join("?" * len(chunk))
            async with conn.execute(
                f"SELECT guild_id, role_id, role_type FROM guild_roles WHERE guild_id IN ({placeholders})",
                chunk,
            ) as cursor:
                rows = await cursor.fetchall()

            for row in rows:
                result[row["guild_id"]].append(GuildRole(role_type=row["role_type"], role_id=row["role_id"]))

        for roles in result.values():
            roles.sort()
        return result

    async def replace(
        self, conn: aiosqlite.Connection, guild_id: GuildID, roles: Iterable[GuildRole]
    ) -> None:
        """Replace all role bindings of a guild.

        Runs inside the caller's transaction, so the delete and the inserts
        land together.
        """
        gid = str(guild_id)
        await conn.execute("DELETE FROM guild_roles WHERE guild_id = ?", (gid,))
        params = [(gid, str(role.role_id), role.role_type) for role in roles]
        if params:
            await conn.executemany(
                "INSERT INTO guild_roles (guild_id, role_id, role_type) VALUES (?, ?, ?)",
                params,
            )
        logger.debug("[GUILD ROLES REPO] Replaced roles for guild %s (%d roles)", gid, len(params))
