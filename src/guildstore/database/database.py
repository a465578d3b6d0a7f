"""
Database lifecycle coordinator.

Resolves where the SQLite file lives, opens the shared connection and makes
sure the schema exists before any store touches it.

Lifecycle:
    1. ``await database.initialize()`` at program startup
    2. Use ``database.connection`` (or a store built on it)
    3. ``await database.shutdown()`` at program end
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from guildstore.configuration.app_configuration import app_config
from guildstore.database.db_connection import ConnectionManager, db_connection
from guildstore.database.db_schema import SchemaManager
from guildstore.util.logger import get_logger

logger = get_logger("database")


class Database:
    """Owns a :class:`ConnectionManager` and the schema it serves."""

    def __init__(
        self,
        db_path: Optional[Path] = None,
        connection: Optional[ConnectionManager] = None,
        busy_timeout_ms: Optional[int] = None,
    ):
        """
        Args:
            db_path: SQLite file; defaults to ``database.path`` from the app config.
            connection: Connection manager to drive; defaults to the shared one.
            busy_timeout_ms: Defaults to ``database.busy_timeout_ms`` from the app config.
        """
        self.db_path = db_path if db_path is not None else app_config.database_path
        self.connection = connection if connection is not None else db_connection
        self.busy_timeout_ms = busy_timeout_ms if busy_timeout_ms is not None else app_config.busy_timeout_ms
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """
        Open the connection and create the schema. Safe to call twice.

        Raises:
            aiosqlite.Error: If the file cannot be opened or the schema fails.
        """
        if self._initialized:
            logger.debug("[DATABASE] Already initialized, skipping")
            return

        await self.connection.open(self.db_path, busy_timeout_ms=self.busy_timeout_ms)
        try:
            async with self.connection.transaction() as conn:
                await SchemaManager.initialize_schema(conn)
        except Exception:
            logger.exception("[DATABASE] Schema initialization failed for %s", self.db_path)
            await self.connection.close()
            raise

        self._initialized = True
        logger.info("[DATABASE] Database initialized at %s", self.db_path)

    async def shutdown(self) -> None:
        """Close the connection. No-op if never initialized."""
        if not self._initialized:
            return

        await self.connection.close()
        self._initialized = False
        logger.info("[DATABASE] Database shutdown complete")


# Shared instance bound to the shared connection
database = Database()
