"""
Database schema creation.

Tables, indexes and triggers are created with ``IF NOT EXISTS`` so running
the schema against an existing database is harmless.
"""

import aiosqlite
from guildstore.util.logger import get_logger

logger = get_logger("database_schema")

SCHEMA_VERSION = 1


class SchemaManager:
    """Creates the settings tables, indexes and triggers."""

    @staticmethod
    async def initialize_schema(db: aiosqlite.Connection) -> None:
        """
        Create all tables, indexes and triggers.

        The caller owns the transaction; nothing is committed here.

        Args:
            db: Open database connection
        """
        await SchemaManager._create_tables(db)
        await SchemaManager._create_indexes(db)
        await SchemaManager._create_triggers(db)
        await SchemaManager._update_schema_version(db)
        logger.info("[SCHEMA] Database schema initialized (version %d)", SCHEMA_VERSION)

    @staticmethod
    async def _create_tables(db: aiosqlite.Connection) -> None:
        # One row per guild
        await db.execute("""
            CREATE TABLE IF NOT EXISTS server_settings (
                guild_id TEXT PRIMARY KEY CHECK (length(guild_id) <= 24),
                language TEXT NOT NULL DEFAULT 'en-US' CHECK (length(language) <= 5),
                system_announcement_type TEXT NOT NULL DEFAULT 'NONE',
                announcement_room_channel_id TEXT
                    CHECK (announcement_room_channel_id IS NULL OR length(announcement_room_channel_id) <= 24),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # Keyed by guild_id on its own, a guild may have roles without settings
        await db.execute("""
            CREATE TABLE IF NOT EXISTS guild_roles (
                guild_id TEXT NOT NULL CHECK (length(guild_id) <= 24),
                role_id TEXT NOT NULL CHECK (length(role_id) <= 24),
                role_type TEXT NOT NULL CHECK (length(role_type) <= 32),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (guild_id, role_id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    async def _create_indexes(db: aiosqlite.Connection) -> None:
        await db.execute("CREATE INDEX IF NOT EXISTS idx_guild_roles_guild ON guild_roles(guild_id)")

    @staticmethod
    async def _create_triggers(db: aiosqlite.Connection) -> None:
        await db.execute("""
            CREATE TRIGGER IF NOT EXISTS update_server_settings_timestamp
            AFTER UPDATE ON server_settings
            FOR EACH ROW
            BEGIN
                UPDATE server_settings SET updated_at = CURRENT_TIMESTAMP
                WHERE guild_id = NEW.guild_id;
            END
        """)

    @staticmethod
    async def _update_schema_version(db: aiosqlite.Connection) -> None:
        await db.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
