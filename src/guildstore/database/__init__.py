"""
Database package for guildstore.

Public API:
    - database: shared Database coordinator
    - db_connection: shared ConnectionManager
    - Database, ConnectionManager, SchemaManager
"""

from guildstore.database.database import Database, database
from guildstore.database.db_connection import ConnectionManager, db_connection
from guildstore.database.db_schema import SchemaManager

__all__ = [
    "Database",
    "database",
    "ConnectionManager",
    "db_connection",
    "SchemaManager",
]
