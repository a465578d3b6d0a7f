"""
Database connection management: one long-lived aiosqlite connection.

Concurrency model
-----------------
SQLite is single-writer and a single connection can only hold one
transaction at a time, so every scope handed out by the manager is
serialised by an ``asyncio.Lock``. Concurrent upserts for the same guild are
therefore applied one after another (last writer wins).

Usage
-----
    await db_connection.open(path)

    # Writes: explicit BEGIN, commit on clean exit, rollback on exception
    async with db_connection.transaction() as conn:
        await conn.execute("INSERT ...")
        await conn.execute("DELETE ...")

    # Reads: one consistent snapshot, always rolled back
    async with db_connection.read() as conn:
        cursor = await conn.execute("SELECT ...")

    await db_connection.close()
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from guildstore.util.logger import get_logger

logger = get_logger("database_connection")

# Pragmas applied once when the connection is opened
_PRAGMAS = [
    "PRAGMA journal_mode = WAL",
    "PRAGMA foreign_keys = ON",
    "PRAGMA synchronous = NORMAL",    # safe with WAL
    "PRAGMA temp_store = MEMORY",
]


class ConnectionManager:
    """
    Wrapper around a single aiosqlite connection.

    Repositories never open connections themselves; they receive the
    connection yielded by :meth:`transaction` or :meth:`read`.
    """

    def __init__(self) -> None:
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()   # one scope at a time
        self._path: Path | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self, path: Path, busy_timeout_ms: int = 5000) -> None:
        """
        Open the database and apply pragmas.

        Args:
            path: Path to the SQLite database file. Parent directories are
                created as needed.
            busy_timeout_ms: How long SQLite waits on a locked file.
        """
        if self._conn is not None:
            logger.warning("[DB CONNECTION] open() called but connection already exists, ignoring")
            return

        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(path)
        try:
            conn.row_factory = aiosqlite.Row
            for pragma in _PRAGMAS:
                await conn.execute(pragma)
            await conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
            await conn.commit()
        except Exception:
            await conn.close()
            raise

        self._conn = conn
        self._path = path
        logger.info("[DB CONNECTION] Opened connection to %s", path)

    async def close(self) -> None:
        """Checkpoint the WAL and close the connection. No-op if not open."""
        if self._conn is None:
            return

        try:
            await self._conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
            await self._conn.commit()
        except aiosqlite.Error:
            logger.exception("[DB CONNECTION] WAL checkpoint failed during close")
        finally:
            await self._conn.close()
            self._conn = None
            logger.info("[DB CONNECTION] Connection to %s closed", self._path)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def connection(self) -> aiosqlite.Connection:
        """
        The raw aiosqlite connection.

        Raises:
            RuntimeError: If the connection has not been opened yet.
        """
        if self._conn is None:
            raise RuntimeError(
                "ConnectionManager: connection is not open. "
                "Call await db_connection.open(path) at startup."
            )
        return self._conn

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Serialised write transaction.

        Commits on clean exit. Rolls back and re-raises on any exception,
        including cancellation.

        Raises:
            RuntimeError: If the connection is not open.
        """
        conn = self.connection

        async with self._lock:
            await conn.execute("BEGIN")
            try:
                yield conn
            except BaseException:
                try:
                    await conn.rollback()
                except aiosqlite.Error:
                    logger.exception("[DB CONNECTION] Rollback failed")
                raise
            else:
                await conn.commit()

    @asynccontextmanager
    async def read(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Read scope over one consistent snapshot.

        Several SELECTs inside the scope see the same database state. The
        transaction is always rolled back; anything written inside it is
        discarded.

        Raises:
            RuntimeError: If the connection is not open.
        """
        conn = self.connection

        async with self._lock:
            await conn.execute("BEGIN")
            try:
                yield conn
            finally:
                await conn.rollback()


# Module-level shared instance
db_connection = ConnectionManager()
