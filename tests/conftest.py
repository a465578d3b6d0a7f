"""
Pytest configuration and fixtures for guildstore tests.
"""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add src directory to path so imports work without an install
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from guildstore.database.database import Database  # noqa: E402
from guildstore.database.db_connection import ConnectionManager  # noqa: E402
from guildstore.settings.settings_store import SettingsStore  # noqa: E402


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "guildstore.db"


@pytest_asyncio.fixture
async def database(db_path):
    """An initialized Database on a throwaway file with its own connection."""
    db = Database(db_path=db_path, connection=ConnectionManager(), busy_timeout_ms=1000)
    await db.initialize()
    yield db
    await db.shutdown()


@pytest_asyncio.fixture
async def store(database):
    """A SettingsStore bound to the throwaway database."""
    return SettingsStore(connection=database.connection)
