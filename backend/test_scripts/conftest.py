"""
Shared pytest fixtures.

Switches the app to the test database before any app module is imported,
and provides a ``store`` fixture parametrized over both EntityStore
implementations so the same contract tests run against each.
"""
import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

# Setup test database BEFORE importing app modules
from backend.test_scripts.test_db_config import setup_test_database

setup_test_database()

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from backend.app.db.session import get_async_engine, get_sync_engine
from backend.app.services.memory_store import InMemoryEntityStore
from backend.app.services.sql_store import SQLEntityStore


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    """Throwaway SQLite file with the full schema."""
    url = f"sqlite:///{tmp_path / 'ledger.db'}"
    engine = get_sync_engine(url)
    SQLModel.metadata.create_all(engine)
    engine.dispose()
    return url


@pytest_asyncio.fixture
async def sql_store(sqlite_url):
    engine = get_async_engine(sqlite_url)
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield SQLEntityStore(session)
    await engine.dispose()


@pytest_asyncio.fixture(params=["memory", "sql"])
async def store(request, sqlite_url):
    """Fresh, empty EntityStore (in-memory or SQL)."""
    if request.param == "memory":
        yield InMemoryEntityStore()
        return

    engine = get_async_engine(sqlite_url)
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield SQLEntityStore(session)
    await engine.dispose()
