"""
Database session management.
Handles SQLite connection and session lifecycle with async support.
"""
from pathlib import Path
from typing import Optional

from sqlalchemy import event, Engine, create_engine
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.pool import NullPool

from backend.app.config import get_settings


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """
    Enable foreign key constraints for SQLite.
    Required for ON DELETE CASCADE from accounts to transactions.

    Note: This event listener applies to ALL sync engines (including the one backing async).
    """
    if type(dbapi_conn).__module__.startswith(("sqlite3", "aiosqlite", "sqlalchemy.dialects.sqlite")):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _ensure_sqlite_directory(db_url: str) -> None:
    if db_url.startswith("sqlite:///"):
        db_path = db_url.replace("sqlite:///", "")
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)


def get_sync_engine(db_url: Optional[str] = None) -> Engine:
    """
    Create a SYNC database engine.

    Used by test fixtures creating or inspecting a throwaway schema.

    Args:
        db_url: Override for settings.DATABASE_URL

    Returns:
        Engine: SQLAlchemy sync engine
    """
    db_url = db_url or get_settings().DATABASE_URL
    _ensure_sqlite_directory(db_url)

    return create_engine(
        db_url,
        echo=False,
        poolclass=NullPool,
        )


def get_async_engine(db_url: Optional[str] = None) -> AsyncEngine:
    """
    Create the async database engine.

    Args:
        db_url: Override for settings.DATABASE_URL (sync form, "sqlite:///...")

    Returns:
        AsyncEngine: SQLAlchemy async engine configured for SQLite with aiosqlite
    """
    db_url = db_url or get_settings().DATABASE_URL
    _ensure_sqlite_directory(db_url)

    # Convert sqlite:/// to sqlite+aiosqlite:/// for async
    async_db_url = db_url.replace("sqlite:///", "sqlite+aiosqlite:///")

    return create_async_engine(
        async_db_url,
        echo=False,
        # NullPool for SQLite - each connection is independent
        poolclass=NullPool,
        )


_async_engine: Optional[AsyncEngine] = None


def get_shared_async_engine() -> AsyncEngine:
    """Lazily create the process-wide async engine used by the API."""
    global _async_engine
    if _async_engine is None:
        _async_engine = get_async_engine()
    return _async_engine

