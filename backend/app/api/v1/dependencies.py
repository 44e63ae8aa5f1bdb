"""
FastAPI dependencies shared by the v1 endpoints.

The entity store implementation is picked from settings.STORAGE_BACKEND:
- "memory": one process-wide InMemoryEntityStore
- "database": one SQLEntityStore per request, on its own AsyncSession

Tests override get_entity_store via app.dependency_overrides.
"""
from typing import AsyncGenerator, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.config import get_settings
from backend.app.db.session import get_shared_async_engine
from backend.app.services.aggregation_service import AggregationService
from backend.app.services.entity_store import EntityStore
from backend.app.services.ledger_service import (
    AccountLockProvider,
    LedgerService,
    NoAccountLocks,
    PerAccountLocks,
    )
from backend.app.services.memory_store import InMemoryEntityStore
from backend.app.services.sql_store import SQLEntityStore

_memory_store: Optional[InMemoryEntityStore] = None
_account_locks: Optional[AccountLockProvider] = None


def get_memory_store() -> InMemoryEntityStore:
    """Process-wide in-memory store (created on first use)."""
    global _memory_store
    if _memory_store is None:
        _memory_store = InMemoryEntityStore()
    return _memory_store


def get_account_locks() -> AccountLockProvider:
    """Process-wide lock provider; per-account locks only if LEDGER_SERIALIZE_POSTINGS is set."""
    global _account_locks
    if _account_locks is None:
        if get_settings().LEDGER_SERIALIZE_POSTINGS:
            _account_locks = PerAccountLocks()
        else:
            _account_locks = NoAccountLocks()
    return _account_locks


async def get_entity_store() -> AsyncGenerator[EntityStore, None]:
    """Yield the configured entity store for the duration of a request."""
    if get_settings().STORAGE_BACKEND == "memory":
        yield get_memory_store()
        return

    async with AsyncSession(get_shared_async_engine(), expire_on_commit=False) as session:
        yield SQLEntityStore(session)


def get_ledger_service(
    store: EntityStore = Depends(get_entity_store),
    account_locks: AccountLockProvider = Depends(get_account_locks),
    ) -> LedgerService:
    return LedgerService(store, account_locks)


def get_aggregation_service(store: EntityStore = Depends(get_entity_store)) -> AggregationService:
    return AggregationService(store)
