"""
Services package.
Business logic on top of the entity store.

- EntityStore: storage contract (memory_store / sql_store implementations)
- LedgerService: posts credit/debit transactions, keeps balances in step
- AggregationService: dashboard and report figures
"""
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

__all__ = [
    "EntityStore",
    "InMemoryEntityStore",
    "SQLEntityStore",
    "LedgerService",
    "AccountLockProvider",
    "NoAccountLocks",
    "PerAccountLocks",
    "AggregationService",
    ]
