"""
Database module exports.
"""
from backend.app.db.base import (
    SQLModel,
    TransactionType,
    User,
    Account,
    Transaction,
    )
from backend.app.db.session import get_sync_engine, get_async_engine

__all__ = [
    "SQLModel",
    "get_sync_engine",  # For test fixtures and schema inspection
    "get_async_engine",  # For the async FastAPI app
    "TransactionType",
    "User",
    "Account",
    "Transaction",
    ]
