"""
Database models for KidLedger.

All models use SQLModel (SQLAlchemy 2.x) with the following conventions:
- Primary keys are opaque UUID strings generated by the application
- Money columns use Numeric(10, 2)
- Timestamps in UTC (created_at)
- Foreign keys enforced with PRAGMA foreign_keys=ON
"""
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    Column,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    TypeDecorator,
    )
from sqlmodel import Field, SQLModel

from backend.app.utils.datetime_utils import ensure_utc, utcnow


def new_id() -> str:
    """Generate an opaque identifier for a new record."""
    return str(uuid.uuid4())


class UTCDateTime(TypeDecorator):
    """
    DateTime column that always hands back aware UTC datetimes.

    SQLite stores no offset, so values are converted to UTC before writing and
    tagged as UTC when read.
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            value = ensure_utc(value).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            value = ensure_utc(value)
        return value


# ============================================================================
# ENUMS
# ============================================================================

class TransactionType(str, Enum):
    """
    Account transaction types.

    - CREDIT: money added to the account (pocket money, gifts, chores)
      Effect: ↑ balance
    - DEBIT: money spent from the account (purchases)
      Effect: ↓ balance, rejected when it exceeds the current balance

    Default descriptions when the caller leaves it empty:
    - CREDIT -> "Funds added"
    - DEBIT  -> "Purchase"
    """
    CREDIT = "credit"
    DEBIT = "debit"


DEFAULT_DESCRIPTIONS = {
    TransactionType.CREDIT: "Funds added",
    TransactionType.DEBIT: "Purchase",
    }


# ============================================================================
# MODELS
# ============================================================================

class User(SQLModel, table=True):
    """
    Legacy user record.

    Kept for schema compatibility; accounts are not linked to users and no
    ledger flow reads this table. Only the bcrypt hash of the password is stored.
    """
    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True)
    username: str = Field(unique=True, index=True, nullable=False)
    password_hash: str = Field(nullable=False)


class Account(SQLModel, table=True):
    """
    A child's spending account.

    ``balance`` is a cached running total: it is adjusted by the ledger on every
    posted transaction rather than recomputed from the transaction log.
    """
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("age IS NULL OR (age >= 1 AND age <= 18)", name="ck_accounts_age_range"),
        )

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(nullable=False)
    age: Optional[int] = Field(default=None)
    balance: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(10, 2), nullable=False),
        )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UTCDateTime(), nullable=False),
        )


class Transaction(SQLModel, table=True):
    """
    Immutable credit/debit event posted against one account.

    There is no update path: a mistake is corrected by posting the opposite type.
    Deleting the owning account deletes its transactions (ON DELETE CASCADE).
    """
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("type IN ('credit', 'debit')", name="ck_transactions_type"),
        Index("idx_transactions_account_created", "account_id", "created_at"),
        )

    id: str = Field(default_factory=new_id, primary_key=True)
    account_id: str = Field(
        sa_column=Column(
            String,
            ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
            ),
        )
    type: TransactionType = Field(sa_column=Column(String(6), nullable=False))
    amount: Decimal = Field(sa_column=Column(Numeric(10, 2), nullable=False))
    description: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UTCDateTime(), nullable=False, index=True),
        )
