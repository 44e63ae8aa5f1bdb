"""
Transaction schemas for KidLedger.

DTOs for posting and reading transactions.

**Design Notes**:
- ``amount`` is accepted as a string or a JSON number and kept as text here;
  the ledger parses it, so API and CLI share the same amount rules
- An empty or missing description is filled in by the ledger
  ("Funds added" / "Purchase")
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field, field_validator

from backend.app.db.models import TransactionType
from backend.app.schemas.common import ApiModel, Money


class TransactionCreate(ApiModel):
    """Body of POST /transactions."""
    model_config = ConfigDict(extra="forbid")

    account_id: str = Field(..., min_length=1, description="Owning account ID")
    type: TransactionType = Field(..., description="credit or debit")
    amount: str = Field(..., min_length=1, description="Amount, e.g. \"25.50\"")
    description: Optional[str] = Field(default=None, max_length=500)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_as_text(cls, v):
        if isinstance(v, bool):
            raise ValueError("amount must be a string or a number")
        if isinstance(v, (int, float, Decimal)):
            return str(v)
        return v


class TransactionRead(ApiModel):
    """Transaction as returned by the API."""
    id: str
    account_id: str
    type: TransactionType
    amount: Money
    description: str
    created_at: datetime
