"""
Account schemas for KidLedger.

DTOs for Account CRUD operations.

**Design Notes**:
- Canonical account shape is (name, age, balance). The later
  email/password/date-of-birth variant is not supported.
- ``balance`` is never patchable: only the ledger moves it.
- AccountPatch distinguishes "field omitted" from "field sent": only fields in
  ``model_fields_set`` are applied.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from backend.app.schemas.common import ApiModel, Money
from backend.app.utils.decimal_utils import parse_money


def _validate_name(v: str) -> str:
    if not isinstance(v, str):
        raise ValueError("name must be a string")
    v = v.strip()
    if not v:
        raise ValueError("name must not be empty")
    return v


class AccountCreate(ApiModel):
    """
    Body of POST /accounts.

    ``initialBalance`` (also accepted as ``balance``) defaults to 0.00.
    """
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., max_length=100, description="Display name")
    age: Optional[int] = Field(default=None, ge=1, le=18, description="Child age (1-18)")
    initial_balance: Optional[Money] = Field(
        default=None,
        validation_alias=AliasChoices("initialBalance", "initial_balance", "balance"),
        description="Opening balance, non-negative, 2 decimals",
        )

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, v):
        return _validate_name(v)

    @field_validator("initial_balance", mode="before")
    @classmethod
    def _check_initial_balance(cls, v):
        if v is None:
            return None
        amount = parse_money(v)
        if amount < 0:
            raise ValueError("initial balance must not be negative")
        return amount


class AccountPatch(ApiModel):
    """
    Partial update of account metadata (PATCH /accounts/{id}).

    Unknown fields, including ``balance``, are rejected.
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, max_length=100)
    age: Optional[int] = Field(default=None, ge=1, le=18)

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, v):
        if v is None:
            raise ValueError("name cannot be null")
        return _validate_name(v)

    def present_fields(self) -> dict:
        """Fields explicitly provided by the caller, with their values."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class AccountRead(ApiModel):
    """Account as returned by the API."""
    id: str
    name: str
    age: Optional[int] = None
    balance: Money
    created_at: datetime
