"""
Common schemas shared across subsystems.

**Domain Coverage**:
- Money: Decimal serialized as a two-digit string ("75.50")
- ApiModel: base class with camelCase JSON aliases
- MessageResponse / ErrorResponse: plain message bodies returned by the API

**Design Notes**:
- JSON field names are camelCase (accountId, createdAt); input accepts both
  the alias and the Python field name
- Money never travels as a JSON float
"""
from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from backend.app.utils.decimal_utils import format_money

Money = Annotated[Decimal, PlainSerializer(format_money, return_type=str, when_used="json")]


class ApiModel(BaseModel):
    """Base for API DTOs: camelCase aliases, populated by name or alias."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        )


class MessageResponse(BaseModel):
    """Plain confirmation body, e.g. {"message": "Account deleted successfully"}."""
    message: str


class ErrorResponse(BaseModel):
    """
    Error body returned by the exception handlers.

    ``errors`` holds per-field details for validation failures.
    """
    model_config = ConfigDict(extra="allow")

    message: str
    code: Optional[str] = Field(default=None, description="Machine-readable error code")
    errors: Optional[List[Any]] = None
