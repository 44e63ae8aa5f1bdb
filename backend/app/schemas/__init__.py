"""
Pydantic schemas for KidLedger.

**Organization by Domain**:
- common.py: Money type, ApiModel base, message/error bodies
- accounts.py: Account create/patch/read
- transactions.py: Transaction create/read
- reports.py: Dashboard and report projections
"""
from backend.app.schemas.accounts import AccountCreate, AccountPatch, AccountRead
from backend.app.schemas.common import ApiModel, ErrorResponse, MessageResponse, Money
from backend.app.schemas.reports import AccountReport, DashboardStats, ReportsOverview
from backend.app.schemas.transactions import TransactionCreate, TransactionRead

__all__ = [
    "ApiModel",
    "Money",
    "MessageResponse",
    "ErrorResponse",
    "AccountCreate",
    "AccountPatch",
    "AccountRead",
    "TransactionCreate",
    "TransactionRead",
    "DashboardStats",
    "AccountReport",
    "ReportsOverview",
    ]
