"""
Report schemas for KidLedger.

Read-side projections computed by the aggregation service. They are never
stored; every request rescans accounts and transactions.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from backend.app.schemas.common import ApiModel, Money


class DashboardStats(ApiModel):
    """
    Dashboard header figures.

    - total_balance: sum of every account's cached balance
    - monthly_net: |credits - debits| posted since the start of the current month
    """
    total_accounts: int
    total_balance: Money
    monthly_net: Money


class AccountReport(ApiModel):
    """Per-account credit/debit totals."""
    account_id: str
    name: Optional[str] = None
    total_credits: Money
    total_debits: Money
    transaction_count: int
    avg_transaction_amount: Money = Field(description="(credits + debits) / count, 0.00 without transactions")


class ReportsOverview(ApiModel):
    """Totals across all accounts plus one AccountReport per account (newest account first)."""
    total_accounts: int
    total_transactions: int
    total_credits: Money
    total_debits: Money
    accounts: List[AccountReport]
