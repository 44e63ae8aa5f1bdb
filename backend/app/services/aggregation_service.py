"""
Aggregation Service for KidLedger.

Dashboard and report figures derived from the current store contents.
Nothing is cached: every call rescans accounts and transactions, and nothing
is ever written back.
"""
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from backend.app.db.models import Account, Transaction, TransactionType
from backend.app.logging_config import get_logger
from backend.app.schemas.reports import AccountReport, DashboardStats, ReportsOverview
from backend.app.services.entity_store import EntityStore
from backend.app.services.errors import AccountNotFoundError
from backend.app.utils.datetime_utils import ensure_utc, start_of_month
from backend.app.utils.decimal_utils import ZERO, quantize_money

logger = get_logger(__name__)


def _credit_debit_totals(transactions: Iterable[Transaction]) -> tuple[Decimal, Decimal, int]:
    credits = ZERO
    debits = ZERO
    count = 0
    for tx in transactions:
        count += 1
        if tx.type == TransactionType.CREDIT:
            credits += Decimal(tx.amount)
        else:
            debits += Decimal(tx.amount)
    return credits, debits, count


def _build_report(account_id: str, name: Optional[str], transactions: List[Transaction]) -> AccountReport:
    credits, debits, count = _credit_debit_totals(transactions)
    avg = quantize_money((credits + debits) / count) if count else ZERO
    return AccountReport(
        account_id=account_id,
        name=name,
        total_credits=quantize_money(credits),
        total_debits=quantize_money(debits),
        transaction_count=count,
        avg_transaction_amount=avg,
        )


class AggregationService:
    """Read-only statistics over an EntityStore."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def dashboard_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        """
        Totals for the dashboard header.

        Args:
            now: Reference time for "current month" (default: now)

        Returns:
            DashboardStats with:
            - total_accounts: number of accounts
            - total_balance: sum of cached balances
            - monthly_net: |credits - debits| for transactions created since
              local midnight on the 1st of the current month
        """
        accounts = await self.store.list_accounts()
        total_balance = sum((Decimal(a.balance) for a in accounts), ZERO)

        month_start = start_of_month(now)
        transactions = await self.store.list_transactions()
        net = ZERO
        for tx in transactions:
            if ensure_utc(tx.created_at) < month_start:
                continue
            if tx.type == TransactionType.CREDIT:
                net += Decimal(tx.amount)
            else:
                net -= Decimal(tx.amount)

        return DashboardStats(
            total_accounts=len(accounts),
            total_balance=quantize_money(total_balance),
            monthly_net=quantize_money(abs(net)),
            )

    async def account_report(self, account_id: str) -> AccountReport:
        """
        Credit/debit totals for one account.

        Raises:
            AccountNotFoundError: account does not exist
        """
        account = await self.store.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)

        transactions = await self.store.list_transactions(account_id=account_id)
        return _build_report(account.id, account.name, transactions)

    async def reports_overview(self) -> ReportsOverview:
        """Global credit/debit totals plus one report per account."""
        accounts: List[Account] = await self.store.list_accounts()
        transactions = await self.store.list_transactions()

        by_account: Dict[str, List[Transaction]] = defaultdict(list)
        for tx in transactions:
            by_account[tx.account_id].append(tx)

        credits, debits, count = _credit_debit_totals(transactions)
        reports = [_build_report(a.id, a.name, by_account.get(a.id, [])) for a in accounts]

        logger.debug("Reports overview computed", accounts=len(accounts), transactions=count)
        return ReportsOverview(
            total_accounts=len(accounts),
            total_transactions=count,
            total_credits=quantize_money(credits),
            total_debits=quantize_money(debits),
            accounts=reports,
            )
