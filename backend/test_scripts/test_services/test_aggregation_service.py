"""
Tests for AggregationService.

Dashboard totals, monthly net and per-account reports over both stores.

Reference: backend/app/services/aggregation_service.py
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from backend.app.services.aggregation_service import AggregationService
from backend.app.services.errors import AccountNotFoundError
from backend.app.services.ledger_service import LedgerService
from backend.app.services.memory_store import InMemoryEntityStore
from backend.app.utils.datetime_utils import start_of_month, utcnow


async def _seed(store):
    """Two accounts: Alice 50.00 (+10.00, -4.00), Bob 20.00 (-5.00)."""
    ledger = LedgerService(store)
    alice = await store.create_account("Alice", Decimal("50.00"), age=10)
    bob = await store.create_account("Bob", Decimal("20.00"))
    await ledger.post_transaction(alice.id, "credit", "10.00")
    await ledger.post_transaction(alice.id, "debit", "4.00")
    await ledger.post_transaction(bob.id, "debit", "5.00")
    return alice, bob


class TestDashboardStats:

    @pytest.mark.asyncio
    async def test_empty_store(self, store):
        stats = await AggregationService(store).dashboard_stats()
        assert stats.total_accounts == 0
        assert stats.total_balance == Decimal("0.00")
        assert stats.monthly_net == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_totals(self, store):
        """AGG-001: total_balance is the sum of cached balances; monthly_net is |credits - debits|."""
        await _seed(store)
        stats = await AggregationService(store).dashboard_stats()

        accounts = await store.list_accounts()
        assert stats.total_accounts == 2
        assert stats.total_balance == sum(Decimal(a.balance) for a in accounts)
        assert stats.total_balance == Decimal("71.00")
        # 10.00 - 4.00 - 5.00
        assert stats.monthly_net == Decimal("1.00")

    @pytest.mark.asyncio
    async def test_monthly_net_is_absolute(self, store):
        account = await store.create_account("Cleo", Decimal("30.00"))
        await LedgerService(store).post_transaction(account.id, "debit", "12.50")

        stats = await AggregationService(store).dashboard_stats()
        assert stats.monthly_net == Decimal("12.50")

    @pytest.mark.asyncio
    async def test_monthly_net_ignores_earlier_months(self, store):
        """AGG-002: Transactions before the month boundary of ``now`` do not count."""
        await _seed(store)
        next_month = utcnow() + timedelta(days=40)

        stats = await AggregationService(store).dashboard_stats(now=next_month)
        assert stats.monthly_net == Decimal("0.00")
        assert stats.total_balance == Decimal("71.00")

    @pytest.mark.asyncio
    async def test_monthly_net_boundary(self):
        """AGG-003: A transaction just before the boundary is excluded, one at it is included."""
        store = InMemoryEntityStore()
        account = await store.create_account("Dora", Decimal("100.00"))
        ledger = LedgerService(store)
        before = await ledger.post_transaction(account.id, "credit", "7.00")
        at = await ledger.post_transaction(account.id, "credit", "3.00")

        now = utcnow()
        boundary = start_of_month(now)
        store._transactions[before.id].created_at = boundary - timedelta(microseconds=1)
        store._transactions[at.id].created_at = boundary

        stats = await AggregationService(store).dashboard_stats(now=now)
        assert stats.monthly_net == Decimal("3.00")


class TestAccountReport:

    @pytest.mark.asyncio
    async def test_report(self, store):
        """AGG-010: Totals, count and average for one account."""
        alice, _ = await _seed(store)
        report = await AggregationService(store).account_report(alice.id)

        assert report.account_id == alice.id
        assert report.name == "Alice"
        assert report.total_credits == Decimal("10.00")
        assert report.total_debits == Decimal("4.00")
        assert report.transaction_count == 2
        assert report.avg_transaction_amount == Decimal("7.00")

    @pytest.mark.asyncio
    async def test_report_without_transactions(self, store):
        account = await store.create_account("Emil", Decimal("5.00"))
        report = await AggregationService(store).account_report(account.id)

        assert report.transaction_count == 0
        assert report.total_credits == Decimal("0.00")
        assert report.avg_transaction_amount == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_report_average_rounds_half_up(self, store):
        account = await store.create_account("Fay")
        ledger = LedgerService(store)
        for amount in ("1.00", "1.00", "1.01"):
            await ledger.post_transaction(account.id, "credit", amount)

        report = await AggregationService(store).account_report(account.id)
        # 3.01 / 3 = 1.00333...
        assert report.avg_transaction_amount == Decimal("1.00")

    @pytest.mark.asyncio
    async def test_report_unknown_account(self, store):
        with pytest.raises(AccountNotFoundError):
            await AggregationService(store).account_report("missing")


class TestReportsOverview:

    @pytest.mark.asyncio
    async def test_overview(self, store):
        """AGG-020: Global totals plus one report per account, newest account first."""
        alice, bob = await _seed(store)
        overview = await AggregationService(store).reports_overview()

        assert overview.total_accounts == 2
        assert overview.total_transactions == 3
        assert overview.total_credits == Decimal("10.00")
        assert overview.total_debits == Decimal("9.00")
        assert [r.account_id for r in overview.accounts] == [bob.id, alice.id]
        assert overview.accounts[0].total_debits == Decimal("5.00")

    @pytest.mark.asyncio
    async def test_overview_json(self, store):
        await _seed(store)
        overview = await AggregationService(store).reports_overview()
        data = overview.model_dump(mode="json", by_alias=True)

        assert data["totalCredits"] == "10.00"
        assert data["accounts"][0]["avgTransactionAmount"] == "5.00"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
