#!/usr/bin/env python3
"""
Ledger Management CLI

Command-line access to accounts, postings and statistics from the server
terminal, against the configured database (DATABASE_URL).

Usage:
    python ledger_cli.py create-account <name> [--age N] [--balance 10.00]
    python ledger_cli.py list-accounts
    python ledger_cli.py delete-account <account_id>
    python ledger_cli.py post <account_id> credit|debit <amount> [--description TEXT]
    python ledger_cli.py transactions [--account ID] [--limit N]
    python ledger_cli.py stats
    python ledger_cli.py report <account_id>
"""
import argparse
import asyncio
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

# Add project root to path (file is in root)
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.models import TransactionType
from backend.app.db.session import get_async_engine
from backend.app.main import ensure_database_exists
from backend.app.schemas.accounts import AccountCreate
from backend.app.services.aggregation_service import AggregationService
from backend.app.services.errors import InsufficientFundsError, LedgerError
from backend.app.services.ledger_service import LedgerService
from backend.app.services.sql_store import SQLEntityStore
from backend.app.utils.decimal_utils import format_money


@asynccontextmanager
async def open_store() -> AsyncIterator[SQLEntityStore]:
    ensure_database_exists()
    engine = get_async_engine()
    try:
        async with AsyncSession(engine, expire_on_commit=False) as session:
            yield SQLEntityStore(session)
    finally:
        await engine.dispose()


async def cmd_create_account(name: str, age: Optional[int], balance: Optional[str]) -> bool:
    """Create an account."""
    try:
        item = AccountCreate(name=name, age=age, initial_balance=balance)
    except PydanticValidationError as e:
        for error in e.errors():
            print(f"❌ {'.'.join(str(p) for p in error['loc'])}: {error['msg']}")
        return False
    async with open_store() as store:
        account = await store.create_account(item.name, item.initial_balance, item.age)
    print(f"✅ Account '{account.name}' created with ID {account.id} (balance {format_money(account.balance)})")
    return True


async def cmd_list_accounts() -> None:
    """List all accounts."""
    async with open_store() as store:
        accounts = await store.list_accounts()

    if not accounts:
        print("No accounts found")
        return

    print(f"\n{'ID':<38} {'Name':<20} {'Age':<5} {'Balance':>12}")
    print("-" * 78)
    for account in accounts:
        age = account.age if account.age is not None else "-"
        print(f"{account.id:<38} {account.name:<20} {age!s:<5} {format_money(account.balance):>12}")

    print(f"\nTotal: {len(accounts)} account(s)")


async def cmd_delete_account(account_id: str) -> bool:
    """Delete an account and its transactions."""
    async with open_store() as store:
        deleted = await store.delete_account(account_id)

    if deleted:
        print(f"✅ Account {account_id} deleted")
    else:
        print(f"❌ Account {account_id} not found")
    return deleted


async def cmd_post(account_id: str, tx_type: str, amount: str, description: Optional[str]) -> bool:
    """Post a credit or debit."""
    async with open_store() as store:
        try:
            tx = await LedgerService(store).post_transaction(account_id, tx_type, amount, description)
        except InsufficientFundsError as e:
            print(
                f"❌ Insufficient funds: balance {format_money(e.current_balance)}, "
                f"requested {format_money(e.requested_amount)}"
                )
            return False
        except LedgerError as e:
            print(f"❌ {e}")
            return False
        account = await store.get_account(account_id)

    print(f"✅ {TransactionType(tx.type).value} of {format_money(tx.amount)} posted ({tx.description}); "
          f"new balance {format_money(account.balance)}")
    return True


async def cmd_transactions(account_id: Optional[str], limit: Optional[int]) -> None:
    """List transactions, newest first."""
    async with open_store() as store:
        txs = await store.list_transactions(account_id=account_id, limit=limit)

    if not txs:
        print("No transactions found")
        return

    print(f"\n{'Date':<20} {'Type':<7} {'Amount':>10}  {'Description'}")
    print("-" * 70)
    for tx in txs:
        print(f"{tx.created_at:%Y-%m-%d %H:%M:%S} {TransactionType(tx.type).value:<7} {format_money(tx.amount):>10}  {tx.description}")


async def cmd_stats() -> None:
    """Print dashboard statistics."""
    async with open_store() as store:
        stats = await AggregationService(store).dashboard_stats()

    print(f"Accounts:      {stats.total_accounts}")
    print(f"Total balance: {format_money(stats.total_balance)}")
    print(f"Monthly net:   {format_money(stats.monthly_net)}")


async def cmd_report(account_id: str) -> bool:
    """Print the per-account report."""
    async with open_store() as store:
        try:
            report = await AggregationService(store).account_report(account_id)
        except LedgerError as e:
            print(f"❌ {e}")
            return False

    print(f"Account:       {report.name} ({report.account_id})")
    print(f"Credits:       {format_money(report.total_credits)}")
    print(f"Debits:        {format_money(report.total_debits)}")
    print(f"Transactions:  {report.transaction_count}")
    print(f"Average:       {format_money(report.avg_transaction_amount)}")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="KidLedger Management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python ledger_cli.py create-account Alice --age 9 --balance 50.00
  python ledger_cli.py post <account_id> credit 25.50 --description gift
  python ledger_cli.py stats
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    create_parser = subparsers.add_parser("create-account", help="Create an account")
    create_parser.add_argument("name", help="Display name")
    create_parser.add_argument("--age", type=int, default=None, help="Child age (1-18)")
    create_parser.add_argument("--balance", default=None, help="Initial balance (default 0.00)")

    subparsers.add_parser("list-accounts", help="List all accounts")

    delete_parser = subparsers.add_parser("delete-account", help="Delete an account and its transactions")
    delete_parser.add_argument("account_id", help="Account ID")

    post_parser = subparsers.add_parser("post", help="Post a credit or debit")
    post_parser.add_argument("account_id", help="Account ID")
    post_parser.add_argument("type", choices=["credit", "debit"], help="Transaction type")
    post_parser.add_argument("amount", help="Amount, e.g. 12.50")
    post_parser.add_argument("--description", default=None, help="Description")

    tx_parser = subparsers.add_parser("transactions", help="List transactions")
    tx_parser.add_argument("--account", default=None, help="Only this account")
    tx_parser.add_argument("--limit", type=int, default=None, help="Max results")

    subparsers.add_parser("stats", help="Dashboard statistics")

    report_parser = subparsers.add_parser("report", help="Per-account report")
    report_parser.add_argument("account_id", help="Account ID")

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command == "create-account":
        asyncio.run(cmd_create_account(args.name, args.age, args.balance))
    elif args.command == "list-accounts":
        asyncio.run(cmd_list_accounts())
    elif args.command == "delete-account":
        asyncio.run(cmd_delete_account(args.account_id))
    elif args.command == "post":
        asyncio.run(cmd_post(args.account_id, args.type, args.amount, args.description))
    elif args.command == "transactions":
        asyncio.run(cmd_transactions(args.account, args.limit))
    elif args.command == "stats":
        asyncio.run(cmd_stats())
    elif args.command == "report":
        asyncio.run(cmd_report(args.account_id))


if __name__ == "__main__":
    main()
