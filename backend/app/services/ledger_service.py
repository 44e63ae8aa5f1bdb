"""
Ledger Service for KidLedger.

Enforces the one business rule of the system: a debit may not take an
account below zero. It also keeps the account's cached balance in step with
the transactions posted against it.

Posting sequence (post_transaction):
1. Load the account (AccountNotFoundError if missing)
2. Parse the amount; reject non-numeric or non-positive values
3. Debit larger than the balance -> InsufficientFundsError, nothing written
4. Compute the new balance (two decimals); a balance outside NUMERIC(10, 2)
   -> InvalidAmountError, nothing written
5. Persist the transaction
6. Write the new balance onto the account
7. Return the transaction

Design Notes:
- Steps 5 and 6 are two separate store calls. If step 6 fails the transaction
  record stays and the error propagates; there is no compensation.
- Postings are not serialized by default: two concurrent debits on the same
  account can both pass the funds check. Pass PerAccountLocks (or set
  LEDGER_SERIALIZE_POSTINGS) to run steps 1-6 under a per-account lock.
  This only serializes postings within one process.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Dict, Optional, Union

from backend.app.db.models import DEFAULT_DESCRIPTIONS, Transaction, TransactionType
from backend.app.logging_config import get_logger
from backend.app.services.entity_store import EntityStore
from backend.app.services.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    ValidationError,
    )
from backend.app.utils.decimal_utils import (
    MoneyInput,
    MoneyRangeError,
    fits_money_column,
    parse_money,
    quantize_money,
    )

logger = get_logger(__name__)


# =============================================================================
# ACCOUNT LOCKS
# =============================================================================

class AccountLockProvider:
    """Hook around the read-check-write sequence of one posting."""

    @asynccontextmanager
    async def hold(self, account_id: str) -> AsyncIterator[None]:
        yield


class NoAccountLocks(AccountLockProvider):
    """Postings run as they arrive, without coordination."""


class PerAccountLocks(AccountLockProvider):
    """
    One asyncio.Lock per account id: postings on the same account run one at a time.

    An entry lives only while some posting holds or waits for it, so ids of
    deleted or unknown accounts do not accumulate.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._holders: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, account_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(account_id)
        if lock is None:
            lock = self._locks[account_id] = asyncio.Lock()
        self._holders[account_id] = self._holders.get(account_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[account_id] -= 1
            if self._holders[account_id] == 0:
                del self._holders[account_id]
                del self._locks[account_id]


# =============================================================================
# HELPERS
# =============================================================================

def parse_posting_amount(amount: MoneyInput) -> Decimal:
    """
    Parse and check a posting amount.

    Returns:
        Amount rounded to two decimals

    Raises:
        InvalidAmountError: not a number, not > 0 after rounding, or too large
    """
    try:
        parsed = parse_money(amount)
    except MoneyRangeError:
        raise InvalidAmountError(amount, "too large") from None
    except ValueError:
        raise InvalidAmountError(amount, "not a number") from None

    if parsed <= 0:
        raise InvalidAmountError(amount, "must be greater than zero")
    return parsed


def resolve_description(type: TransactionType, description: Optional[str]) -> str:
    """Return the trimmed description, or the type's default when empty."""
    if description is not None and description.strip():
        return description.strip()
    return DEFAULT_DESCRIPTIONS[type]


def apply_posting(balance: Decimal, type: TransactionType, amount: Decimal) -> Decimal:
    """New balance after posting ``amount`` of ``type`` on ``balance``."""
    if type == TransactionType.CREDIT:
        return quantize_money(balance + amount)
    return quantize_money(balance - amount)


# =============================================================================
# SERVICE
# =============================================================================

class LedgerService:
    """
    Posts credit/debit transactions against accounts.

    The service is storage-agnostic: it only talks to the EntityStore contract.
    """

    def __init__(self, store: EntityStore, account_locks: Optional[AccountLockProvider] = None):
        self.store = store
        self.account_locks = account_locks or NoAccountLocks()

    async def post_transaction(
        self,
        account_id: str,
        type: Union[TransactionType, str],
        amount: MoneyInput,
        description: Optional[str] = None,
        ) -> Transaction:
        """
        Post a transaction and update the account's cached balance.

        Args:
            account_id: Owning account
            type: credit or debit
            amount: Positive amount (string, int or Decimal)
            description: Free text; defaults to "Funds added" / "Purchase"

        Returns:
            The persisted transaction

        Raises:
            AccountNotFoundError: account does not exist
            InvalidAmountError: amount unparseable, non-positive or too large
            InsufficientFundsError: debit larger than the current balance
            StorageFailure: a store call failed
        """
        try:
            tx_type = TransactionType(type)
        except ValueError:
            raise ValidationError(f"Invalid transaction type {type!r}", field="type", value=type) from None

        async with self.account_locks.hold(account_id):
            account = await self.store.get_account(account_id)
            if account is None:
                logger.info("Posting rejected: account not found", account_id=account_id)
                raise AccountNotFoundError(account_id)

            value = parse_posting_amount(amount)
            current_balance = quantize_money(Decimal(account.balance))

            if tx_type == TransactionType.DEBIT and value > current_balance:
                logger.info(
                    "Posting rejected: insufficient funds",
                    account_id=account_id,
                    current_balance=str(current_balance),
                    requested_amount=str(value),
                    )
                raise InsufficientFundsError(account_id, current_balance, value)

            new_balance = apply_posting(current_balance, tx_type, value)
            if not fits_money_column(new_balance):
                logger.info(
                    "Posting rejected: balance limit exceeded",
                    account_id=account_id,
                    current_balance=str(current_balance),
                    requested_amount=str(value),
                    )
                raise InvalidAmountError(amount, "balance would exceed the money column limit")

            tx = await self.store.create_transaction(
                account_id=account_id,
                type=tx_type,
                amount=value,
                description=resolve_description(tx_type, description),
                )

            updated = await self.store.set_account_balance(account_id, new_balance)
            if updated is None:
                # Account vanished between the two writes; the transaction row stays
                logger.warning(
                    "Balance not updated: account deleted during posting",
                    account_id=account_id,
                    transaction_id=tx.id,
                    )

        logger.info(
            "Transaction posted",
            account_id=account_id,
            transaction_id=tx.id,
            type=tx_type.value,
            amount=str(value),
            new_balance=str(new_balance),
            )
        return tx
