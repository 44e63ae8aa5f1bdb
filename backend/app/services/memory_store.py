"""
In-memory Entity Store.

Keeps accounts, transactions and users in process-local dicts guarded by a
re-entrant lock, so every method is atomic even when called from several
threads. Records handed out are copies: mutating them does not change the store.

Used when STORAGE_BACKEND=memory and by the test suite.
"""
import itertools
import threading
from decimal import Decimal
from typing import Dict, List, Optional, TypeVar

from backend.app.db.models import Account, Transaction, TransactionType, User
from backend.app.logging_config import get_logger
from backend.app.schemas.accounts import AccountPatch
from backend.app.services.auth_service import hash_password
from backend.app.services.entity_store import EntityStore
from backend.app.services.errors import ValidationError
from backend.app.utils.datetime_utils import utcnow
from backend.app.utils.decimal_utils import ZERO, quantize_money

logger = get_logger(__name__)

RecordT = TypeVar("RecordT", Account, Transaction, User)


def _clone(record: RecordT) -> RecordT:
    return type(record)(**record.model_dump())


class InMemoryEntityStore(EntityStore):
    """Entity store backed by dicts keyed by id."""

    def __init__(self):
        self._lock = threading.RLock()
        self._accounts: Dict[str, Account] = {}
        self._transactions: Dict[str, Transaction] = {}
        self._users: Dict[str, User] = {}
        # Insertion sequence breaks created_at ties so "newest first" stays stable
        self._sequence = itertools.count()
        self._order: Dict[str, int] = {}

    def _newest_first(self, records) -> list:
        return sorted(records, key=lambda r: (r.created_at, self._order[r.id]), reverse=True)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def create_account(
        self,
        name: str,
        initial_balance: Optional[Decimal] = None,
        age: Optional[int] = None,
        ) -> Account:
        balance = quantize_money(initial_balance) if initial_balance is not None else ZERO
        account = Account(name=name, age=age, balance=balance, created_at=utcnow())
        with self._lock:
            self._accounts[account.id] = account
            self._order[account.id] = next(self._sequence)
        logger.debug("Account created", account_id=account.id, balance=str(balance))
        return _clone(account)

    async def get_account(self, account_id: str) -> Optional[Account]:
        with self._lock:
            account = self._accounts.get(account_id)
            return _clone(account) if account else None

    async def list_accounts(self) -> List[Account]:
        with self._lock:
            return [_clone(a) for a in self._newest_first(self._accounts.values())]

    async def update_account(self, account_id: str, patch: AccountPatch) -> Optional[Account]:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return None
            for field, value in patch.present_fields().items():
                setattr(account, field, value)
            return _clone(account)

    async def delete_account(self, account_id: str) -> bool:
        with self._lock:
            if self._accounts.pop(account_id, None) is None:
                return False
            self._order.pop(account_id, None)
            owned = [tx_id for tx_id, tx in self._transactions.items() if tx.account_id == account_id]
            for tx_id in owned:
                del self._transactions[tx_id]
                self._order.pop(tx_id, None)
        logger.debug("Account deleted", account_id=account_id, transactions_deleted=len(owned))
        return True

    async def set_account_balance(self, account_id: str, new_balance: Decimal) -> Optional[Account]:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return None
            account.balance = quantize_money(new_balance)
            return _clone(account)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def create_transaction(
        self,
        account_id: str,
        type: TransactionType,
        amount: Decimal,
        description: str,
        ) -> Transaction:
        tx = Transaction(
            account_id=account_id,
            type=TransactionType(type),
            amount=quantize_money(amount),
            description=description,
            created_at=utcnow(),
            )
        with self._lock:
            self._transactions[tx.id] = tx
            self._order[tx.id] = next(self._sequence)
        return _clone(tx)

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        with self._lock:
            tx = self._transactions.get(transaction_id)
            return _clone(tx) if tx else None

    async def list_transactions(
        self,
        account_id: Optional[str] = None,
        limit: Optional[int] = None,
        ) -> List[Transaction]:
        with self._lock:
            txs = self._transactions.values()
            if account_id is not None:
                txs = [tx for tx in txs if tx.account_id == account_id]
            ordered = self._newest_first(txs)
            if limit is not None:
                ordered = ordered[:limit]
            return [_clone(tx) for tx in ordered]

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def create_user(self, username: str, password: str) -> User:
        password_hash = hash_password(password)
        with self._lock:
            if any(u.username == username for u in self._users.values()):
                raise ValidationError("username already taken", field="username", value=username)
            user = User(username=username, password_hash=password_hash)
            self._users[user.id] = user
        return _clone(user)

    async def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return _clone(user) if user else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return _clone(user)
        return None
