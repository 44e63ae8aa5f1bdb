"""
Entity Store contract.

Durable keyed storage for accounts, transactions and the legacy user record,
independent of the ledger's business rules. Two implementations exist:

- InMemoryEntityStore (memory_store.py): process-local maps, thread-safe
- SQLEntityStore (sql_store.py): SQLModel tables through an AsyncSession

Contract rules shared by every implementation:
- Lookups on an unknown id return None (or False for delete); they never raise.
- Listings are ordered newest-created first.
- create_transaction() never touches the account balance; set_account_balance()
  is the only path that changes it.
- Each method is atomic on its own. Nothing groups several calls into one unit.
- Unexpected backend failures are raised as StorageFailure.
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

from backend.app.db.models import Account, Transaction, TransactionType, User
from backend.app.schemas.accounts import AccountPatch


class EntityStore(ABC):
    """Abstract storage interface used by the ledger and aggregation services."""

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    @abstractmethod
    async def create_account(
        self,
        name: str,
        initial_balance: Optional[Decimal] = None,
        age: Optional[int] = None,
        ) -> Account:
        """
        Create an account.

        Args:
            name: Display name
            initial_balance: Opening balance (0.00 when omitted)
            age: Optional child age

        Returns:
            The new account with id and created_at assigned
        """

    @abstractmethod
    async def get_account(self, account_id: str) -> Optional[Account]:
        """Return the account, or None if it does not exist."""

    @abstractmethod
    async def list_accounts(self) -> List[Account]:
        """All accounts, newest first."""

    @abstractmethod
    async def update_account(self, account_id: str, patch: AccountPatch) -> Optional[Account]:
        """
        Apply the fields present in ``patch`` to the account.

        Returns:
            The updated account, or None if it does not exist
        """

    @abstractmethod
    async def delete_account(self, account_id: str) -> bool:
        """
        Delete the account and every transaction that references it.

        Returns:
            True if an account was deleted, False if it did not exist
        """

    @abstractmethod
    async def set_account_balance(self, account_id: str, new_balance: Decimal) -> Optional[Account]:
        """Overwrite the cached balance. Returns None if the account does not exist."""

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @abstractmethod
    async def create_transaction(
        self,
        account_id: str,
        type: TransactionType,
        amount: Decimal,
        description: str,
        ) -> Transaction:
        """
        Persist a transaction record. The account balance is left untouched.

        The caller is responsible for checking that the account exists.
        """

    @abstractmethod
    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Return the transaction, or None if it does not exist."""

    @abstractmethod
    async def list_transactions(
        self,
        account_id: Optional[str] = None,
        limit: Optional[int] = None,
        ) -> List[Transaction]:
        """
        Transactions, newest first.

        Args:
            account_id: Only transactions of this account
            limit: At most this many records
        """

    # ------------------------------------------------------------------
    # Users (legacy, not used by the ledger)
    # ------------------------------------------------------------------

    @abstractmethod
    async def create_user(self, username: str, password: str) -> User:
        """Create a user; only the bcrypt hash of ``password`` is kept."""

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]:
        pass
