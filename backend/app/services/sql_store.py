"""
SQL-backed Entity Store.

Persists accounts, transactions and users as SQLModel rows through an
AsyncSession. Every public method commits before returning, so one method
call is one database transaction; nothing spans several calls.

The caller owns the session (FastAPI creates one per request).
"""
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.models import Account, Transaction, TransactionType, User
from backend.app.logging_config import get_logger
from backend.app.schemas.accounts import AccountPatch
from backend.app.services.auth_service import hash_password
from backend.app.services.entity_store import EntityStore
from backend.app.services.errors import StorageFailure, ValidationError
from backend.app.utils.datetime_utils import utcnow
from backend.app.utils.decimal_utils import ZERO, quantize_money

logger = get_logger(__name__)


class SQLEntityStore(EntityStore):
    """
    Entity store on top of an AsyncSession.

    SQLAlchemy errors are rolled back and re-raised as StorageFailure.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _commit(self, operation: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Storage commit failed", operation=operation, error=str(e))
            raise StorageFailure(operation, e) from e

    async def _fail(self, operation: str, error: SQLAlchemyError) -> StorageFailure:
        await self.session.rollback()
        logger.error("Storage operation failed", operation=operation, error=str(error))
        return StorageFailure(operation, error)

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
        try:
            self.session.add(account)
            await self.session.flush()
        except SQLAlchemyError as e:
            raise await self._fail("create_account", e) from e
        await self._commit("create_account")
        logger.debug("Account created", account_id=account.id, balance=str(balance))
        return account

    async def get_account(self, account_id: str) -> Optional[Account]:
        try:
            return await self.session.get(Account, account_id, populate_existing=True)
        except SQLAlchemyError as e:
            raise await self._fail("get_account", e) from e

    async def list_accounts(self) -> List[Account]:
        stmt = select(Account).order_by(Account.created_at.desc())
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise await self._fail("list_accounts", e) from e
        return list(result.scalars().all())

    async def update_account(self, account_id: str, patch: AccountPatch) -> Optional[Account]:
        account = await self.get_account(account_id)
        if account is None:
            return None

        for field, value in patch.present_fields().items():
            setattr(account, field, value)

        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise await self._fail("update_account", e) from e
        await self._commit("update_account")
        return account

    async def delete_account(self, account_id: str) -> bool:
        account = await self.get_account(account_id)
        if account is None:
            return False

        try:
            # Explicit cascade: FK ON DELETE CASCADE only fires when the engine enforces it
            tx_result = await self.session.execute(
                delete(Transaction).where(Transaction.account_id == account_id)
                )
            await self.session.delete(account)
            await self.session.flush()
        except SQLAlchemyError as e:
            raise await self._fail("delete_account", e) from e
        await self._commit("delete_account")

        logger.debug("Account deleted", account_id=account_id, transactions_deleted=tx_result.rowcount)
        return True

    async def set_account_balance(self, account_id: str, new_balance: Decimal) -> Optional[Account]:
        account = await self.get_account(account_id)
        if account is None:
            return None

        account.balance = quantize_money(new_balance)
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise await self._fail("set_account_balance", e) from e
        await self._commit("set_account_balance")
        return account

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
            type=TransactionType(type).value,
            amount=quantize_money(amount),
            description=description,
            created_at=utcnow(),
            )
        try:
            self.session.add(tx)
            await self.session.flush()
        except SQLAlchemyError as e:
            raise await self._fail("create_transaction", e) from e
        await self._commit("create_transaction")
        return tx

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        try:
            return await self.session.get(Transaction, transaction_id)
        except SQLAlchemyError as e:
            raise await self._fail("get_transaction", e) from e

    async def list_transactions(
        self,
        account_id: Optional[str] = None,
        limit: Optional[int] = None,
        ) -> List[Transaction]:
        stmt = select(Transaction)
        if account_id is not None:
            stmt = stmt.where(Transaction.account_id == account_id)
        stmt = stmt.order_by(Transaction.created_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise await self._fail("list_transactions", e) from e
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def create_user(self, username: str, password: str) -> User:
        user = User(username=username, password_hash=hash_password(password))
        try:
            self.session.add(user)
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise ValidationError("username already taken", field="username", value=username) from e
        except SQLAlchemyError as e:
            raise await self._fail("create_user", e) from e
        await self._commit("create_user")
        return user

    async def get_user(self, user_id: str) -> Optional[User]:
        try:
            return await self.session.get(User, user_id)
        except SQLAlchemyError as e:
            raise await self._fail("get_user", e) from e

    async def get_user_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            raise await self._fail("get_user_by_username", e) from e
        return result.scalars().first()
