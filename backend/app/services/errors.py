"""
Ledger error types.

Every error carries a machine-readable ``code`` and its data as attributes,
so the API layer maps errors by type rather than by message:

    LedgerError
    +-- NotFoundError              -> 404
    |   +-- AccountNotFoundError
    |   +-- TransactionNotFoundError
    +-- ValidationError            -> 400
    |   +-- InvalidAmountError
    +-- InsufficientFundsError     -> 400
    +-- StorageFailure             -> 500
"""
from decimal import Decimal
from typing import Any, Optional

from backend.app.utils.decimal_utils import format_money


class LedgerError(Exception):
    """Base class for all ledger errors."""

    code: str = "LEDGER_ERROR"


class NotFoundError(LedgerError):
    code: str = "NOT_FOUND"


class AccountNotFoundError(NotFoundError):
    """Referenced account does not exist."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__("Account not found")


class TransactionNotFoundError(NotFoundError):
    """Referenced transaction does not exist."""

    code: str = "TRANSACTION_NOT_FOUND"

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__("Transaction not found")


class ValidationError(LedgerError):
    """Malformed or missing input, reported per field."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message)

    def to_detail(self) -> dict:
        return {"loc": [self.field] if self.field else [], "msg": str(self), "type": self.code.lower()}


class InvalidAmountError(ValidationError):
    """Amount is not a number, not positive, or too large for the money column."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, value: Any, reason: str):
        super().__init__(f"Invalid amount {value!r}: {reason}", field="amount", value=value)


class InsufficientFundsError(LedgerError):
    """A debit would take the account below zero; nothing was written."""

    code: str = "INSUFFICIENT_FUNDS"

    def __init__(self, account_id: str, current_balance: Decimal, requested_amount: Decimal):
        self.account_id = account_id
        self.current_balance = current_balance
        self.requested_amount = requested_amount
        super().__init__("Insufficient funds")

    def to_payload(self) -> dict:
        return {
            "message": str(self),
            "currentBalance": format_money(self.current_balance),
            "requestedAmount": format_money(self.requested_amount),
            }


class StorageFailure(LedgerError):
    """The underlying persistence operation failed."""

    code: str = "STORAGE_FAILURE"

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Storage operation '{operation}' failed" + (f": {cause}" if cause else ""))
