"""
Transaction API endpoints for KidLedger.

- POST /transactions: Post a credit or debit against an account
- GET  /transactions: List transactions (optional accountId filter and limit)
- GET  /transactions/{id}: Get a single transaction

Transactions are immutable: there is no PATCH or DELETE. Deleting the owning
account removes them.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from backend.app.api.v1.dependencies import get_entity_store, get_ledger_service
from backend.app.config import get_settings
from backend.app.logging_config import get_logger
from backend.app.schemas.transactions import TransactionCreate, TransactionRead
from backend.app.services.entity_store import EntityStore
from backend.app.services.errors import TransactionNotFoundError
from backend.app.services.ledger_service import LedgerService

logger = get_logger(__name__)
settings = get_settings()

tx_router = APIRouter(prefix="/transactions", tags=["Transactions"])


@tx_router.post("", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    item: TransactionCreate,
    ledger: LedgerService = Depends(get_ledger_service),
    ) -> TransactionRead:
    """
    Post a transaction and update the account balance.

    Returns:
        The created transaction

    Raises:
        404: Account not found
        400: Insufficient funds (body has currentBalance and requestedAmount)
        400: Invalid amount or malformed body
    """
    logger.info("Posting transaction", account_id=item.account_id, type=item.type.value, amount=item.amount)
    tx = await ledger.post_transaction(
        account_id=item.account_id,
        type=item.type,
        amount=item.amount,
        description=item.description,
        )
    return TransactionRead.model_validate(tx)


@tx_router.get("", response_model=List[TransactionRead])
async def list_transactions(
    account_id: Optional[str] = Query(None, alias="accountId", description="Filter by account"),
    limit: Optional[int] = Query(
        None,
        ge=1,
        le=settings.RECENT_TRANSACTIONS_LIMIT_MAX,
        description="Max results (most recent first)",
        ),
    store: EntityStore = Depends(get_entity_store),
    ) -> List[TransactionRead]:
    """
    List transactions, newest first.

    Args:
        account_id: Only this account's transactions
        limit: Cap on the number of results
    """
    txs = await store.list_transactions(account_id=account_id, limit=limit)
    return [TransactionRead.model_validate(tx) for tx in txs]


@tx_router.get("/{tx_id}", response_model=TransactionRead)
async def get_transaction(tx_id: str, store: EntityStore = Depends(get_entity_store)) -> TransactionRead:
    """
    Get a single transaction by ID.

    Raises:
        404: If transaction not found
    """
    tx = await store.get_transaction(tx_id)
    if tx is None:
        raise TransactionNotFoundError(tx_id)
    return TransactionRead.model_validate(tx)
