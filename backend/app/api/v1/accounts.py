"""
Account API endpoints for KidLedger.

- GET    /accounts: List accounts (newest first)
- POST   /accounts: Create an account
- GET    /accounts/{id}: Get one account
- PATCH  /accounts/{id}: Update name/age
- DELETE /accounts/{id}: Delete an account and its transactions
- GET    /accounts/{id}/report: Credit/debit totals for one account
"""
from typing import List

from fastapi import APIRouter, Depends, status

from backend.app.api.v1.dependencies import get_aggregation_service, get_entity_store
from backend.app.logging_config import get_logger
from backend.app.schemas.accounts import AccountCreate, AccountPatch, AccountRead
from backend.app.schemas.common import MessageResponse
from backend.app.schemas.reports import AccountReport
from backend.app.services.aggregation_service import AggregationService
from backend.app.services.entity_store import EntityStore
from backend.app.services.errors import AccountNotFoundError

logger = get_logger(__name__)

account_router = APIRouter(prefix="/accounts", tags=["Accounts"])


@account_router.get("", response_model=List[AccountRead])
async def list_accounts(store: EntityStore = Depends(get_entity_store)) -> List[AccountRead]:
    """List all accounts, newest first."""
    accounts = await store.list_accounts()
    return [AccountRead.model_validate(a) for a in accounts]


@account_router.post(
    "",
    response_model=AccountRead,
    status_code=status.HTTP_201_CREATED,
    )
async def create_account(
    item: AccountCreate,
    store: EntityStore = Depends(get_entity_store),
    ) -> AccountRead:
    """
    Create an account.

    Balance defaults to 0.00 when initialBalance is omitted.
    """
    account = await store.create_account(
        name=item.name,
        initial_balance=item.initial_balance,
        age=item.age,
        )
    logger.info("Account created", account_id=account.id, balance=str(account.balance))
    return AccountRead.model_validate(account)


@account_router.get("/{account_id}", response_model=AccountRead)
async def get_account(account_id: str, store: EntityStore = Depends(get_entity_store)) -> AccountRead:
    """
    Get a single account.

    Raises:
        404: If the account does not exist
    """
    account = await store.get_account(account_id)
    if account is None:
        raise AccountNotFoundError(account_id)
    return AccountRead.model_validate(account)


@account_router.patch("/{account_id}", response_model=AccountRead)
async def update_account(
    account_id: str,
    patch: AccountPatch,
    store: EntityStore = Depends(get_entity_store),
    ) -> AccountRead:
    """
    Update account metadata.

    Only the fields present in the body are changed. The balance cannot be
    patched; post a transaction instead.
    """
    account = await store.update_account(account_id, patch)
    if account is None:
        raise AccountNotFoundError(account_id)
    logger.info("Account updated", account_id=account_id, fields=sorted(patch.model_fields_set))
    return AccountRead.model_validate(account)


@account_router.delete("/{account_id}", response_model=MessageResponse)
async def delete_account(account_id: str, store: EntityStore = Depends(get_entity_store)) -> MessageResponse:
    """
    Delete an account together with all of its transactions.

    Raises:
        404: If the account does not exist
    """
    deleted = await store.delete_account(account_id)
    if not deleted:
        raise AccountNotFoundError(account_id)
    logger.info("Account deleted", account_id=account_id)
    return MessageResponse(message="Account deleted successfully")


@account_router.get("/{account_id}/report", response_model=AccountReport)
async def get_account_report(
    account_id: str,
    service: AggregationService = Depends(get_aggregation_service),
    ) -> AccountReport:
    """Credit/debit totals, transaction count and average amount for one account."""
    return await service.account_report(account_id)
