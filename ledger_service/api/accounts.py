"""
Account API endpoints.
Handles account opening, retrieval and status changes.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, status

from ledger_service.api.deps import get_owner_id, get_unit_of_work
from ledger_service.schemas.account import AccountCreate, AccountResponse, AccountStatusUpdate
from ledger_service.schemas.common import MAX_ID
from ledger_service.services.unit_of_work import UnitOfWork

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("/", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    account_data: AccountCreate,
    owner_id: int = Depends(get_owner_id),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    Open a new account for the caller.

    - **type**: checking, savings or investment (default: checking)
    - **currency**: 3-letter currency code (default: USD)
    - **initialDeposit**: Starting balance (default: 0.00)
    """
    account = uow.accounts.create_account(
        owner_id=owner_id,
        account_type=account_data.account_type,
        currency=account_data.currency,
        initial_deposit=account_data.initial_deposit,
    )
    uow.commit()
    return account


@router.get("/", response_model=List[AccountResponse])
def list_accounts(
    owner_id: int = Depends(get_owner_id),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    List the caller's accounts.
    """
    return uow.accounts.list_accounts(owner_id)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int = Path(..., gt=0, le=MAX_ID),
    owner_id: int = Depends(get_owner_id),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    Get account details by account ID.
    """
    return uow.accounts.get_account(account_id, owner_id)


@router.post("/{account_id}/status", response_model=AccountResponse)
def change_account_status(
    status_data: AccountStatusUpdate,
    account_id: int = Path(..., gt=0, le=MAX_ID),
    owner_id: int = Depends(get_owner_id),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    Freeze, unfreeze or close an account. Closing requires a zero balance.
    """
    account = uow.accounts.change_status(account_id, owner_id, status_data.status)
    uow.commit()
    return account
