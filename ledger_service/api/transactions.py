"""
Transaction API endpoints.
Handles deposits, withdrawals and transfers, and transaction history.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, status

from ledger_service.api.deps import get_owner_id, get_transfer_engine, get_unit_of_work
from ledger_service.schemas.common import MAX_ID
from ledger_service.schemas.transaction import (
    DepositRequest,
    TransactionResponse,
    TransferRequest,
    WithdrawalRequest,
)
from ledger_service.services.transfer_engine import TransferEngine
from ledger_service.services.unit_of_work import UnitOfWork

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post("/deposit", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def deposit(
    request: DepositRequest,
    owner_id: int = Depends(get_owner_id),
    engine: TransferEngine = Depends(get_transfer_engine)
):
    """
    Deposit money into one of the caller's accounts.
    """
    return engine.deposit(request.account_id, owner_id, request.amount, request.description)


@router.post("/withdraw", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def withdraw(
    request: WithdrawalRequest,
    owner_id: int = Depends(get_owner_id),
    engine: TransferEngine = Depends(get_transfer_engine)
):
    """
    Withdraw money from one of the caller's accounts.
    """
    return engine.withdraw(request.account_id, owner_id, request.amount, request.description)


@router.post("/transfer", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def transfer(
    request: TransferRequest,
    owner_id: int = Depends(get_owner_id),
    engine: TransferEngine = Depends(get_transfer_engine)
):
    """
    Transfer money from one of the caller's accounts to any account.

    Implements:
    - Atomicity: both balances and the transaction record commit together or not at all
    - Concurrency: row-level locks taken in account id order, plus version checks
    - Conservation: the source is debited and the destination credited by the same amount

    - **fromAccountId**: Source account (must belong to the caller)
    - **toAccountNumber**: Destination account number (any owner)
    - **amount**: Transfer amount (must be positive)
    - **description**: Optional transfer description
    """
    return engine.transfer(
        request.from_account_id,
        owner_id,
        request.to_account_number,
        request.amount,
        request.description,
    )


@router.get("/account/{account_id}", response_model=List[TransactionResponse])
def get_account_transactions(
    account_id: int = Path(..., gt=0, le=MAX_ID),
    owner_id: int = Depends(get_owner_id),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    Get all transactions for one of the caller's accounts (sent and received), newest first.
    """
    return uow.transactions.list_by_account(account_id, owner_id)


@router.get("/{transaction_number}", response_model=TransactionResponse)
def get_transaction(
    transaction_number: str,
    owner_id: int = Depends(get_owner_id),
    uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    Get transaction details by transaction number.
    """
    return uow.transactions.get_by_number(transaction_number, owner_id)
