"""
Pydantic schemas package.
"""

from ledger_service.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountStatusUpdate,
    OwnerCreate,
    OwnerResponse,
)
from ledger_service.schemas.statement import StatementRequest, StatementResponse
from ledger_service.schemas.transaction import (
    DepositRequest,
    TransactionResponse,
    TransferRequest,
    WithdrawalRequest,
)

__all__ = [
    "AccountCreate",
    "AccountResponse",
    "AccountStatusUpdate",
    "OwnerCreate",
    "OwnerResponse",
    "StatementRequest",
    "StatementResponse",
    "DepositRequest",
    "WithdrawalRequest",
    "TransferRequest",
    "TransactionResponse",
]
