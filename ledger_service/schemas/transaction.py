"""
Pydantic schemas for Transaction API requests and responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field

from ledger_service.core.money import MAX_DIGITS
from ledger_service.models.transaction import TransactionStatus, TransactionType
from ledger_service.schemas.common import EntityId, Money, RequestModel, ResponseModel


class DepositRequest(RequestModel):
    """Schema for depositing into one of the caller's accounts."""
    account_id: EntityId = Field(..., description="Account to credit")
    amount: Decimal = Field(..., gt=0, max_digits=MAX_DIGITS, decimal_places=2, description="Deposit amount (must be positive)")
    description: Optional[str] = Field(None, max_length=500, description="Optional description")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"accountId": 1, "amount": 500.00, "description": "Salary"}
        }
    )


class WithdrawalRequest(RequestModel):
    """Schema for withdrawing from one of the caller's accounts."""
    account_id: EntityId = Field(..., description="Account to debit")
    amount: Decimal = Field(..., gt=0, max_digits=MAX_DIGITS, decimal_places=2, description="Withdrawal amount (must be positive)")
    description: Optional[str] = Field(None, max_length=500, description="Optional description")


class TransferRequest(RequestModel):
    """Schema for initiating a transfer."""
    from_account_id: EntityId = Field(..., description="Source account ID (must belong to the caller)")
    to_account_number: str = Field(..., min_length=1, max_length=20, description="Destination account number")
    amount: Decimal = Field(..., gt=0, max_digits=MAX_DIGITS, decimal_places=2, description="Transfer amount (must be positive)")
    description: Optional[str] = Field(None, max_length=500, description="Optional transfer description")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "fromAccountId": 1,
                "toAccountNumber": "4821937465",
                "amount": 250.00,
                "description": "Payment for services"
            }
        }
    )


class TransactionResponse(ResponseModel):
    """Schema for transaction response."""
    id: int
    transaction_number: str
    from_account_number: Optional[str] = None
    to_account_number: Optional[str] = None
    amount: Money
    transaction_type: TransactionType = Field(serialization_alias="type")
    status: TransactionStatus
    description: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    from_account_balance_after: Optional[Money] = None
    to_account_balance_after: Optional[Money] = None
