"""
Pydantic schemas for Owner and Account API requests and responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import ConfigDict, Field

from ledger_service.core.config import settings
from ledger_service.core.money import MAX_DIGITS
from ledger_service.models.account import AccountStatus, AccountType
from ledger_service.schemas.common import Money, RequestModel, ResponseModel


class OwnerCreate(RequestModel):
    """Schema for registering an account owner."""
    name: str = Field(..., min_length=1, max_length=100, description="Owner name")
    email: str = Field(..., min_length=3, max_length=255, description="Unique contact email")


class OwnerResponse(ResponseModel):
    """Schema for owner response."""
    id: int
    name: str
    email: str
    created_at: datetime


class AccountCreate(RequestModel):
    """Schema for opening a new account."""
    account_type: AccountType = Field(default=AccountType.CHECKING, alias="type", description="Account type")
    currency: str = Field(default=settings.DEFAULT_CURRENCY, pattern=r"^[A-Z]{3}$", description="ISO 4217 currency code")
    initial_deposit: Decimal = Field(
        default=Decimal("0.00"), ge=0, max_digits=MAX_DIGITS, decimal_places=2, description="Opening balance"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "checking",
                "currency": "USD",
                "initialDeposit": 1000.00
            }
        }
    )


class AccountStatusUpdate(RequestModel):
    """Schema for freezing, unfreezing or closing an account."""
    status: AccountStatus


class AccountResponse(ResponseModel):
    """Schema for account response."""
    id: int
    account_number: str
    owner_id: int
    account_type: AccountType = Field(serialization_alias="type")
    currency: str
    balance: Money
    status: AccountStatus
    created_at: datetime
    closed_at: Optional[datetime] = None
