"""
Pydantic schemas for account statements.
"""

from datetime import datetime
from typing import List

from pydantic import Field

from ledger_service.schemas.account import AccountResponse
from ledger_service.schemas.common import EntityId, Money, RequestModel, ResponseModel
from ledger_service.schemas.transaction import TransactionResponse


class StatementRequest(RequestModel):
    """Schema for requesting a statement over a period."""
    account_id: EntityId = Field(..., description="Account to report on")
    start_date: datetime = Field(..., description="Start of the period (inclusive)")
    end_date: datetime = Field(..., description="End of the period (inclusive)")


class StatementResponse(ResponseModel):
    """Schema for statement response."""
    account: AccountResponse
    start_date: datetime
    end_date: datetime
    opening_balance: Money
    closing_balance: Money
    total_deposits: Money
    total_withdrawals: Money
    transactions: List[TransactionResponse]
