"""
Database models package.
"""

from ledger_service.models.owner import Owner
from ledger_service.models.account import Account, AccountStatus, AccountType
from ledger_service.models.transaction import (
    Transaction,
    TransactionStatus,
    TransactionType,
    generate_transaction_number,
)

__all__ = [
    "Owner",
    "Account",
    "AccountStatus",
    "AccountType",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "generate_transaction_number",
]
