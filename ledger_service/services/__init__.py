"""
Ledger services package.
"""

from ledger_service.services.ledger_store import LedgerStore
from ledger_service.services.statement import Statement, StatementService
from ledger_service.services.transaction_log import TransactionLog
from ledger_service.services.transfer_engine import (
    AccountRef,
    BalanceMutationPlan,
    TransferEngine,
)
from ledger_service.services.unit_of_work import UnitOfWork

__all__ = [
    "LedgerStore",
    "TransactionLog",
    "UnitOfWork",
    "TransferEngine",
    "BalanceMutationPlan",
    "AccountRef",
    "Statement",
    "StatementService",
]
