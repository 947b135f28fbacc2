"""
Transaction Log: append-only record of ledger operations.
"""

from datetime import datetime
from typing import List

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ledger_service.core.errors import TransactionNotFound
from ledger_service.models.transaction import Transaction, TransactionStatus


class TransactionLog:
    """Transaction repository bound to one session. Rows are never updated after commit."""

    def __init__(self, session: Session, accounts):
        self.session = session
        self.accounts = accounts

    def append(self, transaction: Transaction) -> Transaction:
        """Stage a transaction in the current unit of work; it persists only on commit."""
        self.session.add(transaction)
        return transaction

    def list_by_account(self, account_id: int, owner_id: int) -> List[Transaction]:
        """All transactions touching an account the caller owns, newest first."""
        self.accounts.get_account(account_id, owner_id)

        return self.session.query(Transaction).filter(
            or_(
                Transaction.from_account_id == account_id,
                Transaction.to_account_id == account_id,
            )
        ).order_by(Transaction.created_at.desc(), Transaction.id.desc()).all()

    def list_by_account_and_period(self, account_id: int, start: datetime, end: datetime) -> List[Transaction]:
        """Completed transactions with ``start <= created_at <= end``, oldest first."""
        return self.session.query(Transaction).filter(
            or_(
                Transaction.from_account_id == account_id,
                Transaction.to_account_id == account_id,
            ),
            Transaction.created_at >= start,
            Transaction.created_at <= end,
            Transaction.status == TransactionStatus.COMPLETED,
        ).order_by(Transaction.created_at.asc(), Transaction.id.asc()).all()

    def get_by_number(self, transaction_number: str, owner_id: int) -> Transaction:
        """
        One transaction, visible to the owner of either side.

        Raises:
            TransactionNotFound: If it does not exist or the caller owns neither account
        """
        transaction = self.session.query(Transaction).filter(
            Transaction.transaction_number == transaction_number
        ).first()
        if transaction is None:
            raise TransactionNotFound(transaction_number)

        owners = {
            account.owner_id
            for account in (transaction.from_account, transaction.to_account)
            if account is not None
        }
        if owner_id not in owners:
            raise TransactionNotFound(transaction_number)
        return transaction
