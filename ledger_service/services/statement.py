"""
Statement Aggregator: read-only account statements over a period.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_service.core.errors import InvalidDateRange
from ledger_service.models.account import Account
from ledger_service.models.transaction import Transaction
from ledger_service.services.unit_of_work import UnitOfWork, storage_failure

logger = logging.getLogger(__name__)


class Statement:
    """Period summary for one account, read by the API through attribute access."""

    def __init__(
        self,
        account: Account,
        start_date: datetime,
        end_date: datetime,
        opening_balance: Decimal,
        closing_balance: Decimal,
        total_deposits: Decimal,
        total_withdrawals: Decimal,
        transactions: Optional[List[Transaction]] = None,
    ):
        self.account = account
        self.start_date = start_date
        self.end_date = end_date
        self.opening_balance = opening_balance
        self.closing_balance = closing_balance
        self.total_deposits = total_deposits
        self.total_withdrawals = total_withdrawals
        self.transactions = transactions or []


def _as_naive_utc(value: datetime) -> datetime:
    # Timestamps are stored as naive UTC
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def summarize(account: Account, transactions: List[Transaction], start: datetime, end: datetime) -> Statement:
    """
    Aggregate completed transactions into a statement.

    Money in is every transaction crediting the account, money out every
    transaction debiting it; a self-transfer counts on both sides. The
    opening balance is worked back from the current balance.
    """
    total_deposits = sum(
        (t.amount for t in transactions if t.to_account_id == account.id), Decimal("0.00")
    )
    total_withdrawals = sum(
        (t.amount for t in transactions if t.from_account_id == account.id), Decimal("0.00")
    )
    closing_balance = account.balance

    return Statement(
        account=account,
        start_date=start,
        end_date=end,
        opening_balance=closing_balance - total_deposits + total_withdrawals,
        closing_balance=closing_balance,
        total_deposits=total_deposits,
        total_withdrawals=total_withdrawals,
        transactions=list(transactions),
    )


class StatementService:
    """Builds statements; never changes balances."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def generate(self, account_id: int, owner_id: int, start: datetime, end: datetime) -> Statement:
        """
        Statement for one of the caller's accounts between ``start`` and ``end`` inclusive.

        Raises:
            InvalidDateRange: If start is after end
            AccountNotFound: If the account does not exist
            Unauthorized: If the caller does not own the account
        """
        start, end = _as_naive_utc(start), _as_naive_utc(end)
        if start > end:
            raise InvalidDateRange(start, end)

        try:
            with UnitOfWork(self.session_factory) as uow:
                account = uow.accounts.get_account(account_id, owner_id)
                transactions = uow.transactions.list_by_account_and_period(account.id, start, end)
                statement = summarize(account, transactions, start, end)
        except SQLAlchemyError as exc:
            raise storage_failure(exc, "statement") from exc

        logger.info(
            "Statement generated for account: %s", account_id,
            extra={"account_id": account_id, "transaction_count": len(statement.transactions)},
        )
        return statement
