"""
Transaction database model.
Represents deposits, withdrawals and transfers against accounts.
"""

import enum
import uuid

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship

from ledger_service.database import Base
from ledger_service.models.base import utcnow


class TransactionType(enum.Enum):
    """Kinds of balance-changing operation."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"
    PAYMENT = "payment"
    FEE = "fee"


class TransactionStatus(enum.Enum):
    """Transaction status states."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


def generate_transaction_number() -> str:
    """Human-readable unique number, e.g. ``TXN20260118093012A1B2C3D4``."""
    return f"TXN{utcnow():%Y%m%d%H%M%S}{uuid.uuid4().hex[:8].upper()}"


class Transaction(Base):
    """
    Transaction table - append-only record of ledger operations.

    ``from_account_id`` is empty for deposits and ``to_account_id`` is empty
    for withdrawals; the missing side is money crossing the system boundary.
    """
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    transaction_number = Column(String(50), unique=True, index=True, nullable=False)
    from_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True, index=True)
    to_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True, index=True)
    amount = Column(Numeric(precision=18, scale=2), nullable=False)
    transaction_type = Column(SQLEnum(TransactionType), nullable=False)
    status = Column(SQLEnum(TransactionStatus), nullable=False, default=TransactionStatus.PENDING)
    description = Column(String(500), nullable=True)
    failure_reason = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    from_account_balance_after = Column(Numeric(precision=18, scale=2), nullable=True)
    to_account_balance_after = Column(Numeric(precision=18, scale=2), nullable=True)

    # Relationships; joined so account numbers survive the session closing
    from_account = relationship(
        "Account",
        foreign_keys=[from_account_id],
        back_populates="sent_transactions",
        lazy="joined"
    )
    to_account = relationship(
        "Account",
        foreign_keys=[to_account_id],
        back_populates="received_transactions",
        lazy="joined"
    )

    @property
    def from_account_number(self):
        return self.from_account.account_number if self.from_account is not None else None

    @property
    def to_account_number(self):
        return self.to_account.account_number if self.to_account is not None else None

    def complete(self, from_balance=None, to_balance=None) -> None:
        """Mark completed and record the balance-after snapshots."""
        self.status = TransactionStatus.COMPLETED
        self.completed_at = utcnow()
        self.from_account_balance_after = from_balance
        self.to_account_balance_after = to_balance

    def fail(self, reason: str) -> None:
        self.status = TransactionStatus.FAILED
        self.failure_reason = reason

    def __repr__(self):
        return (
            f"<Transaction(number={self.transaction_number}, type={self.transaction_type}, "
            f"from={self.from_account_id}, to={self.to_account_id}, amount={self.amount})>"
        )
