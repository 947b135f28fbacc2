"""
Account database model.
Represents bank accounts in the system.
"""

import enum

from sqlalchemy import (
    CheckConstraint,
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


class AccountType(enum.Enum):
    """Kinds of account an owner can open."""
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"


class AccountStatus(enum.Enum):
    """Account lifecycle states."""
    ACTIVE = "active"
    FROZEN = "frozen"
    CLOSED = "closed"


class Account(Base):
    """
    Account table - stores bank account information.

    ``version`` is the optimistic version stamp: every UPDATE issued for an
    account carries ``WHERE version = <value read>`` and bumps it, so a
    writer working from a stale read fails with ``StaleDataError``.
    """
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    account_number = Column(String(20), unique=True, index=True, nullable=False)
    owner_id = Column(Integer, ForeignKey("owners.id"), nullable=False, index=True)
    account_type = Column(SQLEnum(AccountType), nullable=False, default=AccountType.CHECKING)
    currency = Column(String(3), nullable=False, default="USD")
    balance = Column(Numeric(precision=18, scale=2), nullable=False, default=0)
    status = Column(SQLEnum(AccountStatus), nullable=False, default=AccountStatus.ACTIVE)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    closed_at = Column(DateTime, nullable=True)

    __mapper_args__ = {"version_id_col": version}

    owner = relationship("Owner", back_populates="accounts")

    # Relationship to transactions
    sent_transactions = relationship(
        "Transaction",
        foreign_keys="Transaction.from_account_id",
        back_populates="from_account"
    )
    received_transactions = relationship(
        "Transaction",
        foreign_keys="Transaction.to_account_id",
        back_populates="to_account"
    )

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    def __repr__(self):
        return (
            f"<Account(id={self.id}, number={self.account_number}, "
            f"owner={self.owner_id}, balance={self.balance}, status={self.status})>"
        )
