"""
Owner database model.
Represents the people or organisations that hold accounts.
"""

from sqlalchemy import Column, String, DateTime, Integer
from sqlalchemy.orm import relationship

from ledger_service.database import Base
from ledger_service.models.base import utcnow


class Owner(Base):
    """
    Owner table - the holder of one or more accounts.
    """
    __tablename__ = "owners"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    accounts = relationship("Account", back_populates="owner")

    def __repr__(self):
        return f"<Owner(id={self.id}, email={self.email})>"
