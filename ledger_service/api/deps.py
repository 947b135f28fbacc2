"""
Shared FastAPI dependencies.
"""

from typing import Iterator, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import sessionmaker

from ledger_service.database import get_session_factory
from ledger_service.schemas.common import MAX_ID
from ledger_service.services.statement import StatementService
from ledger_service.services.transfer_engine import TransferEngine
from ledger_service.services.unit_of_work import UnitOfWork


def get_owner_id(x_owner_id: Optional[str] = Header(None)) -> int:
    """
    Caller identity, set by the authenticating gateway in front of this service.
    """
    if x_owner_id is None or not x_owner_id.strip().isdecimal() or not 0 < int(x_owner_id) <= MAX_ID:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid X-Owner-Id header"
        )
    return int(x_owner_id)


def get_unit_of_work(session_factory: sessionmaker = Depends(get_session_factory)) -> Iterator[UnitOfWork]:
    """
    Yields an open unit of work and ensures it's closed after use.
    Routes that change state call ``uow.commit()`` themselves.
    """
    with UnitOfWork(session_factory) as uow:
        yield uow


def get_transfer_engine(session_factory: sessionmaker = Depends(get_session_factory)) -> TransferEngine:
    return TransferEngine(session_factory)


def get_statement_service(session_factory: sessionmaker = Depends(get_session_factory)) -> StatementService:
    return StatementService(session_factory)
