"""
Unit of work: the atomic boundary for ledger mutations.

A ``UnitOfWork`` owns one SQLAlchemy session for its lifetime and exposes
the Ledger Store and Transaction Log bound to that session. It ends exactly
once, by ``commit()`` or ``rollback()``; leaving the ``with`` block without
committing rolls back.

    with UnitOfWork(SessionLocal) as uow:
        account = uow.accounts.get_account(account_id, owner_id)
        ...
        uow.commit()

Storage errors raised while committing come out typed: a stale
account version becomes ``ConcurrencyConflict``, anything else from
SQLAlchemy becomes ``StorageFailure``.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ledger_service.core.errors import ConcurrencyConflict, StorageFailure
from ledger_service.services.ledger_store import LedgerStore
from ledger_service.services.transaction_log import TransactionLog

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Single session, committed or rolled back exactly once."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self.session: Optional[Session] = None
        self.accounts: Optional[LedgerStore] = None
        self.transactions: Optional[TransactionLog] = None
        self._finished = False

    def __enter__(self) -> "UnitOfWork":
        if self.session is not None:
            raise RuntimeError("UnitOfWork cannot be entered twice")
        self.session = self._session_factory()
        # Results are read after the session closes
        self.session.expire_on_commit = False
        self.accounts = LedgerStore(self.session)
        self.transactions = TransactionLog(self.session, self.accounts)
        return self

    def __exit__(self, exc_type, exc, tb):
        # close() discards uncommitted work but keeps loaded objects readable
        self._finished = True
        self.session.close()
        return False

    def commit(self) -> None:
        self._ensure_open()
        self._finished = True
        try:
            self.session.commit()
        except StaleDataError as exc:
            self.session.rollback()
            raise ConcurrencyConflict() from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise storage_failure(exc, "commit") from exc

    def rollback(self) -> None:
        self._ensure_open()
        self._finished = True
        self.session.rollback()

    def _ensure_open(self) -> None:
        if self.session is None:
            raise RuntimeError("UnitOfWork has not been entered")
        if self._finished:
            raise RuntimeError("UnitOfWork has already been committed or rolled back")


def storage_failure(exc: SQLAlchemyError, operation: str) -> StorageFailure:
    """Wrap a SQLAlchemy error; operational errors (locks, timeouts) are transient."""
    transient = isinstance(exc, OperationalError)
    logger.error(
        "Storage failure during %s", operation,
        exc_info=exc,
        extra={"operation": operation, "transient": transient},
    )
    return StorageFailure(f"{operation} failed: {exc.__class__.__name__}", transient=transient, cause=exc)
