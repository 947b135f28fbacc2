"""
Shared fixtures for the ledger service tests.
"""

import os

# Keep the application's own engine off disk during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import ledger_service.models  # noqa: F401  (registers tables)
from ledger_service.database import Base, create_db_engine, get_session_factory
from ledger_service.main import app
from ledger_service.models.account import Account
from ledger_service.services.transfer_engine import TransferEngine
from ledger_service.services.unit_of_work import UnitOfWork


def _build_factory(database_url, **engine_kwargs):
    engine = create_db_engine(database_url, **engine_kwargs)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine, factory


@pytest.fixture
def session_factory():
    """Fresh in-memory database for each test."""
    engine, factory = _build_factory("sqlite://", poolclass=StaticPool)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def file_session_factory(tmp_path):
    """File-backed database; each thread gets its own connection."""
    engine, factory = _build_factory(f"sqlite:///{tmp_path / 'ledger.db'}")
    yield factory
    engine.dispose()


@pytest.fixture
def client(session_factory):
    """API client wired to the per-test database."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def ledger(session_factory):
    return TransferEngine(session_factory, max_retries=3, record_failures=True)


@pytest.fixture
def make_owner(session_factory):
    def _make_owner(name="Alice", email=None, factory=None):
        with UnitOfWork(factory or session_factory) as uow:
            owner = uow.accounts.create_owner(name=name, email=email or f"{name.lower()}@example.com")
            uow.commit()
        return owner.id
    return _make_owner


@pytest.fixture
def make_account(session_factory):
    def _make_account(owner_id, initial_deposit="0.00", factory=None, **kwargs):
        with UnitOfWork(factory or session_factory) as uow:
            account = uow.accounts.create_account(
                owner_id, initial_deposit=Decimal(initial_deposit), **kwargs
            )
            uow.commit()
        return account
    return _make_account


@pytest.fixture
def balance_of(session_factory):
    """Read a balance straight from the database, bypassing any cached state."""
    def _balance_of(account_id, factory=None):
        with (factory or session_factory)() as session:
            return session.get(Account, account_id).balance
    return _balance_of
