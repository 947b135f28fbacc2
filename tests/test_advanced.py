"""
Advanced tests for the Ledger Service.
Tests concurrency, stress, and edge cases against a file-backed database.
"""

import random
import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from ledger_service.core.errors import InsufficientFunds, LedgerError
from ledger_service.models.transaction import Transaction, TransactionStatus
from ledger_service.services.transfer_engine import TransferEngine
from ledger_service.services.unit_of_work import UnitOfWork


@pytest.fixture
def engine(file_session_factory):
    # Every lost race is a retry; allow enough of them that none run out
    return TransferEngine(file_session_factory, max_retries=25, record_failures=True)


@pytest.fixture
def setup(file_session_factory, make_owner, make_account):
    """Owner plus accounts on the file-backed database."""
    def _setup(*balances):
        owner_id = make_owner(factory=file_session_factory)
        accounts = [make_account(owner_id, b, factory=file_session_factory) for b in balances]
        return owner_id, accounts
    return _setup


def _run_concurrently(jobs):
    """Run callables together, released at once by a barrier. Returns results or raised errors."""
    barrier = threading.Barrier(len(jobs))

    def run(job):
        barrier.wait()
        try:
            return job()
        except LedgerError as exc:
            return exc

    with ThreadPoolExecutor(max_workers=len(jobs)) as executor:
        return list(executor.map(run, jobs))


# ==================== CONCURRENCY TESTS ====================

def test_concurrent_withdrawals_cannot_overdraw(engine, setup, balance_of, file_session_factory):
    """
    Two withdrawals of 60 from a balance of 100 race each other.
    Exactly one can succeed.
    """
    owner_id, (account,) = setup("100.00")

    results = _run_concurrently([
        lambda: engine.withdraw(account.id, owner_id, "60.00"),
        lambda: engine.withdraw(account.id, owner_id, "60.00"),
    ])

    succeeded = [r for r in results if isinstance(r, Transaction)]
    rejected = [r for r in results if isinstance(r, InsufficientFunds)]
    assert len(succeeded) == 1
    assert len(rejected) == 1
    assert balance_of(account.id, factory=file_session_factory) == Decimal("40.00")


def test_concurrent_transfers_same_account(engine, setup, balance_of, file_session_factory):
    """
    Ten transfers of 20 from an account holding 100.
    Exactly five fit; the rest must fail without touching either balance.
    """
    owner_id, (source, destination) = setup("100.00", "0.00")

    results = _run_concurrently([
        lambda: engine.transfer(source.id, owner_id, destination.account_number, "20.00")
        for _ in range(10)
    ])

    assert sum(isinstance(r, Transaction) for r in results) == 5
    assert sum(isinstance(r, InsufficientFunds) for r in results) == 5
    assert balance_of(source.id, factory=file_session_factory) == Decimal("0.00")
    assert balance_of(destination.id, factory=file_session_factory) == Decimal("100.00")


def test_bidirectional_transfers_conserve_money(engine, setup, balance_of, file_session_factory):
    """
    Transfers in both directions between the same pair of accounts.
    Locks are taken in id order, so opposite directions cannot deadlock.
    """
    owner_id, (first, second) = setup("500.00", "500.00")

    jobs = []
    for _ in range(8):
        jobs.append(lambda: engine.transfer(first.id, owner_id, second.account_number, "10.00"))
        jobs.append(lambda: engine.transfer(second.id, owner_id, first.account_number, "5.00"))
    results = _run_concurrently(jobs)

    assert all(isinstance(r, Transaction) for r in results)
    assert balance_of(first.id, factory=file_session_factory) == Decimal("460.00")
    assert balance_of(second.id, factory=file_session_factory) == Decimal("540.00")


def test_concurrent_deposits_are_all_applied(engine, setup, balance_of, file_session_factory):
    """No lost updates: every deposit that returns is reflected in the balance."""
    owner_id, (account,) = setup("0.00")

    results = _run_concurrently([
        lambda: engine.deposit(account.id, owner_id, "1.25") for _ in range(12)
    ])

    assert all(isinstance(r, Transaction) for r in results)
    assert balance_of(account.id, factory=file_session_factory) == Decimal("15.00")


def test_concurrent_account_opening(file_session_factory, make_owner):
    """Accounts opened in parallel all get distinct numbers."""
    owner_id = make_owner(factory=file_session_factory)

    def open_account():
        with UnitOfWork(file_session_factory) as uow:
            account = uow.accounts.create_account(owner_id, initial_deposit=Decimal("1.00"))
            uow.commit()
        return account.account_number

    numbers = _run_concurrently([open_account for _ in range(10)])

    assert all(isinstance(n, str) for n in numbers)
    assert len(set(numbers)) == 10


# ==================== EDGE CASES ====================

def test_decimal_precision(engine, setup, balance_of, file_session_factory):
    """Many small amounts add up exactly."""
    owner_id, (source, destination) = setup("1.00", "0.00")

    for _ in range(10):
        engine.transfer(source.id, owner_id, destination.account_number, "0.10")

    assert balance_of(source.id, factory=file_session_factory) == Decimal("0.00")
    assert balance_of(destination.id, factory=file_session_factory) == Decimal("1.00")


def test_large_amounts(engine, setup, balance_of, file_session_factory):
    owner_id, (source, destination) = setup("9999999999.99", "0.01")

    engine.transfer(source.id, owner_id, destination.account_number, "9999999999.99")

    assert balance_of(source.id, factory=file_session_factory) == Decimal("0.00")
    assert balance_of(destination.id, factory=file_session_factory) == Decimal("10000000000.00")


def test_random_operations_keep_invariants(engine, setup, balance_of, file_session_factory):
    """
    A seeded random mix of operations.
    Balances never go negative and money only enters or leaves through
    deposits and withdrawals.
    """
    rng = random.Random(1234)
    owner_id, accounts = setup("100.00", "50.00", "0.00")
    expected_total = Decimal("150.00")

    for _ in range(60):
        amount = Decimal(rng.randint(1, 8000)) / 100
        kind = rng.choice(["deposit", "withdraw", "transfer"])
        account = rng.choice(accounts)
        try:
            if kind == "deposit":
                engine.deposit(account.id, owner_id, amount)
                expected_total += amount
            elif kind == "withdraw":
                engine.withdraw(account.id, owner_id, amount)
                expected_total -= amount
            else:
                target = rng.choice(accounts)
                engine.transfer(account.id, owner_id, target.account_number, amount)
        except InsufficientFunds:
            pass

        balances = [balance_of(a.id, factory=file_session_factory) for a in accounts]
        assert all(b >= 0 for b in balances)
        assert sum(balances) == expected_total


def test_failed_operations_leave_audit_trail(engine, setup, file_session_factory):
    owner_id, (account,) = setup("10.00")

    results = _run_concurrently([
        lambda: engine.withdraw(account.id, owner_id, "8.00") for _ in range(3)
    ])

    with file_session_factory() as session:
        statuses = [
            t.status for t in session.query(Transaction).filter(Transaction.from_account_id == account.id)
        ]
    assert sum(isinstance(r, Transaction) for r in results) == 1
    assert statuses.count(TransactionStatus.COMPLETED) == 1
    assert statuses.count(TransactionStatus.FAILED) == 2
