"""
Statement tests.
Opening and closing balances, period filtering and what counts as money in or out.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from ledger_service.core.errors import InsufficientFunds, InvalidDateRange, Unauthorized
from ledger_service.models.transaction import Transaction
from ledger_service.services.statement import StatementService


def _window(days=1):
    now = datetime.now(timezone.utc)
    return now - timedelta(days=days), now + timedelta(minutes=1)


def _backdate(session_factory, transaction_number, when):
    with session_factory() as session:
        session.query(Transaction).filter(
            Transaction.transaction_number == transaction_number
        ).update({"created_at": when}, synchronize_session=False)
        session.commit()


def test_statement_totals(session_factory, ledger, make_owner, make_account):
    alice = make_owner()
    account = make_account(alice, "1000.00")
    ledger.deposit(account.id, alice, "500.00")
    ledger.withdraw(account.id, alice, "200.00")

    start, end = _window()
    statement = StatementService(session_factory).generate(account.id, alice, start, end)

    assert statement.closing_balance == Decimal("1300.00")
    assert statement.total_deposits == Decimal("500.00")
    assert statement.total_withdrawals == Decimal("200.00")
    assert statement.opening_balance == Decimal("1000.00")
    assert [t.amount for t in statement.transactions] == [Decimal("500.00"), Decimal("200.00")]


def test_statement_only_covers_the_period(session_factory, ledger, make_owner, make_account):
    alice = make_owner()
    account = make_account(alice, "1000.00")
    old = ledger.deposit(account.id, alice, "500.00")
    ledger.withdraw(account.id, alice, "200.00")
    _backdate(session_factory, old.transaction_number, datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=10))

    start, end = _window()
    statement = StatementService(session_factory).generate(account.id, alice, start, end)

    assert len(statement.transactions) == 1
    assert statement.total_deposits == Decimal("0.00")
    assert statement.total_withdrawals == Decimal("200.00")
    # Balance at the start of the window already included the old deposit
    assert statement.opening_balance == Decimal("1500.00")


def test_failed_transactions_are_left_out(session_factory, ledger, make_owner, make_account):
    alice = make_owner()
    account = make_account(alice, "100.00")
    with pytest.raises(InsufficientFunds):
        ledger.withdraw(account.id, alice, "500.00")

    start, end = _window()
    statement = StatementService(session_factory).generate(account.id, alice, start, end)

    assert statement.transactions == []
    assert statement.opening_balance == statement.closing_balance == Decimal("100.00")


def test_transfers_count_on_each_side(session_factory, ledger, make_owner, make_account):
    alice = make_owner("Alice")
    bob = make_owner("Bob")
    source = make_account(alice, "300.00")
    destination = make_account(bob, "0.00")
    ledger.transfer(source.id, alice, destination.account_number, "120.00")

    start, end = _window()
    service = StatementService(session_factory)
    sent = service.generate(source.id, alice, start, end)
    received = service.generate(destination.id, bob, start, end)

    assert (sent.total_deposits, sent.total_withdrawals) == (Decimal("0.00"), Decimal("120.00"))
    assert (received.total_deposits, received.total_withdrawals) == (Decimal("120.00"), Decimal("0.00"))
    assert sent.opening_balance == Decimal("300.00")
    assert received.opening_balance == Decimal("0.00")


def test_self_transfer_nets_to_zero(session_factory, ledger, make_owner, make_account):
    alice = make_owner()
    account = make_account(alice, "80.00")
    ledger.transfer(account.id, alice, account.account_number, "30.00")

    start, end = _window()
    statement = StatementService(session_factory).generate(account.id, alice, start, end)

    assert statement.total_deposits == statement.total_withdrawals == Decimal("30.00")
    assert statement.opening_balance == statement.closing_balance == Decimal("80.00")


def test_invalid_date_range(session_factory, make_owner, make_account):
    alice = make_owner()
    account = make_account(alice)
    start, end = _window()

    with pytest.raises(InvalidDateRange):
        StatementService(session_factory).generate(account.id, alice, end, start)


def test_statement_for_someone_elses_account(session_factory, make_owner, make_account):
    alice = make_owner("Alice")
    bob = make_owner("Bob")
    account = make_account(alice)
    start, end = _window()

    with pytest.raises(Unauthorized):
        StatementService(session_factory).generate(account.id, bob, start, end)
