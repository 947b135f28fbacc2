"""
Transfer Engine: deposits, withdrawals and transfers as atomic units.

Each operation is described by a ``BalanceMutationPlan`` (credit only,
debit only, or paired debit and credit) and executed by ``_apply``:

1. resolve the accounts on each side (ownership checked for the caller's side)
2. lock them in ascending id order (SELECT FOR UPDATE)
3. validate status and funds
4. move the money, append a completed transaction, commit

Everything in one attempt shares a single ``UnitOfWork``; a failure at any
step rolls the whole attempt back. Account rows are version stamped, so a
writer that read a balance another writer has since changed fails at commit
with ``ConcurrencyConflict`` and the plan is re-run from step 1, up to
``MAX_CONFLICT_RETRIES`` attempts.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_service.core.config import settings
from ledger_service.core.errors import (
    AccountInactive,
    ConcurrencyConflict,
    InsufficientFunds,
    InvalidAmount,
    LedgerError,
)
from ledger_service.core.money import CENT, MAX_AMOUNT, to_amount
from ledger_service.models.account import Account
from ledger_service.models.transaction import (
    Transaction,
    TransactionStatus,
    TransactionType,
    generate_transaction_number,
)
from ledger_service.services.ledger_store import LedgerStore
from ledger_service.services.unit_of_work import UnitOfWork, storage_failure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountRef:
    """How to find one side of a plan: by id for the caller's own account, by number otherwise."""

    account_id: Optional[int] = None
    owner_id: Optional[int] = None
    account_number: Optional[str] = None

    def resolve(self, store: LedgerStore) -> Account:
        if self.account_number is not None:
            return store.get_account_by_number(self.account_number)
        return store.get_account(self.account_id, self.owner_id)


@dataclass(frozen=True)
class BalanceMutationPlan:
    """A single-account credit, a single-account debit, or a paired debit and credit."""

    transaction_type: TransactionType
    amount: Decimal
    debit: Optional[AccountRef] = None
    credit: Optional[AccountRef] = None
    description: Optional[str] = None

    @classmethod
    def credit_only(cls, transaction_type, amount, account: AccountRef, description=None):
        return cls(transaction_type, amount, credit=account, description=description)

    @classmethod
    def debit_only(cls, transaction_type, amount, account: AccountRef, description=None):
        return cls(transaction_type, amount, debit=account, description=description)

    @classmethod
    def paired(cls, transaction_type, amount, source: AccountRef, destination: AccountRef, description=None):
        return cls(transaction_type, amount, debit=source, credit=destination, description=description)


class TransferEngine:
    """
    Performs balance-changing operations against the ledger.

    Args:
        session_factory: Callable returning a new SQLAlchemy session; one is
            opened per attempt
        max_retries: Attempts allowed when a concurrent update conflicts
        record_failures: Write a failed transaction for audit when an
            operation is rejected for funds or account status
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        max_retries: Optional[int] = None,
        record_failures: Optional[bool] = None,
    ):
        self.session_factory = session_factory
        self.max_retries = max(1, max_retries if max_retries is not None else settings.MAX_CONFLICT_RETRIES)
        self.record_failures = (
            record_failures if record_failures is not None else settings.RECORD_FAILED_TRANSACTIONS
        )

    def deposit(self, account_id: int, owner_id: int, amount, description: Optional[str] = None) -> Transaction:
        """Credit one of the caller's accounts with money entering the system."""
        plan = BalanceMutationPlan.credit_only(
            TransactionType.DEPOSIT,
            to_amount(amount),
            AccountRef(account_id=account_id, owner_id=owner_id),
            description,
        )
        return self._apply(plan)

    def withdraw(self, account_id: int, owner_id: int, amount, description: Optional[str] = None) -> Transaction:
        """Debit one of the caller's accounts with money leaving the system."""
        plan = BalanceMutationPlan.debit_only(
            TransactionType.WITHDRAWAL,
            to_amount(amount),
            AccountRef(account_id=account_id, owner_id=owner_id),
            description,
        )
        return self._apply(plan)

    def transfer(
        self,
        from_account_id: int,
        owner_id: int,
        to_account_number: str,
        amount,
        description: Optional[str] = None,
    ) -> Transaction:
        """
        Move money from the caller's account to any account, identified by number.

        The destination may belong to another owner. No fee is charged. A
        transfer to the source account itself leaves the balance unchanged
        but is still recorded.
        """
        plan = BalanceMutationPlan.paired(
            TransactionType.TRANSFER,
            to_amount(amount),
            AccountRef(account_id=from_account_id, owner_id=owner_id),
            AccountRef(account_number=to_account_number),
            description,
        )
        return self._apply(plan)

    def _apply(self, plan: BalanceMutationPlan) -> Transaction:
        for attempt in range(1, self.max_retries + 1):
            try:
                transaction = self._attempt(plan)
            except ConcurrencyConflict:
                logger.warning(
                    "Concurrent update on %s, retrying", plan.transaction_type.value,
                    extra={"attempt": attempt, "max_attempts": self.max_retries},
                )
                continue

            logger.info(
                "%s completed: %s", plan.transaction_type.value.capitalize(), transaction.transaction_number,
                extra={
                    "transaction_number": transaction.transaction_number,
                    "amount": str(transaction.amount),
                    "attempt": attempt,
                },
            )
            return transaction

        raise ConcurrencyConflict(
            f"{plan.transaction_type.value.capitalize()} conflicted with concurrent updates "
            f"{self.max_retries} times",
            attempts=self.max_retries,
        )

    def _attempt(self, plan: BalanceMutationPlan) -> Transaction:
        with UnitOfWork(self.session_factory) as uow:
            try:
                source, destination = self._lock(uow, plan)
                try:
                    self._validate(plan, source, destination)
                except (InsufficientFunds, AccountInactive) as exc:
                    rejection = exc
                    touched = (
                        source.id if source is not None else None,
                        destination.id if destination is not None else None,
                    )
                else:
                    return self._execute(uow, plan, source, destination)
            except SQLAlchemyError as exc:
                raise storage_failure(exc, plan.transaction_type.value) from exc

        # Locks are released by the rollback on leaving the block
        self._reject(plan, touched, rejection)
        raise rejection

    @staticmethod
    def _execute(uow: UnitOfWork, plan: BalanceMutationPlan, source, destination) -> Transaction:
        transaction = Transaction(
            transaction_number=generate_transaction_number(),
            transaction_type=plan.transaction_type,
            amount=plan.amount,
            description=plan.description,
            status=TransactionStatus.PENDING,
            from_account=source,
            to_account=destination,
        )

        # Debit before credit; for a self-transfer both land on the same row
        if source is not None:
            source.balance = (source.balance - plan.amount).quantize(CENT)
        if destination is not None:
            destination.balance = (destination.balance + plan.amount).quantize(CENT)

        transaction.complete(
            from_balance=source.balance if source is not None else None,
            to_balance=destination.balance if destination is not None else None,
        )
        uow.transactions.append(transaction)
        uow.commit()
        return transaction

    @staticmethod
    def _lock(uow: UnitOfWork, plan: BalanceMutationPlan) -> Tuple[Optional[Account], Optional[Account]]:
        """Resolve both sides, then re-read them under lock in id order."""
        source = plan.debit.resolve(uow.accounts) if plan.debit is not None else None
        destination = plan.credit.resolve(uow.accounts) if plan.credit is not None else None

        locked = uow.accounts.lock_accounts(
            account.id for account in (source, destination) if account is not None
        )
        return (
            locked[source.id] if source is not None else None,
            locked[destination.id] if destination is not None else None,
        )

    @staticmethod
    def _validate(plan: BalanceMutationPlan, source: Optional[Account], destination: Optional[Account]) -> None:
        for account in (source, destination):
            if account is not None and not account.is_active:
                raise AccountInactive(account.account_number, account.status.value)

        if source is not None and source.balance < plan.amount:
            raise InsufficientFunds(source.account_number, source.balance, plan.amount)

        # Self-transfers leave the balance unchanged
        if destination is not None and destination is not source:
            if destination.balance + plan.amount > MAX_AMOUNT:
                raise InvalidAmount(
                    plan.amount, f"Balance of account {destination.account_number} would exceed {MAX_AMOUNT}"
                )

    def _reject(self, plan: BalanceMutationPlan, touched: Tuple[Optional[int], Optional[int]], error: LedgerError) -> None:
        logger.warning(
            "%s rejected: %s", plan.transaction_type.value.capitalize(), error.message,
            extra={"code": error.code, "amount": str(plan.amount)},
        )
        if not self.record_failures:
            return

        from_account_id, to_account_id = touched
        # Separate unit of work: the audit record must not carry any balance change
        try:
            with UnitOfWork(self.session_factory) as audit:
                failed = Transaction(
                    transaction_number=generate_transaction_number(),
                    transaction_type=plan.transaction_type,
                    amount=plan.amount,
                    description=plan.description,
                    from_account_id=from_account_id,
                    to_account_id=to_account_id,
                )
                failed.fail(error.code)
                audit.transactions.append(failed)
                audit.commit()
        except LedgerError:
            logger.error("Could not record failed %s", plan.transaction_type.value, exc_info=True)
