"""Typed ledger errors.

Every failure the ledger can report is a subclass of :class:`LedgerError`.
The HTTP layer maps ``status_code`` and ``code`` onto responses; nothing
below the API ever raises ``HTTPException`` or leaks a raw SQLAlchemy error.
"""

from decimal import Decimal
from typing import Optional


class LedgerError(Exception):
    """Base class for ledger errors."""

    status_code = 400
    code = "ledger_error"
    transient = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OwnerNotFound(LedgerError):
    status_code = 404
    code = "owner_not_found"

    def __init__(self, owner_id: int):
        super().__init__(f"Owner {owner_id} not found")
        self.owner_id = owner_id


class DuplicateOwner(LedgerError):
    status_code = 409
    code = "duplicate_owner"

    def __init__(self, email: str):
        super().__init__(f"Owner with email '{email}' already exists")
        self.email = email


class AccountNotFound(LedgerError):
    status_code = 404
    code = "account_not_found"

    def __init__(self, account_id: int):
        super().__init__(f"Account {account_id} not found")
        self.account_id = account_id


class DestinationNotFound(LedgerError):
    status_code = 404
    code = "destination_not_found"

    def __init__(self, account_number: str):
        super().__init__(f"Destination account {account_number} not found")
        self.account_number = account_number


class TransactionNotFound(LedgerError):
    status_code = 404
    code = "transaction_not_found"

    def __init__(self, transaction_number: str):
        super().__init__(f"Transaction {transaction_number} not found")
        self.transaction_number = transaction_number


class Unauthorized(LedgerError):
    """Caller does not own the account it is acting on."""

    status_code = 403
    code = "unauthorized"

    def __init__(self, account_id: int, owner_id: int):
        super().__init__(f"Account {account_id} does not belong to owner {owner_id}")
        self.account_id = account_id
        self.owner_id = owner_id


class InvalidAmount(LedgerError):
    code = "invalid_amount"

    def __init__(self, amount, reason: str = "Amount must be greater than zero"):
        super().__init__(f"{reason}: {amount}")
        self.amount = amount


class InvalidCurrency(LedgerError):
    code = "invalid_currency"

    def __init__(self, currency):
        super().__init__(f"Currency must be a 3-letter code: {currency!r}")
        self.currency = currency


class InvalidDateRange(LedgerError):
    code = "invalid_date_range"

    def __init__(self, start, end):
        super().__init__(f"Start date {start} is after end date {end}")
        self.start = start
        self.end = end


class InvalidStatusTransition(LedgerError):
    status_code = 409
    code = "invalid_status_transition"


class AccountInactive(LedgerError):
    """Account is frozen or closed and cannot take balance changes."""

    status_code = 409
    code = "account_inactive"

    def __init__(self, account_number: str, status: str):
        super().__init__(f"Account {account_number} is {status}")
        self.account_number = account_number
        self.status = status


class InsufficientFunds(LedgerError):
    code = "insufficient_funds"

    def __init__(self, account_number: str, balance: Decimal, required: Decimal):
        super().__init__(
            f"Insufficient funds in account {account_number}. "
            f"Balance: {balance}, Required: {required}"
        )
        self.account_number = account_number
        self.balance = balance
        self.required = required


class ConcurrencyConflict(LedgerError):
    """Accounts changed underneath the operation; safe to retry."""

    status_code = 409
    code = "concurrency_conflict"
    transient = True

    def __init__(self, message: str = "Account was modified by a concurrent operation", attempts: int = 1):
        super().__init__(message)
        self.attempts = attempts


class StorageFailure(LedgerError):
    code = "storage_failure"

    def __init__(self, message: str, transient: bool = False, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.transient = transient
        self.cause = cause

    @property
    def status_code(self) -> int:
        return 503 if self.transient else 500
