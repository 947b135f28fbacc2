"""
Ledger Store: owners and accounts.

Identity and ownership only. Balances are read here but every balance
change goes through the transfer engine.
"""

import logging
import re
import secrets
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ledger_service.core.config import settings
from ledger_service.core.errors import (
    AccountNotFound,
    DestinationNotFound,
    DuplicateOwner,
    InvalidCurrency,
    InvalidStatusTransition,
    OwnerNotFound,
    Unauthorized,
)
from ledger_service.core.money import to_amount
from ledger_service.models.account import Account, AccountStatus, AccountType
from ledger_service.models.base import utcnow
from ledger_service.models.owner import Owner

logger = logging.getLogger(__name__)

ACCOUNT_NUMBER_DIGITS = 10
_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


class LedgerStore:
    """Account and owner repository bound to one session."""

    def __init__(self, session: Session):
        self.session = session

    # Owner operations
    def create_owner(self, name: str, email: str) -> Owner:
        existing = self.session.query(Owner).filter(Owner.email == email).first()
        if existing:
            raise DuplicateOwner(email)

        owner = Owner(name=name, email=email)
        self.session.add(owner)
        self.session.flush()
        logger.info("Owner created", extra={"owner_id": owner.id})
        return owner

    def get_owner(self, owner_id: int) -> Owner:
        owner = self.session.get(Owner, owner_id)
        if owner is None:
            raise OwnerNotFound(owner_id)
        return owner

    # Account operations
    def create_account(
        self,
        owner_id: int,
        account_type: AccountType = AccountType.CHECKING,
        currency: Optional[str] = None,
        initial_deposit=Decimal("0.00"),
    ) -> Account:
        """
        Open an active account with a freshly generated account number.

        Raises:
            OwnerNotFound: If the owner does not exist
            InvalidAmount: If the initial deposit is negative
            InvalidCurrency: If currency is not a 3-letter code
        """
        self.get_owner(owner_id)

        balance = to_amount(initial_deposit, allow_zero=True)
        currency = (currency or settings.DEFAULT_CURRENCY).upper()
        if not _CURRENCY_RE.match(currency):
            raise InvalidCurrency(currency)

        account = Account(
            account_number=self._generate_account_number(),
            owner_id=owner_id,
            account_type=account_type,
            currency=currency,
            balance=balance,
            status=AccountStatus.ACTIVE,
        )
        self.session.add(account)
        self.session.flush()

        logger.info(
            "Account created",
            extra={"account_id": account.id, "account_number": account.account_number, "owner_id": owner_id},
        )
        return account

    def get_account(self, account_id: int, owner_id: int) -> Account:
        """
        Get an account the caller owns.

        Raises:
            AccountNotFound: If no account has this id
            Unauthorized: If the account belongs to another owner
        """
        account = self.session.get(Account, account_id)
        if account is None:
            raise AccountNotFound(account_id)
        if account.owner_id != owner_id:
            raise Unauthorized(account_id, owner_id)
        return account

    def get_account_by_number(self, account_number: str) -> Account:
        """Resolve any owner's account by its external number."""
        account = self.session.query(Account).filter(
            Account.account_number == account_number
        ).first()
        if account is None:
            raise DestinationNotFound(account_number)
        return account

    def list_accounts(self, owner_id: int) -> List[Account]:
        return self.session.query(Account).filter(
            Account.owner_id == owner_id
        ).order_by(Account.id).all()

    def lock_accounts(self, account_ids: Iterable[int]) -> Dict[int, Account]:
        """
        Re-read accounts with row-level locks (SELECT FOR UPDATE).

        Locks are taken in ascending id order so two operations touching
        the same pair of accounts cannot deadlock. Rows are refreshed from
        the database, replacing whatever the session already held.
        """
        locked_accounts = {}
        for account_id in sorted(set(account_ids)):
            account = self.session.query(Account).filter(
                Account.id == account_id
            ).populate_existing().with_for_update().first()

            if account is None:
                raise AccountNotFound(account_id)
            locked_accounts[account_id] = account

        return locked_accounts

    def change_status(self, account_id: int, owner_id: int, status: AccountStatus) -> Account:
        """
        Freeze, unfreeze or close an account.

        Closing needs a zero balance and is final. Changes are version
        checked like balance updates, so the caller's commit may raise
        ``ConcurrencyConflict``.
        """
        self.get_account(account_id, owner_id)
        account = self.lock_accounts([account_id])[account_id]

        if account.status == status:
            return account
        if account.status == AccountStatus.CLOSED:
            raise InvalidStatusTransition(f"Account {account.account_number} is closed and cannot be reopened")
        if status == AccountStatus.CLOSED:
            if account.balance != 0:
                raise InvalidStatusTransition(
                    f"Cannot close account {account.account_number} with non-zero balance"
                )
            account.closed_at = utcnow()

        previous = account.status
        account.status = status
        logger.info(
            "Account status changed",
            extra={
                "account_id": account.id,
                "from_status": previous.value,
                "to_status": status.value,
            },
        )
        return account

    def _generate_account_number(self) -> str:
        while True:
            candidate = str(secrets.randbelow(9 * 10 ** (ACCOUNT_NUMBER_DIGITS - 1)) + 10 ** (ACCOUNT_NUMBER_DIGITS - 1))
            taken = self.session.query(Account.id).filter(
                Account.account_number == candidate
            ).first()
            if taken is None:
                return candidate
