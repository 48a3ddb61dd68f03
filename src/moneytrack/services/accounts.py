"""Account and owner management outside the ledger's balance flow."""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Any, Optional

from ..domain.repositories import AccountRepository, OwnerRepository
from ..errors import NotFoundError, ValidationError
from ..infra.database import SessionFactory, unit_of_work
from ..logging_config import get_logger
from ..models.account import Account
from ..models.enums import Currency, coerce_enum
from ..models.owner import Owner
from ..money import ZERO, MoneyInput, to_decimal

logger = get_logger("services.accounts")

# balance belongs to the ledger; opening_balance is frozen at creation.
UPDATABLE_ACCOUNT_FIELDS = frozenset(
    {"name", "description", "bank", "alias", "currency", "commission_rate", "owner_id"}
)


class AccountService:
    """CRUD and reporting over accounts and their owners."""

    def __init__(
        self,
        *,
        session_factory: SessionFactory,
        account_repo: AccountRepository,
        owner_repo: OwnerRepository,
        lock: Optional[threading.RLock] = None,
    ):
        self.session_factory = session_factory
        self.account_repo = account_repo
        self.owner_repo = owner_repo
        self._lock = lock or threading.RLock()

    def create_owner(self, name: str, *, description: Optional[str] = None) -> Owner:
        if not name or not name.strip():
            raise ValidationError("Owner name is required")
        with unit_of_work(self.session_factory, lock=self._lock, operation="create_owner") as session:
            return self.owner_repo.create(
                Owner(name=name.strip(), description=description), session=session
            )

    def list_owners(self) -> list[Owner]:
        return self.owner_repo.list_all()

    def create_account(
        self,
        name: str,
        owner_id: int,
        *,
        description: Optional[str] = None,
        bank: Optional[str] = None,
        alias: Optional[str] = None,
        balance: MoneyInput = ZERO,
        currency: Currency | str = Currency.USD,
        commission_rate: Optional[MoneyInput] = None,
    ) -> Account:
        """Open an account with an initial balance."""
        if not name or not name.strip():
            raise ValidationError("Account name is required")
        opening = to_decimal(balance, field="balance")
        account_currency = coerce_enum(Currency, currency, field="currency")
        commission = (
            None if commission_rate is None else to_decimal(commission_rate, field="commission_rate")
        )

        with unit_of_work(self.session_factory, lock=self._lock, operation="create_account") as session:
            if self.owner_repo.get_by_id(owner_id, session=session) is None:
                raise NotFoundError("Owner", owner_id)
            account = self.account_repo.create(
                Account(
                    owner_id=owner_id,
                    name=name.strip(),
                    description=description,
                    bank=bank,
                    alias=alias,
                    balance=opening,
                    opening_balance=opening,
                    currency=account_currency,
                    commission_rate=commission,
                ),
                session=session,
            )

        logger.info(
            "CREATE_ACCOUNT",
            extra={
                "account_id": account.id,
                "owner_id": owner_id,
                "balance": str(opening),
                "currency": account_currency.value,
            },
        )
        return account

    def update_account(self, account_id: int, **changes: Any) -> Account:
        """Edit descriptive account fields. Balances can only change through the ledger."""
        unknown = set(changes) - UPDATABLE_ACCOUNT_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update account fields: {', '.join(sorted(unknown))}")
        if "currency" in changes:
            changes["currency"] = coerce_enum(Currency, changes["currency"], field="currency")
        if changes.get("commission_rate") is not None:
            changes["commission_rate"] = to_decimal(changes["commission_rate"], field="commission_rate")

        with unit_of_work(self.session_factory, lock=self._lock, operation="update_account") as session:
            account = self.account_repo.get_by_id(account_id, session=session)
            if account is None:
                raise NotFoundError("Account", account_id)
            if "owner_id" in changes and self.owner_repo.get_by_id(changes["owner_id"], session=session) is None:
                raise NotFoundError("Owner", changes["owner_id"])
            for field, value in changes.items():
                setattr(account, field, value)
            account = self.account_repo.update(account, session=session)

        logger.info("UPDATE_ACCOUNT", extra={"account_id": account_id, "fields": sorted(changes)})
        return account

    def delete_account(self, account_id: int) -> bool:
        """Delete an account that nothing references any more.

        Returns False if the account does not exist.
        """
        with unit_of_work(self.session_factory, lock=self._lock, operation="delete_account") as session:
            if self.account_repo.get_by_id(account_id, session=session) is None:
                return False
            if self.account_repo.has_references(account_id, session=session):
                raise ValidationError(
                    f"Account {account_id} still has transactions or loans and cannot be deleted"
                )
            self.account_repo.delete(account_id, session=session)

        logger.info("DELETE_ACCOUNT", extra={"account_id": account_id})
        return True

    def get_account(self, account_id: int) -> Optional[Account]:
        return self.account_repo.get_by_id(account_id)

    def list_accounts(self) -> list[Account]:
        return self.account_repo.list_all()

    def list_by_owner(self, owner_id: int) -> list[Account]:
        return self.account_repo.list_by_owner(owner_id)

    def list_by_bank(self, bank: str) -> list[Account]:
        return self.account_repo.list_by_bank(bank)

    def list_by_currency(self, currency: Currency | str) -> list[Account]:
        return self.account_repo.list_by_currency(coerce_enum(Currency, currency, field="currency"))

    def get_total_balance(self, currency: Currency | str) -> Decimal:
        """Sum balances of the accounts held in one currency. No conversion is attempted."""
        return sum((a.balance for a in self.list_by_currency(currency)), ZERO)
