"""Transaction ledger: the only writer of account balances.

Balances are cached totals. Every write therefore pairs the ledger row change
with an explicit balance adjustment inside one database transaction:

* create: insert, then debit ``from`` and credit ``to``
* update: revert the old effect, apply the field changes, reapply the new effect
* delete: revert the effect, then remove the row

A same-account posting (``from_account_id == to_account_id``) has no balance
effect at all.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from sqlmodel import Session

from ..domain.repositories import AccountRepository, CategoryRepository, TransactionRepository
from ..errors import NotFoundError, ValidationError
from ..infra.database import SessionFactory, unit_of_work
from ..logging_config import get_logger
from ..models.account import Account
from ..models.category import Category
from ..models.enums import TransactionType, coerce_enum
from ..models.transaction import Transaction
from ..money import ZERO, MoneyInput, positive_amount

logger = get_logger("services.ledger")

UPDATABLE_FIELDS = frozenset(
    {
        "from_account_id",
        "to_account_id",
        "amount",
        "transaction_type",
        "occurred_on",
        "category_id",
        "asset_id",
        "description",
    }
)

# Columns that are NOT NULL in the transaction table.
REQUIRED_FIELDS = ("from_account_id", "to_account_id", "amount", "transaction_type", "occurred_on")


@dataclass(slots=True)
class BalanceDrift:
    """An account whose cached balance disagrees with its transaction history."""

    account_id: int
    cached: Decimal
    derived: Decimal

    @property
    def difference(self) -> Decimal:
        return self.cached - self.derived


def _check_pairing(from_account_id: int, to_account_id: int, txn_type: TransactionType) -> None:
    if txn_type.requires_distinct_accounts and from_account_id == to_account_id:
        raise ValidationError("A transfer must move money between two different accounts")


class LedgerService:
    """Create, edit and delete transactions while keeping balances in sync."""

    def __init__(
        self,
        *,
        session_factory: SessionFactory,
        account_repo: AccountRepository,
        transaction_repo: TransactionRepository,
        category_repo: CategoryRepository,
        lock: Optional[threading.RLock] = None,
    ):
        self.session_factory = session_factory
        self.account_repo = account_repo
        self.transaction_repo = transaction_repo
        self.category_repo = category_repo
        self._lock = lock or threading.RLock()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_transaction(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: MoneyInput,
        transaction_type: TransactionType | str,
        *,
        occurred_on: Optional[date] = None,
        category_id: Optional[int] = None,
        asset_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Transaction:
        """Record a transaction and apply its balance effect.

        Raises:
            ValidationError: non-positive/non-finite amount, or a transfer
                between the same account.
            NotFoundError: either account (or the category) does not exist.
            StorageError: the database failed; nothing was written.
        """
        value = positive_amount(amount)
        txn_type = coerce_enum(TransactionType, transaction_type, field="transaction_type")
        _check_pairing(from_account_id, to_account_id, txn_type)

        with unit_of_work(self.session_factory, lock=self._lock, operation="create_transaction") as session:
            self._require_account(session, from_account_id)
            self._require_account(session, to_account_id)
            self._require_category(session, category_id)

            txn = self.transaction_repo.create(
                Transaction(
                    from_account_id=from_account_id,
                    to_account_id=to_account_id,
                    amount=value,
                    transaction_type=txn_type,
                    occurred_on=occurred_on or date.today(),
                    category_id=category_id,
                    asset_id=asset_id,
                    description=description,
                ),
                session=session,
            )
            self._apply_effect(session, from_account_id, to_account_id, value, sign=1)

        logger.info(
            "CREATE_TRANSACTION",
            extra={
                "transaction_id": txn.id,
                "from_account_id": from_account_id,
                "to_account_id": to_account_id,
                "amount": str(value),
                "transaction_type": txn_type.value,
                "category_id": category_id,
            },
        )
        return txn

    def update_transaction(self, transaction_id: int, **changes: Any) -> Transaction:
        """Edit a transaction, undoing its old balance effect and applying the new one.

        Only the keys in ``UPDATABLE_FIELDS`` may be changed. The merged state is
        validated in full before anything is written.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update transaction fields: {', '.join(sorted(unknown))}")
        missing = [field for field in REQUIRED_FIELDS if field in changes and changes[field] is None]
        if missing:
            raise ValidationError(f"Transaction fields cannot be empty: {', '.join(missing)}")

        with unit_of_work(self.session_factory, lock=self._lock, operation="update_transaction") as session:
            txn = self.transaction_repo.get_by_id(transaction_id, session=session)
            if txn is None:
                raise NotFoundError("Transaction", transaction_id)

            old_from, old_to, old_amount = txn.from_account_id, txn.to_account_id, txn.amount

            if "amount" in changes:
                changes["amount"] = positive_amount(changes["amount"])
            if "transaction_type" in changes:
                changes["transaction_type"] = coerce_enum(
                    TransactionType, changes["transaction_type"], field="transaction_type"
                )
            new_from = changes.get("from_account_id", old_from)
            new_to = changes.get("to_account_id", old_to)
            new_amount = changes.get("amount", old_amount)
            _check_pairing(new_from, new_to, changes.get("transaction_type", txn.transaction_type))
            self._require_account(session, new_from)
            self._require_account(session, new_to)
            if "category_id" in changes:
                self._require_category(session, changes["category_id"])

            self._apply_effect(session, old_from, old_to, old_amount, sign=-1)
            for field, value in changes.items():
                setattr(txn, field, value)
            txn = self.transaction_repo.update(txn, session=session)
            self._apply_effect(session, new_from, new_to, new_amount, sign=1)

        logger.info(
            "UPDATE_TRANSACTION",
            extra={
                "transaction_id": transaction_id,
                "old_amount": str(old_amount),
                "new_amount": str(new_amount),
                "fields": sorted(changes),
            },
        )
        return txn

    def delete_transaction(self, transaction_id: int) -> bool:
        """Remove a transaction and revert its balance effect.

        Returns False if the transaction does not exist.
        """
        with unit_of_work(self.session_factory, lock=self._lock, operation="delete_transaction") as session:
            txn = self.transaction_repo.get_by_id(transaction_id, session=session)
            if txn is None:
                return False
            self._apply_effect(
                session, txn.from_account_id, txn.to_account_id, txn.amount, sign=-1
            )
            self.transaction_repo.delete(transaction_id, session=session)

        logger.info(
            "DELETE_TRANSACTION",
            extra={
                "transaction_id": transaction_id,
                "from_account_id": txn.from_account_id,
                "to_account_id": txn.to_account_id,
                "amount": str(txn.amount),
            },
        )
        return True

    def create_category(
        self,
        name: str,
        *,
        description: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Category:
        """Register a category that transactions can be filed under."""
        if not name or not name.strip():
            raise ValidationError("Category name is required")
        with unit_of_work(self.session_factory, lock=self._lock, operation="create_category") as session:
            return self.category_repo.create(
                Category(name=name.strip(), description=description, color=color, icon=icon),
                session=session,
            )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        return self.transaction_repo.get_by_id(transaction_id)

    def list_transactions(self, *, limit: int = 100, offset: int = 0) -> list[Transaction]:
        return self.transaction_repo.list_all(limit=limit, offset=offset)

    def list_by_account(self, account_id: int) -> list[Transaction]:
        return self.transaction_repo.filter_by_account(account_id)

    def list_by_from_account(self, account_id: int) -> list[Transaction]:
        return self.transaction_repo.filter_by_from_account(account_id)

    def list_by_to_account(self, account_id: int) -> list[Transaction]:
        return self.transaction_repo.filter_by_to_account(account_id)

    def list_by_date_range(self, start_date: date, end_date: date) -> list[Transaction]:
        return self.transaction_repo.filter_by_date_range(start_date, end_date)

    def list_by_category(self, category_id: int) -> list[Transaction]:
        return self.transaction_repo.filter_by_category(category_id)

    def list_by_asset(self, asset_id: int) -> list[Transaction]:
        return self.transaction_repo.filter_by_asset(asset_id)

    def list_by_type(self, transaction_type: TransactionType | str) -> list[Transaction]:
        txn_type = coerce_enum(TransactionType, transaction_type, field="transaction_type")
        return self.transaction_repo.filter_by_type(txn_type)

    def search(self, **filters: Any) -> list[Transaction]:
        if filters.get("transaction_type") is not None:
            filters["transaction_type"] = coerce_enum(
                TransactionType, filters["transaction_type"], field="transaction_type"
            )
        return self.transaction_repo.search(**filters)

    def list_categories(self) -> list[Category]:
        return self.category_repo.list_all()

    def get_total_amount_for_period(self, start_date: date, end_date: date) -> Decimal:
        """Sum every transaction amount dated within [start_date, end_date]."""
        transactions = self.transaction_repo.filter_by_date_range(start_date, end_date)
        return sum((t.amount for t in transactions), ZERO)

    @staticmethod
    def summarize(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
        """Compute income, expenses, and net totals from the provided transactions.

        Transfers and savings move money between the user's own accounts and
        are left out of both sides.
        """
        income = ZERO
        expenses = ZERO
        for txn in transactions:
            if txn.transaction_type is TransactionType.INCOME:
                income += txn.amount
            elif txn.transaction_type.is_expense:
                expenses += txn.amount
        return {"income": income, "expenses": expenses, "net": income - expenses}

    # ------------------------------------------------------------------
    # Balance audit
    # ------------------------------------------------------------------

    def derive_balance(self, account_id: int) -> Decimal:
        """Recompute an account balance from its opening balance and history."""
        with self.session_factory() as session:
            account = self._require_account(session, account_id)
            return self._derive(session, account)

    def find_balance_drift(self) -> list[BalanceDrift]:
        """List accounts whose cached balance no longer matches their history."""
        drifts: list[BalanceDrift] = []
        with self.session_factory() as session:
            for account in self.account_repo.list_all(session=session):
                derived = self._derive(session, account)
                if derived != account.balance:
                    drifts.append(
                        BalanceDrift(account_id=account.id, cached=account.balance, derived=derived)
                    )
        if drifts:
            logger.warning("Balance drift detected", extra={"accounts": [d.account_id for d in drifts]})
        return drifts

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _derive(self, session: Session, account: Account) -> Decimal:
        balance = account.opening_balance
        for txn in self.transaction_repo.filter_by_account(account.id, session=session):
            if txn.is_same_account:
                continue
            if txn.to_account_id == account.id:
                balance += txn.amount
            else:
                balance -= txn.amount
        return balance

    def _require_account(self, session: Session, account_id: int) -> Account:
        account = self.account_repo.get_by_id(account_id, session=session)
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    def _require_category(self, session: Session, category_id: Optional[int]) -> None:
        if category_id is None:
            return
        if self.category_repo.get_by_id(category_id, session=session) is None:
            raise NotFoundError("Category", category_id)

    def _apply_effect(
        self,
        session: Session,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        *,
        sign: int,
    ) -> None:
        """Debit ``from`` and credit ``to`` by ``sign * amount``."""
        if from_account_id == to_account_id:
            return
        delta = amount * sign
        source = self._require_account(session, from_account_id)
        self.account_repo.update_balance(from_account_id, source.balance - delta, session=session)
        target = self._require_account(session, to_account_id)
        self.account_repo.update_balance(to_account_id, target.balance + delta, session=session)
