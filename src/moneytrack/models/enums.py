"""Closed vocabularies shared by the ledger and loan models."""

from __future__ import annotations

from enum import Enum

from ..errors import ValidationError


class Currency(str, Enum):
    """Currencies an account or loan can be denominated in."""

    USD = "USD"
    ARS = "ARS"


class TransactionType(str, Enum):
    """Kinds of money movement recorded by the ledger."""

    INCOME = "INCOME"
    FIXED_EXPENSE = "FIXED_EXPENSE"
    VARIABLE_EXPENSE = "VARIABLE_EXPENSE"
    SAVINGS = "SAVINGS"
    TRANSFER = "TRANSFER"
    CREDIT_CARD_EXPENSE = "CREDIT_CARD_EXPENSE"

    @property
    def requires_distinct_accounts(self) -> bool:
        return self is TransactionType.TRANSFER

    @property
    def is_expense(self) -> bool:
        return self in EXPENSE_TYPES


EXPENSE_TYPES = frozenset(
    {
        TransactionType.FIXED_EXPENSE,
        TransactionType.VARIABLE_EXPENSE,
        TransactionType.CREDIT_CARD_EXPENSE,
    }
)


class PaymentFrequency(str, Enum):
    """How often a loan installment falls due."""

    WEEKLY = "Weekly"
    BIWEEKLY = "Biweekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    YEARLY = "Yearly"


class LoanStatus(str, Enum):
    """Lifecycle state of a loan.

    ``ACTIVE`` may move to ``CLOSED`` or ``DEFAULTED``; both are terminal.
    """

    ACTIVE = "Active"
    CLOSED = "Closed"
    DEFAULTED = "Defaulted"

    @property
    def is_terminal(self) -> bool:
        return self is not LoanStatus.ACTIVE


def coerce_enum(enum_cls, value, *, field: str):
    """Return *value* as a member of *enum_cls* or raise ``ValidationError``."""

    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}; got {value!r}") from exc
