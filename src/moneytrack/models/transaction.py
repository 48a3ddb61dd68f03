"""SQLModel definition for ledger transactions."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import Column
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from .enums import TransactionType
from .columns import DecimalString


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Transaction(SQLModel, table=True):
    """A money movement from one account to another.

    When ``from_account_id == to_account_id`` the row is a same-account posting
    (income or expense against a single account) and carries no balance effect.
    """

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    from_account_id: int = Field(foreign_key="account.id", nullable=False, index=True)
    to_account_id: int = Field(foreign_key="account.id", nullable=False, index=True)
    amount: Decimal = Field(sa_column=Column(DecimalString(), nullable=False))
    occurred_on: date = Field(default_factory=date.today, nullable=False, index=True)
    transaction_type: TransactionType = Field(
        default=TransactionType.TRANSFER,
        sa_column=Column(
            SAEnum(TransactionType, name="transaction_type"), nullable=False, index=True
        ),
    )
    category_id: Optional[int] = Field(default=None, foreign_key="category.id", index=True)
    # Assets (tickers, quotes) live outside the ledger, so no foreign key here.
    asset_id: Optional[int] = Field(default=None, index=True)
    description: Optional[str] = Field(default=None, max_length=255)
    audit_date: datetime = Field(default_factory=_utcnow, nullable=False)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

    @property
    def is_same_account(self) -> bool:
        return self.from_account_id == self.to_account_id
