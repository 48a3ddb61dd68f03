"""Account model holding the cached balance the ledger maintains."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import Column
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from .enums import Currency
from .columns import DecimalString


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(SQLModel, table=True):
    """A bank, cash or brokerage account belonging to one owner.

    ``balance`` is a cached total: only the ledger writes it. ``opening_balance``
    is frozen at creation and lets the balance be re-derived from the
    transaction history.
    """

    __tablename__: ClassVar[str] = "account"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="owner.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=64)
    description: Optional[str] = Field(default=None, max_length=512)
    bank: Optional[str] = Field(default=None, max_length=32, index=True)
    alias: Optional[str] = Field(default=None, max_length=128)
    balance: Decimal = Field(
        default=Decimal("0"), sa_column=Column(DecimalString(), nullable=False)
    )
    opening_balance: Decimal = Field(
        default=Decimal("0"), sa_column=Column(DecimalString(), nullable=False)
    )
    currency: Currency = Field(
        default=Currency.USD,
        sa_column=Column(SAEnum(Currency, name="account_currency"), nullable=False),
    )
    commission_rate: Optional[Decimal] = Field(
        default=None, sa_column=Column(DecimalString(), nullable=True)
    )
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)
