"""Loan and installment entities."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import ClassVar, Optional

from sqlalchemy import Column, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel

from .enums import Currency, LoanStatus, PaymentFrequency
from .columns import DecimalString


class Loan(SQLModel, table=True):
    """Money borrowed by an account, repaid through scheduled installments."""

    __tablename__: ClassVar[str] = "loan"

    id: Optional[int] = Field(default=None, primary_key=True)
    borrower_account_id: int = Field(foreign_key="account.id", nullable=False, index=True)
    lender_account_id: Optional[int] = Field(default=None, foreign_key="account.id")
    principal: Decimal = Field(sa_column=Column(DecimalString(), nullable=False))
    currency: Currency = Field(
        default=Currency.ARS,
        sa_column=Column(SAEnum(Currency, name="loan_currency"), nullable=False),
    )
    # Annual rate as a fraction, e.g. 0.35 for 35%.
    interest_rate: Decimal = Field(
        default=Decimal("0"), sa_column=Column(DecimalString(), nullable=False)
    )
    start_date: date = Field(nullable=False)
    end_date: Optional[date] = Field(default=None)
    term_months: Optional[int] = Field(default=None)
    installment_count: Optional[int] = Field(default=None)
    payment_frequency: PaymentFrequency = Field(
        default=PaymentFrequency.MONTHLY,
        sa_column=Column(SAEnum(PaymentFrequency, name="payment_frequency"), nullable=False),
    )
    status: LoanStatus = Field(
        default=LoanStatus.ACTIVE,
        sa_column=Column(SAEnum(LoanStatus, name="loan_status"), nullable=False, index=True),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )
    notes: Optional[str] = Field(default=None, max_length=512)


class LoanInstallment(SQLModel, table=True):
    """One scheduled repayment of a loan."""

    __tablename__: ClassVar[str] = "loan_installment"
    __table_args__ = (
        UniqueConstraint("loan_id", "sequence", name="uq_loan_installment_sequence"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    loan_id: int = Field(foreign_key="loan.id", nullable=False, index=True)
    sequence: int = Field(nullable=False, ge=1)
    due_date: date = Field(nullable=False, index=True)
    principal_amount: Decimal = Field(
        default=Decimal("0"), sa_column=Column(DecimalString(), nullable=False)
    )
    interest_amount: Decimal = Field(
        default=Decimal("0"), sa_column=Column(DecimalString(), nullable=False)
    )
    fees_amount: Decimal = Field(
        default=Decimal("0"), sa_column=Column(DecimalString(), nullable=False)
    )
    total_amount: Decimal = Field(
        default=Decimal("0"), sa_column=Column(DecimalString(), nullable=False)
    )
    paid: bool = Field(default=False, nullable=False)
    paid_date: Optional[datetime] = Field(default=None)
    payment_account_id: Optional[int] = Field(default=None, foreign_key="account.id")

    def recompute_total(self) -> Decimal:
        """Set ``total_amount`` from its components and return it."""

        self.total_amount = self.principal_amount + self.interest_amount + self.fees_amount
        return self.total_amount
