"""Fixed-payment amortization schedules for loans.

Everything here is pure: no database access, no clock. ``LoanService`` turns
the rows into ``LoanInstallment`` records when a loan is created, and the CLI
uses the same functions for previews.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from ..errors import ValidationError
from ..models.enums import PaymentFrequency
from ..money import ZERO, MoneyInput, positive_amount, round_currency, to_decimal

PERIODS_PER_YEAR: dict[PaymentFrequency, int] = {
    PaymentFrequency.WEEKLY: 52,
    PaymentFrequency.BIWEEKLY: 26,
    PaymentFrequency.MONTHLY: 12,
    PaymentFrequency.QUARTERLY: 4,
    PaymentFrequency.YEARLY: 1,
}

_DAYS_PER_PERIOD = {PaymentFrequency.WEEKLY: 7, PaymentFrequency.BIWEEKLY: 14}
_MONTHS_PER_PERIOD = {
    PaymentFrequency.MONTHLY: 1,
    PaymentFrequency.QUARTERLY: 3,
    PaymentFrequency.YEARLY: 12,
}


@dataclass(slots=True)
class ScheduledInstallment:
    """A single computed row of an amortization schedule."""

    sequence: int
    due_date: date
    principal_amount: Decimal
    interest_amount: Decimal
    fees_amount: Decimal = ZERO

    @property
    def total_amount(self) -> Decimal:
        return self.principal_amount + self.interest_amount + self.fees_amount


@dataclass(slots=True)
class ScheduleSummary:
    """Totals for a generated schedule."""

    installment_count: int
    payment: Decimal
    total_principal: Decimal
    total_interest: Decimal
    total_paid: Decimal
    last_due_date: Optional[date]


def periodic_rate(annual_rate: MoneyInput, frequency: PaymentFrequency) -> Decimal:
    """Divide an annual rate down to the rate charged per payment period."""

    return to_decimal(annual_rate, field="interest_rate") / PERIODS_PER_YEAR[frequency]


def fixed_payment(principal: Decimal, rate: Decimal, installment_count: int) -> Decimal:
    """Return the unrounded level payment that retires *principal* in *installment_count* periods."""

    if installment_count <= 0:
        raise ValidationError("installment_count must be positive to compute a payment")
    if rate == ZERO:
        return principal / installment_count
    growth = (1 + rate) ** installment_count
    return principal * (rate * growth) / (growth - 1)


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    # Clamp e.g. Jan 31 + 1 month to the last day of February.
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def advance_due_date(start: date, frequency: PaymentFrequency, periods: int = 1) -> date:
    """Return the date *periods* payment periods after *start*.

    Calendar-based frequencies are always offset from *start* rather than from
    the previous due date, so a clamped month end does not drift.
    """

    if frequency in _DAYS_PER_PERIOD:
        return start + timedelta(days=_DAYS_PER_PERIOD[frequency] * periods)
    return _add_months(start, _MONTHS_PER_PERIOD[frequency] * periods)


def generate_schedule(
    *,
    principal: MoneyInput,
    annual_rate: MoneyInput,
    installment_count: int,
    start_date: date,
    frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
) -> list[ScheduledInstallment]:
    """Generate a fixed-payment amortization schedule.

    Every amount is rounded to cents as it is computed, so the principal
    column sums to the loan principal only within ``installment_count`` cents.
    The first installment falls due one period after ``start_date``. A
    non-positive ``installment_count`` yields an empty schedule.
    """

    if installment_count is None or installment_count <= 0:
        return []

    amount = positive_amount(principal, field="principal")
    annual = to_decimal(annual_rate, field="interest_rate")
    if annual < ZERO:
        raise ValidationError(f"interest_rate must not be negative, got {annual}")

    rate = periodic_rate(annual, frequency)
    payment = fixed_payment(amount, rate, installment_count)

    remaining = amount
    schedule: list[ScheduledInstallment] = []
    for sequence in range(1, installment_count + 1):
        interest = round_currency(remaining * rate)
        principal_part = round_currency(payment - interest)
        schedule.append(
            ScheduledInstallment(
                sequence=sequence,
                due_date=advance_due_date(start_date, frequency, sequence),
                principal_amount=principal_part,
                interest_amount=interest,
            )
        )
        remaining -= principal_part

    return schedule


def schedule_summary(schedule: Sequence[ScheduledInstallment]) -> ScheduleSummary:
    """Return payment and interest totals for *schedule*."""

    if not schedule:
        return ScheduleSummary(0, ZERO, ZERO, ZERO, ZERO, None)
    total_principal = sum((row.principal_amount for row in schedule), ZERO)
    total_interest = sum((row.interest_amount for row in schedule), ZERO)
    return ScheduleSummary(
        installment_count=len(schedule),
        payment=schedule[0].total_amount,
        total_principal=total_principal,
        total_interest=total_interest,
        total_paid=total_principal + total_interest,
        last_due_date=schedule[-1].due_date,
    )


__all__ = [
    "PERIODS_PER_YEAR",
    "ScheduleSummary",
    "ScheduledInstallment",
    "advance_due_date",
    "fixed_payment",
    "generate_schedule",
    "periodic_rate",
    "schedule_summary",
]
