"""Amortization schedule tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from moneytrack.errors import ValidationError
from moneytrack.models import PaymentFrequency
from moneytrack.services.amortization import (
    advance_due_date,
    fixed_payment,
    generate_schedule,
    periodic_rate,
    schedule_summary,
)


def _schedule(**overrides):
    params = dict(
        principal="1200",
        annual_rate="0.12",
        installment_count=12,
        start_date=date(2025, 1, 1),
        frequency=PaymentFrequency.MONTHLY,
    )
    params.update(overrides)
    return generate_schedule(**params)


def test_first_installment_of_standard_loan():
    """1200 at 12% over 12 months: 1% per month, level payment 106.62."""
    schedule = _schedule()

    assert len(schedule) == 12
    first = schedule[0]
    assert first.sequence == 1
    assert first.due_date == date(2025, 2, 1)
    assert first.interest_amount == Decimal("12.00")
    assert first.principal_amount == Decimal("94.62")
    assert first.total_amount == Decimal("106.62")


def test_payment_is_level_across_the_schedule():
    schedule = _schedule()
    totals = {row.total_amount for row in schedule}
    # Rounding each column separately can move a cent between them.
    assert max(totals) - min(totals) <= Decimal("0.01")


def test_interest_declines_and_principal_grows():
    schedule = _schedule()
    interest = [row.interest_amount for row in schedule]
    principal = [row.principal_amount for row in schedule]
    assert interest == sorted(interest, reverse=True)
    assert principal == sorted(principal)


@pytest.mark.parametrize(
    "principal, rate, count, frequency",
    [
        ("1200", "0.12", 12, PaymentFrequency.MONTHLY),
        ("50000", "0.35", 36, PaymentFrequency.MONTHLY),
        ("999.99", "0.07", 10, PaymentFrequency.QUARTERLY),
        ("300", "0.2", 26, PaymentFrequency.BIWEEKLY),
        ("10", "0.5", 3, PaymentFrequency.YEARLY),
    ],
)
def test_principal_sums_back_within_one_cent_per_installment(principal, rate, count, frequency):
    schedule = _schedule(
        principal=principal, annual_rate=rate, installment_count=count, frequency=frequency
    )
    total_principal = sum(row.principal_amount for row in schedule)
    assert abs(total_principal - Decimal(principal)) <= Decimal("0.01") * count


@pytest.mark.parametrize("frequency", list(PaymentFrequency))
def test_due_dates_strictly_increase(frequency):
    schedule = _schedule(frequency=frequency, installment_count=8)
    dates = [row.due_date for row in schedule]
    assert all(earlier < later for earlier, later in zip(dates, dates[1:]))
    assert dates[0] == advance_due_date(date(2025, 1, 1), frequency)


def test_sequences_are_one_based_and_contiguous():
    assert [row.sequence for row in _schedule(installment_count=5)] == [1, 2, 3, 4, 5]


def test_zero_rate_splits_principal_evenly():
    schedule = _schedule(annual_rate="0", installment_count=4)
    assert [row.principal_amount for row in schedule] == [Decimal("300.00")] * 4
    assert all(row.interest_amount == Decimal("0.00") for row in schedule)


@pytest.mark.parametrize("count", [0, -3, None])
def test_no_installments_means_empty_schedule(count):
    assert _schedule(installment_count=count) == []


def test_negative_rate_is_rejected():
    with pytest.raises(ValidationError):
        _schedule(annual_rate="-0.05")


def test_non_positive_principal_is_rejected():
    with pytest.raises(ValidationError):
        _schedule(principal="0")


def test_month_end_start_is_clamped_without_drift():
    schedule = _schedule(start_date=date(2025, 1, 31), installment_count=4)
    assert [row.due_date for row in schedule] == [
        date(2025, 2, 28),
        date(2025, 3, 31),
        date(2025, 4, 30),
        date(2025, 5, 31),
    ]


def test_leap_year_february_is_clamped_to_29th():
    assert advance_due_date(date(2024, 1, 30), PaymentFrequency.MONTHLY) == date(2024, 2, 29)


@pytest.mark.parametrize(
    "frequency, periods, expected",
    [
        (PaymentFrequency.WEEKLY, 2, date(2025, 1, 15)),
        (PaymentFrequency.BIWEEKLY, 1, date(2025, 1, 15)),
        (PaymentFrequency.QUARTERLY, 2, date(2025, 7, 1)),
        (PaymentFrequency.YEARLY, 1, date(2026, 1, 1)),
    ],
)
def test_advance_due_date(frequency, periods, expected):
    assert advance_due_date(date(2025, 1, 1), frequency, periods) == expected


def test_periodic_rate_divides_by_periods_per_year():
    assert periodic_rate("0.12", PaymentFrequency.MONTHLY) == Decimal("0.01")
    assert periodic_rate("0.52", PaymentFrequency.WEEKLY) == Decimal("0.01")


def test_fixed_payment_requires_installments():
    with pytest.raises(ValidationError):
        fixed_payment(Decimal("100"), Decimal("0.01"), 0)


def test_schedule_summary_totals():
    schedule = _schedule()
    summary = schedule_summary(schedule)

    assert summary.installment_count == 12
    assert summary.payment == Decimal("106.62")
    assert summary.total_paid == summary.total_principal + summary.total_interest
    assert summary.total_interest == sum(row.interest_amount for row in schedule)
    assert summary.last_due_date == date(2026, 1, 1)


def test_schedule_summary_of_empty_schedule():
    summary = schedule_summary([])
    assert summary.installment_count == 0
    assert summary.total_paid == Decimal("0")
    assert summary.last_due_date is None
