"""Pytest configuration and shared fixtures for MoneyTrack tests.

Every test gets its own SQLite file and data directory under ``tmp_path`` so
nothing touches a real ledger.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

import pytest

from moneytrack.config import BaseConfig
from moneytrack.context import create_app_context
from moneytrack.logging_config import ROOT_LOGGER_NAME
from moneytrack.models import Account, Currency, Loan, Owner, PaymentFrequency

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> BaseConfig:
    """Point the configuration at a throwaway data directory and database."""
    monkeypatch.setenv("MONEYTRACK_DATA_DIR", str(tmp_path / "instance"))
    monkeypatch.setenv("MONEYTRACK_DATABASE_URL", f"sqlite:///{tmp_path / 'moneytrack.db'}")
    monkeypatch.setenv("MONEYTRACK_LOG_LEVEL", "DEBUG")
    return BaseConfig()


@pytest.fixture
def reset_logging():
    """Drop the handlers setup_logging installs so later tests see a clean logger."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def ctx(config):
    """Application context wired to the per-test database.

    Yields:
        AppContext: repositories and services sharing one engine
    """
    context = create_app_context(config)
    yield context
    context.dispose()


@pytest.fixture
def ledger(ctx):
    return ctx.ledger


@pytest.fixture
def loans(ctx):
    return ctx.loans


@pytest.fixture
def accounts(ctx):
    return ctx.accounts


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def owner(accounts) -> Owner:
    """Create a default owner for scoping accounts."""
    return accounts.create_owner("Tester")


@pytest.fixture
def account_factory(accounts, owner):
    """Factory for creating test accounts.

    Returns:
        Callable: Function that creates and persists Account instances
    """

    def _create_account(
        name: str = "Test Account",
        balance: str = "0",
        currency: Currency = Currency.USD,
        bank: str | None = None,
    ) -> Account:
        return accounts.create_account(
            name, owner.id, balance=balance, currency=currency, bank=bank
        )

    return _create_account


@pytest.fixture
def loan_factory(loans, account_factory):
    """Factory for creating loans with a generated schedule.

    Returns:
        Callable: Function that creates and persists Loan instances
    """

    def _create_loan(
        principal: str = "1200",
        interest_rate: str = "0.12",
        installment_count: int | None = 12,
        start_date: date = date(2025, 1, 1),
        payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
        borrower: Account | None = None,
    ) -> Loan:
        borrower = borrower or account_factory("Borrower")
        return loans.create_loan(
            borrower.id,
            principal,
            interest_rate,
            start_date,
            installment_count=installment_count,
            payment_frequency=payment_frequency,
        )

    return _create_loan


# =============================================================================
# Helpers
# =============================================================================


@pytest.fixture
def balance_of(ctx):
    """Return a function reading an account's cached balance straight from the database."""

    def _balance(account_id: int) -> Decimal:
        account = ctx.account_repo.get_by_id(account_id)
        assert account is not None
        return account.balance

    return _balance
