"""Account and owner management tests."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from moneytrack.errors import NotFoundError, ValidationError
from moneytrack.models import Currency, TransactionType


def test_create_account_sets_opening_balance(accounts, owner):
    account = accounts.create_account(
        "Checking", owner.id, bank="Galicia", alias="main.cuenta", balance="250.50"
    )

    stored = accounts.get_account(account.id)
    assert stored.balance == Decimal("250.50")
    assert stored.opening_balance == Decimal("250.50")
    assert stored.currency is Currency.USD
    assert stored.bank == "Galicia"


def test_create_account_validation(accounts, owner):
    with pytest.raises(ValidationError):
        accounts.create_account("", owner.id)
    with pytest.raises(ValidationError):
        accounts.create_account("Broken", owner.id, balance="lots")
    with pytest.raises(ValidationError):
        accounts.create_account("Broken", owner.id, currency="EUR")
    with pytest.raises(NotFoundError):
        accounts.create_account("Orphan", 9999)
    assert accounts.list_accounts() == []


def test_update_account_cannot_touch_balances(accounts, account_factory):
    account = account_factory("Wallet", balance="10")

    with pytest.raises(ValidationError):
        accounts.update_account(account.id, balance="99")
    with pytest.raises(ValidationError):
        accounts.update_account(account.id, opening_balance="99")

    updated = accounts.update_account(account.id, name="Pocket", currency="ARS", commission_rate="0.01")
    assert updated.name == "Pocket"
    assert updated.currency is Currency.ARS
    assert updated.commission_rate == Decimal("0.01")
    assert updated.balance == Decimal("10")


def test_update_unknown_account_or_owner(accounts, account_factory):
    account = account_factory()
    with pytest.raises(NotFoundError):
        accounts.update_account(9999, name="Nope")
    with pytest.raises(NotFoundError):
        accounts.update_account(account.id, owner_id=9999)


def test_delete_account(accounts, account_factory):
    account = account_factory()
    assert accounts.delete_account(account.id) is True
    assert accounts.get_account(account.id) is None
    assert accounts.delete_account(account.id) is False


def test_delete_account_with_history_is_refused(accounts, ledger, loans, account_factory):
    a = account_factory("A", balance="100")
    b = account_factory("B")
    borrower = account_factory("Borrower")
    ledger.create_transaction(a.id, b.id, "10", TransactionType.TRANSFER)
    loans.create_loan(borrower.id, "100", "0", date(2025, 1, 1))

    for account in (a, b, borrower):
        with pytest.raises(ValidationError):
            accounts.delete_account(account.id)
        assert accounts.get_account(account.id) is not None


def test_listing_and_totals(accounts, owner, account_factory):
    usd_a = account_factory("Alpha", balance="100.25", bank="Chase")
    usd_b = account_factory("Beta", balance="-20", bank="Chase")
    ars = account_factory("Gamma", balance="5000", currency=Currency.ARS)
    other_owner = accounts.create_owner("Partner")
    accounts.create_account("Delta", other_owner.id, balance="1")

    assert [a.id for a in accounts.list_by_bank("Chase")] == [usd_a.id, usd_b.id]
    assert [a.id for a in accounts.list_by_currency("ARS")] == [ars.id]
    assert {a.name for a in accounts.list_by_owner(owner.id)} == {"Alpha", "Beta", "Gamma"}
    assert accounts.get_total_balance(Currency.USD) == Decimal("81.25")
    assert accounts.get_total_balance("ARS") == Decimal("5000")
    assert len(accounts.list_accounts()) == 4


def test_owners(accounts, owner):
    accounts.create_owner("  Alex ")
    assert [o.name for o in accounts.list_owners()] == ["Alex", "Tester"]
    with pytest.raises(ValidationError):
        accounts.create_owner("")
