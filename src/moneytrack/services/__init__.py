"""Business services: ledger, amortization, loan servicing and accounts."""

from .accounts import AccountService
from .ledger import BalanceDrift, LedgerService
from .loans import LoanService, NextPayment

__all__ = ["AccountService", "BalanceDrift", "LedgerService", "LoanService", "NextPayment"]
