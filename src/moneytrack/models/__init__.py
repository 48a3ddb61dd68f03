"""SQLModel table exports."""

from .account import Account
from .category import Category
from .enums import Currency, LoanStatus, PaymentFrequency, TransactionType
from .loan import Loan, LoanInstallment
from .owner import Owner
from .transaction import Transaction

__all__ = [
    "Account",
    "Category",
    "Currency",
    "Loan",
    "LoanInstallment",
    "LoanStatus",
    "Owner",
    "PaymentFrequency",
    "Transaction",
    "TransactionType",
]
