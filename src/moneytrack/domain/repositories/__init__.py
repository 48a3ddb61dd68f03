"""Repository protocol definitions for domain layer."""

from .account import AccountRepository
from .category import CategoryRepository
from .loan import LoanInstallmentRepository, LoanRepository
from .owner import OwnerRepository
from .transaction import TransactionRepository

__all__ = [
    "AccountRepository",
    "CategoryRepository",
    "LoanInstallmentRepository",
    "LoanRepository",
    "OwnerRepository",
    "TransactionRepository",
]
