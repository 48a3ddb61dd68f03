"""Concrete repository implementations using SQLModel."""

from .account import SQLModelAccountRepository
from .category import SQLModelCategoryRepository
from .loan import SQLModelLoanInstallmentRepository, SQLModelLoanRepository
from .owner import SQLModelOwnerRepository
from .transaction import SQLModelTransactionRepository

__all__ = [
    "SQLModelAccountRepository",
    "SQLModelCategoryRepository",
    "SQLModelLoanInstallmentRepository",
    "SQLModelLoanRepository",
    "SQLModelOwnerRepository",
    "SQLModelTransactionRepository",
]
