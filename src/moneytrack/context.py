"""Application context for dependency injection."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.engine import Engine

from .config import BaseConfig
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database
from .infra.repositories import (
    SQLModelAccountRepository,
    SQLModelCategoryRepository,
    SQLModelLoanInstallmentRepository,
    SQLModelLoanRepository,
    SQLModelOwnerRepository,
    SQLModelTransactionRepository,
)
from .logging_config import setup_logging
from .services import AccountService, LedgerService, LoanService


@dataclass
class AppContext:
    """Centralized application context with repositories and services."""

    config: BaseConfig
    engine: Engine
    session_factory: SessionFactory

    # Repositories
    owner_repo: SQLModelOwnerRepository
    account_repo: SQLModelAccountRepository
    category_repo: SQLModelCategoryRepository
    transaction_repo: SQLModelTransactionRepository
    loan_repo: SQLModelLoanRepository
    installment_repo: SQLModelLoanInstallmentRepository

    # Services
    accounts: AccountService
    ledger: LedgerService
    loans: LoanService

    # One writer at a time across every service touching balances.
    write_lock: threading.RLock = field(default_factory=threading.RLock)

    def dispose(self) -> None:
        """Release pooled database connections."""
        self.engine.dispose()


def create_app_context(
    config: Optional[BaseConfig] = None, *, configure_logging: bool = False
) -> AppContext:
    """Create the engine, schema, repositories and services."""

    if config is None:
        config = BaseConfig()
    if configure_logging:
        setup_logging(config)

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)
    write_lock = threading.RLock()

    owner_repo = SQLModelOwnerRepository(session_factory)
    account_repo = SQLModelAccountRepository(session_factory)
    category_repo = SQLModelCategoryRepository(session_factory)
    transaction_repo = SQLModelTransactionRepository(session_factory)
    loan_repo = SQLModelLoanRepository(session_factory)
    installment_repo = SQLModelLoanInstallmentRepository(session_factory)

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        owner_repo=owner_repo,
        account_repo=account_repo,
        category_repo=category_repo,
        transaction_repo=transaction_repo,
        loan_repo=loan_repo,
        installment_repo=installment_repo,
        accounts=AccountService(
            session_factory=session_factory,
            account_repo=account_repo,
            owner_repo=owner_repo,
            lock=write_lock,
        ),
        ledger=LedgerService(
            session_factory=session_factory,
            account_repo=account_repo,
            transaction_repo=transaction_repo,
            category_repo=category_repo,
            lock=write_lock,
        ),
        loans=LoanService(
            session_factory=session_factory,
            loan_repo=loan_repo,
            installment_repo=installment_repo,
            account_repo=account_repo,
            lock=write_lock,
        ),
        write_lock=write_lock,
    )
