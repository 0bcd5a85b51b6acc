"""
Bank reconciliation service.

Single entry point wiring the ledger store, the book record source, the
importer, the auto-match runner and the reconciliation calculator.
"""

from pathlib import Path
from threading import Event
from typing import Optional, Union
import logging

from .books import BookRecordSource, InMemoryBookSource
from .config import ReconConfig
from .importer import ImportOrchestrator
from .matching.matcher import Matcher
from .matching.runner import AutoMatchRunner
from .models.ledger import BankAccount, FileType
from .models.results import (
    AutoMatchResult,
    BalanceRange,
    ImportResult,
    MatchResult,
    ReconciliationHistoryEntry,
    ReconciliationItems,
    ReconciliationReport,
    ReconciliationSummary,
    ValidationResult,
)
from .reconciliation.calculator import ReconciliationCalculator
from .store.memory import InMemoryLedgerStore, seed_default_account
from .store.repository import LedgerRepository

logger = logging.getLogger(__name__)


class BankReconciliationService:
    """Facade over statement import, matching and reconciliation."""

    def __init__(
        self,
        store: Optional[LedgerRepository] = None,
        books: Optional[BookRecordSource] = None,
        config: Optional[ReconConfig] = None,
    ):
        """
        Initialize the service.

        Args:
            store: Bank ledger store (a fresh in-memory store if omitted)
            books: Book record source (empty if omitted)
            config: Application configuration
        """
        self.config = config or ReconConfig()
        self.store = store or InMemoryLedgerStore(self.config.ledger)
        self.books = books or InMemoryBookSource()

        self.importer = ImportOrchestrator(self.store, self.config)
        self.matcher = Matcher(self.config.matching)
        self.runner = AutoMatchRunner(self.store, self.books, self.config.matching, self.matcher)
        self.calculator = ReconciliationCalculator(self.store, self.config.reconciliation)

        if self.config.ledger.seed_default_account and not self.store.list_accounts():
            seed_default_account(self.store, self.config.ledger)

    def seed_default_account(self) -> BankAccount:
        """Create the configured demo account."""
        return seed_default_account(self.store, self.config.ledger)

    # Import

    def validate_bank_statement(
        self,
        file_path: Path,
        file_type: Optional[Union[str, FileType]] = None,
    ) -> ValidationResult:
        return self.importer.validate_statement_file(file_path, file_type)

    def import_bank_statement(
        self,
        account_id: str,
        file_path: Path,
        file_type: Optional[Union[str, FileType]] = None,
        cancel_event: Optional[Event] = None,
    ) -> ImportResult:
        return self.importer.import_file(account_id, file_path, file_type, cancel_event)

    def import_statement_content(
        self,
        account_id: str,
        file_type: Union[str, FileType],
        content: str,
        cancel_event: Optional[Event] = None,
    ) -> ImportResult:
        return self.importer.import_statement(account_id, file_type, content, cancel_event)

    # Matching

    def run_auto_matching(self, account_id: Optional[str] = None) -> AutoMatchResult:
        return self.runner.run(account_id)

    def get_matching_recommendations(self, bank_transaction_id: str) -> list[MatchResult]:
        return self.runner.recommendations(bank_transaction_id)

    def match_transaction(self, bank_transaction_id: str, book_transaction_id: str) -> bool:
        """Manually match a transaction under its account's writer lock."""
        account_id = self.store.account_id_for_transaction(bank_transaction_id)
        if account_id is None:
            return False
        with self.store.account_lock(account_id):
            return self.store.match_transaction(bank_transaction_id, book_transaction_id)

    def unmatch_transaction(self, bank_transaction_id: str) -> bool:
        account_id = self.store.account_id_for_transaction(bank_transaction_id)
        if account_id is None:
            return False
        with self.store.account_lock(account_id):
            return self.store.unmatch_transaction(bank_transaction_id)

    # Reconciliation

    def get_reconciliation_summary(self, statement_id: str) -> ReconciliationSummary:
        return self.calculator.get_summary(statement_id)

    def get_reconciliation_items(self, statement_id: str) -> ReconciliationItems:
        return self.calculator.get_items(statement_id)

    def mark_statement_reconciled(self, statement_id: str) -> bool:
        statement = self.store.get_statement(statement_id)
        if statement is None:
            return False
        with self.store.account_lock(statement.bank_account_id):
            return self.calculator.mark_reconciled(statement_id)

    def get_balance_range(self, statement_id: str) -> BalanceRange:
        return self.calculator.get_balance_range(statement_id)

    def get_reconciliation_history(self, account_id: str) -> list[ReconciliationHistoryEntry]:
        return self.calculator.get_history(account_id)

    def generate_reconciliation_report(self, account_id: str) -> ReconciliationReport:
        return self.calculator.generate_report(account_id)
