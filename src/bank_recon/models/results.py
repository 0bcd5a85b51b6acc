"""Result models for parsing, matching, importing and reconciliation."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from .books import BookRecordKind
from .ledger import (
    BankStatement,
    BankTransaction,
    Direction,
    FileType,
    StatementStatus,
)


@dataclass
class ParsedTransaction:
    """A normalized statement row produced by a parser."""

    date: datetime
    description: str
    amount: Decimal  # Always non-negative
    direction: Direction


@dataclass
class ParseResult:
    """Rows parsed from one statement plus counts of degraded rows."""

    transactions: list[ParsedTransaction] = field(default_factory=list)
    # Rows whose date could not be parsed and was replaced by "now"
    date_fallback_count: int = 0
    # Rows or blocks dropped because they could not be parsed
    skipped_count: int = 0

    def __len__(self) -> int:
        return len(self.transactions)

    @property
    def date_range(self) -> tuple[date, date]:
        dates = [t.date for t in self.transactions]
        return min(dates).date(), max(dates).date()


@dataclass
class MatchResult:
    """Best (or candidate) pairing of a bank transaction with a book record."""

    bank_transaction_id: str
    book_transaction_id: Optional[str]
    confidence: int  # One of 0, 1, 3, 5
    reason: str
    book_record_kind: Optional[BookRecordKind] = None
    amount_match: bool = False
    date_match: bool = False
    description_match: bool = False

    @property
    def has_candidate(self) -> bool:
        return self.book_transaction_id is not None

    @property
    def signal_count(self) -> int:
        return sum([self.amount_match, self.date_match, self.description_match])


@dataclass
class AutoMatchResult:
    """Outcome of one auto-matching pass."""

    matched_count: int
    total_processed: int
    matches: list[MatchResult] = field(default_factory=list)

    # Timestamp for audit
    run_at: datetime = field(default_factory=datetime.now)

    @property
    def match_rate(self) -> float:
        """Percentage of processed transactions that were matched."""
        if self.total_processed == 0:
            return 0.0
        return (self.matched_count / self.total_processed) * 100


@dataclass
class ValidationResult:
    """Pre-flight check of a statement file."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    file_type: Optional[FileType] = None


@dataclass
class ImportResult:
    """A statement and the transactions created from one import."""

    statement: BankStatement
    transactions: list[BankTransaction]
    imported_count: int
    date_fallback_count: int = 0
    skipped_count: int = 0


@dataclass
class ReconciliationSummary:
    """Totals and matching state of one statement."""

    statement_id: str
    total_transactions: int
    total_debits: Decimal
    total_credits: Decimal
    matched_count: int
    unmatched_count: int
    difference: Decimal
    is_reconciled: bool

    @property
    def net_change(self) -> Decimal:
        """Net change from transactions (credits - debits)."""
        return self.total_credits - self.total_debits

    @property
    def match_rate(self) -> float:
        """Percentage of transactions matched."""
        if self.total_transactions == 0:
            return 0.0
        return (self.matched_count / self.total_transactions) * 100


@dataclass
class ReconciliationItems:
    """A statement's transactions split by matching state."""

    matched: list[BankTransaction] = field(default_factory=list)
    unmatched: list[BankTransaction] = field(default_factory=list)


@dataclass
class BalanceRange:
    """Opening balance implied by a statement's closing balance and movements."""

    opening_balance: Decimal
    closing_balance: Decimal
    total_credits: Decimal
    total_debits: Decimal


@dataclass
class ReconciliationHistoryEntry:
    """One statement row of an account's reconciliation history."""

    statement_id: str
    statement_number: str
    imported_at: datetime
    reconciled_at: Optional[datetime]
    status: StatementStatus
    matched_count: int
    unmatched_count: int
    difference: Decimal


@dataclass
class ReportTotals:
    """Account-wide totals rolled up from the history."""

    total_statements: int = 0
    reconciled_count: int = 0
    # Statements still in the imported state
    unreconciled_count: int = 0
    total_transactions: int = 0
    total_matched: int = 0
    total_unmatched: int = 0


@dataclass
class ReconciliationReport:
    """Account reconciliation report with templated recommendations."""

    account_id: str
    summary: ReportTotals
    statements: list[ReconciliationHistoryEntry] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.now)
