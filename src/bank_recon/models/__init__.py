"""Data models for bank reconciliation."""

from .books import BookRecord, BookRecordKind, Invoice, JournalEntry
from .ledger import (
    AccountType,
    BankAccount,
    BankStatement,
    BankTransaction,
    Direction,
    FileType,
    StatementStatus,
    TransactionStatus,
)
from .results import (
    AutoMatchResult,
    BalanceRange,
    ImportResult,
    MatchResult,
    ParsedTransaction,
    ParseResult,
    ReconciliationHistoryEntry,
    ReconciliationItems,
    ReconciliationReport,
    ReconciliationSummary,
    ReportTotals,
    ValidationResult,
)

__all__ = [
    "AccountType",
    "AutoMatchResult",
    "BalanceRange",
    "BankAccount",
    "BankStatement",
    "BankTransaction",
    "BookRecord",
    "BookRecordKind",
    "Direction",
    "FileType",
    "ImportResult",
    "Invoice",
    "JournalEntry",
    "MatchResult",
    "ParsedTransaction",
    "ParseResult",
    "ReconciliationHistoryEntry",
    "ReconciliationItems",
    "ReconciliationReport",
    "ReconciliationSummary",
    "ReportTotals",
    "StatementStatus",
    "TransactionStatus",
    "ValidationResult",
]
