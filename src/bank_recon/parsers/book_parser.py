"""
Book record CSV parser.
Loads journal entry and invoice exports into read-only book records.
"""

from pathlib import Path
from typing import Any, Optional
import logging

import pandas as pd

from ..books import InMemoryBookSource
from ..config import ReconConfig
from ..models.books import Invoice, JournalEntry
from ..utils.exceptions import StatementParseError
from .base import parse_amount, parse_date

logger = logging.getLogger(__name__)


class BookRecordParser:
    """
    Parser for journal entry and invoice CSV exports.

    Column names come from ``input.books`` in the configuration. Rows
    without a usable amount or date are logged and skipped.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config or ReconConfig()
        self.journal_columns = self.config.input.books.journal_columns
        self.invoice_columns = self.config.input.books.invoice_columns

    def parse_journal_entries(self, file_path: Path) -> list[JournalEntry]:
        """
        Parse a journal entry CSV export.

        Raises:
            StatementParseError: If the file cannot be read
        """
        df = self._read_csv(file_path)
        cols = self.journal_columns
        entries: list[JournalEntry] = []

        for idx, row in df.iterrows():
            amount = parse_amount(self._value(row, cols["amount"]))
            entry_date = parse_date(self._value(row, cols["date"]))
            if amount is None or entry_date is None:
                logger.warning(f"Journal row {idx}: invalid amount or date, skipping")
                continue

            entries.append(
                JournalEntry(
                    id=self._value(row, cols["id"]) or f"JE-{int(idx) + 1:05d}",
                    description=self._value(row, cols["description"]),
                    amount=abs(amount),
                    date=entry_date,
                )
            )

        logger.info(f"Loaded {len(entries)} journal entries from {file_path}")
        return entries

    def parse_invoices(self, file_path: Path) -> list[Invoice]:
        """
        Parse an invoice CSV export.

        Raises:
            StatementParseError: If the file cannot be read
        """
        df = self._read_csv(file_path)
        cols = self.invoice_columns
        invoices: list[Invoice] = []

        for idx, row in df.iterrows():
            total = parse_amount(self._value(row, cols["total"]))
            issued = parse_date(self._value(row, cols["issued_date"]))
            due = parse_date(self._value(row, cols["due_date"]))
            if total is None or (issued is None and due is None):
                logger.warning(f"Invoice row {idx}: invalid total or dates, skipping")
                continue

            invoices.append(
                Invoice(
                    id=self._value(row, cols["id"]) or f"INV-{int(idx) + 1:05d}",
                    invoice_number=self._value(row, cols["invoice_number"]),
                    total=abs(total),
                    issued_date=issued or due,
                    due_date=due,
                )
            )

        logger.info(f"Loaded {len(invoices)} invoices from {file_path}")
        return invoices

    def load_source(
        self,
        journal_path: Optional[Path] = None,
        invoice_path: Optional[Path] = None,
    ) -> InMemoryBookSource:
        """Build a book record source from optional journal and invoice exports."""
        journal_entries = self.parse_journal_entries(journal_path) if journal_path else []
        invoices = self.parse_invoices(invoice_path) if invoice_path else []
        return InMemoryBookSource(journal_entries, invoices)

    def _read_csv(self, file_path: Path) -> pd.DataFrame:
        try:
            return pd.read_csv(
                file_path,
                encoding=self.config.input.encoding,
                dtype=str,
                keep_default_na=False,
            )
        except Exception as e:
            logger.error(f"Failed to read book record CSV: {e}")
            raise StatementParseError(f"Failed to read book record CSV {file_path}: {e}") from e

    @staticmethod
    def _value(row: pd.Series, column: str) -> str:
        value: Any = row.get(column, "")
        return "" if pd.isna(value) else str(value).strip()
