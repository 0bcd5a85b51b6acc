"""Read-only book records a bank transaction can be matched against."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class BookRecordKind(Enum):
    """Kind of book record."""

    JOURNAL_ENTRY = "journal_entry"
    INVOICE = "invoice"


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


@dataclass(frozen=True)
class JournalEntry:
    """A journal entry from the general ledger."""

    id: str
    description: str
    amount: Decimal
    date: Union[date, datetime]

    kind = BookRecordKind.JOURNAL_ENTRY

    @property
    def match_amount(self) -> Decimal:
        return self.amount

    @property
    def match_date(self) -> datetime:
        return _as_datetime(self.date)

    @property
    def label(self) -> str:
        return self.description or ""


@dataclass(frozen=True)
class Invoice:
    """
    A customer invoice.

    For matching, the invoice total is its amount, the due date (or the
    issue date when no due date is set) is its date, and the invoice
    number is its description.
    """

    id: str
    invoice_number: str
    total: Decimal
    issued_date: Union[date, datetime]
    due_date: Optional[Union[date, datetime]] = None

    kind = BookRecordKind.INVOICE

    @property
    def match_amount(self) -> Decimal:
        return self.total

    @property
    def match_date(self) -> datetime:
        return _as_datetime(self.due_date or self.issued_date)

    @property
    def label(self) -> str:
        return self.invoice_number or ""


BookRecord = Union[JournalEntry, Invoice]
