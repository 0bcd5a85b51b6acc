"""
Book record source consumed by the matcher.

The books of record (journal entries and invoices) are owned elsewhere;
this package only reads them through the two methods below.
"""

from typing import Iterable, Optional, Protocol, runtime_checkable

from .models.books import Invoice, JournalEntry


@runtime_checkable
class BookRecordSource(Protocol):
    """Read-only access to the books of record."""

    def list_all_journal_entries(self) -> list[JournalEntry]:
        ...

    def list_all_invoices(self) -> list[Invoice]:
        ...


class InMemoryBookSource:
    """Book record source backed by plain lists."""

    def __init__(
        self,
        journal_entries: Optional[Iterable[JournalEntry]] = None,
        invoices: Optional[Iterable[Invoice]] = None,
    ):
        self._journal_entries = list(journal_entries or [])
        self._invoices = list(invoices or [])

    def add_journal_entry(self, entry: JournalEntry) -> None:
        self._journal_entries.append(entry)

    def add_invoice(self, invoice: Invoice) -> None:
        self._invoices.append(invoice)

    def list_all_journal_entries(self) -> list[JournalEntry]:
        return list(self._journal_entries)

    def list_all_invoices(self) -> list[Invoice]:
        return list(self._invoices)
