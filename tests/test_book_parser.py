from datetime import datetime
from decimal import Decimal

import pytest

from bank_recon.books import BookRecordSource, InMemoryBookSource
from bank_recon.models.books import Invoice, JournalEntry
from bank_recon.parsers import BookRecordParser
from bank_recon.utils.exceptions import StatementParseError


@pytest.fixture
def journal_csv(tmp_path):
    path = tmp_path / "journal.csv"
    path.write_text(
        "id,description,amount,date\n"
        "JE-1,Office Supplies,250.00,2025-01-10\n"
        "JE-2,Refund,-40.00,2025-01-12\n"
        ",No id,10.00,2025-01-13\n"
        "JE-4,Bad amount,abc,2025-01-14\n"
    )
    return path


@pytest.fixture
def invoice_csv(tmp_path):
    path = tmp_path / "invoices.csv"
    path.write_text(
        "id,invoice_number,total,issued_date,due_date\n"
        "INV-A,INV-1001,1200.00,2024-12-15,2025-01-15\n"
        "INV-B,INV-1002,300.00,2025-01-02,\n"
        "INV-C,INV-1003,300.00,,\n"
    )
    return path


def test_parse_journal_entries(config, journal_csv):
    entries = BookRecordParser(config).parse_journal_entries(journal_csv)

    assert [e.id for e in entries] == ["JE-1", "JE-2", "JE-00003"]
    assert entries[0].amount == Decimal("250.00")
    assert entries[0].date == datetime(2025, 1, 10)
    # Book amounts are compared against unsigned bank amounts
    assert entries[1].amount == Decimal("40.00")


def test_parse_invoices_uses_due_or_issued_date(config, invoice_csv):
    invoices = BookRecordParser(config).parse_invoices(invoice_csv)

    assert [i.invoice_number for i in invoices] == ["INV-1001", "INV-1002"]
    assert invoices[0].match_date == datetime(2025, 1, 15)
    assert invoices[1].due_date is None
    assert invoices[1].match_date == datetime(2025, 1, 2)


def test_load_source_with_optional_files(config, journal_csv):
    source = BookRecordParser(config).load_source(journal_path=journal_csv)

    assert isinstance(source, BookRecordSource)
    assert len(source.list_all_journal_entries()) == 3
    assert source.list_all_invoices() == []


def test_missing_file_raises_parse_error(config, tmp_path):
    with pytest.raises(StatementParseError):
        BookRecordParser(config).parse_journal_entries(tmp_path / "missing.csv")


def test_in_memory_source_returns_copies():
    source = InMemoryBookSource()
    source.add_journal_entry(
        JournalEntry(id="JE-1", description="x", amount=Decimal("1"), date=datetime(2025, 1, 1))
    )
    source.add_invoice(
        Invoice(
            id="INV-1",
            invoice_number="INV-1",
            total=Decimal("1"),
            issued_date=datetime(2025, 1, 1),
        )
    )

    source.list_all_journal_entries().clear()
    assert len(source.list_all_journal_entries()) == 1
    assert len(source.list_all_invoices()) == 1
