from datetime import datetime
from decimal import Decimal

from bank_recon.config import MatchingConfig
from bank_recon.matching import Matcher
from bank_recon.models.books import BookRecordKind, Invoice, JournalEntry
from bank_recon.models.ledger import Direction
from conftest import make_txn


def test_full_journal_match(journal_entries, invoices):
    txn = make_txn("250.00", Direction.DEBIT, "Office Supplies", datetime(2025, 1, 10))
    result = Matcher().find_match(txn, journal_entries, invoices)

    assert result.book_transaction_id == "JE-1"
    assert result.confidence == 5
    assert result.book_record_kind == BookRecordKind.JOURNAL_ENTRY
    assert result.reason == "Journal entry match: description, amount, date"


def test_invoice_match_uses_invoice_number_and_due_date(invoices):
    txn = make_txn("1200.00", Direction.CREDIT, "INV-1001", datetime(2025, 1, 20))
    result = Matcher().find_match(txn, [], invoices)

    assert result.book_transaction_id == "INV-A"
    assert result.confidence == 3
    assert result.reason == "Invoice match: invoice number, amount"
    assert not result.date_match


def test_invoices_only_considered_for_credits(invoices):
    txn = make_txn("1200.00", Direction.DEBIT, "INV-1001", datetime(2025, 1, 15))
    result = Matcher().find_match(txn, [], invoices)

    assert result.book_transaction_id is None
    assert result.confidence == 0
    assert result.reason == "No match found"


def test_invoices_for_debits_when_configured(invoices):
    matcher = Matcher(MatchingConfig(invoices_for_credits_only=False))
    txn = make_txn("1200.00", Direction.DEBIT, "INV-1001", datetime(2025, 1, 15))

    assert matcher.find_match(txn, [], invoices).confidence == 5


def test_no_signals_is_no_match(journal_entries):
    txn = make_txn("9.99", Direction.DEBIT, "Parking", datetime(2025, 6, 1))
    result = Matcher().find_match(txn, journal_entries, [])

    assert not result.has_candidate
    assert result.reason == "No match found"


def test_tie_keeps_journal_entry_over_invoice():
    entry = JournalEntry(
        id="JE-9", description="Deposit", amount=Decimal("500.00"), date=datetime(2025, 3, 1)
    )
    invoice = Invoice(
        id="INV-9",
        invoice_number="INV-9",
        total=Decimal("500.00"),
        issued_date=datetime(2025, 2, 1),
        due_date=datetime(2025, 3, 1),
    )
    txn = make_txn("500.00", Direction.CREDIT, "Wire transfer", datetime(2025, 3, 1))

    result = Matcher().find_match(txn, [entry], [invoice])

    assert result.confidence == 3
    assert result.book_transaction_id == "JE-9"


def test_higher_confidence_invoice_replaces_journal_entry(invoices):
    txn = make_txn("1200.00", Direction.CREDIT, "INV-1001", datetime(2025, 1, 15))
    entry = JournalEntry(
        id="JE-5", description="Other", amount=Decimal("1200.00"), date=datetime(2025, 6, 1)
    )

    result = Matcher().find_match(txn, [entry], invoices)

    assert result.book_transaction_id == "INV-A"
    assert result.confidence == 5


def test_recommendations_ranked_and_filtered(journal_entries, invoices):
    txn = make_txn("250.00", Direction.DEBIT, "Office Supplies", datetime(2025, 1, 1))
    results = Matcher().recommend(txn, journal_entries, invoices)

    # JE-1: description + amount; JE-2 (Rent): date only
    assert [(r.book_transaction_id, r.confidence) for r in results] == [("JE-1", 3), ("JE-2", 1)]


def test_score_never_mutates_transaction(journal_entries):
    txn = make_txn("250.00", Direction.DEBIT, "Office Supplies", datetime(2025, 1, 10))
    Matcher().score(txn, journal_entries[0])

    assert not txn.is_matched
    assert txn.matched_book_transaction_id is None
