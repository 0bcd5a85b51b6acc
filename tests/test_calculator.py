from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from bank_recon.models.ledger import Direction, StatementStatus
from bank_recon.reconciliation import ReconciliationCalculator, calculate_difference
from bank_recon.utils.exceptions import NotFoundError


def _add(store, statement_id, amount, direction, when=datetime(2025, 1, 10)):
    return store.create_transaction(
        statement_id=statement_id,
        transaction_date=when,
        description="Line",
        amount=Decimal(amount),
        direction=direction,
    )


def _statement(store, account, number="STMT-1", closing="100000", imported_at=None):
    return store.create_statement(
        bank_account_id=account.id,
        statement_number=number,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 31),
        closing_balance=Decimal(closing),
        currency="HKD",
        imported_at=imported_at,
    )


def test_summary_totals(store, statement):
    _add(store, statement.id, "1000.00", Direction.CREDIT)
    _add(store, statement.id, "250.00", Direction.DEBIT)
    _add(store, statement.id, "4.50", Direction.DEBIT)

    summary = ReconciliationCalculator(store).get_summary(statement.id)

    assert summary.total_transactions == 3
    assert summary.total_credits == Decimal("1000.00")
    assert summary.total_debits == Decimal("254.50")
    assert summary.difference == Decimal("745.50")
    assert summary.net_change == Decimal("745.50")
    assert summary.unmatched_count == 3
    assert not summary.is_reconciled


@pytest.mark.parametrize("closing", ["0", "100000", "-2500.75"])
def test_difference_is_credits_minus_debits(store, account, closing):
    statement = _statement(store, account, closing=closing)
    _add(store, statement.id, "300.00", Direction.CREDIT)
    _add(store, statement.id, "120.25", Direction.DEBIT)

    transactions = store.list_transactions_by_statement(statement.id)
    assert calculate_difference(statement, transactions) == Decimal("179.75")


def test_empty_statement_is_reconciled(store, statement):
    summary = ReconciliationCalculator(store).get_summary(statement.id)

    assert summary.difference == Decimal("0")
    assert summary.is_reconciled
    assert summary.match_rate == 0.0


@pytest.mark.parametrize(
    "credit, expected",
    [
        ("100.009999", True),
        ("100.01", False),
        ("99.990001", True),
    ],
)
def test_reconciled_strictly_within_one_cent(store, statement, credit, expected):
    _add(store, statement.id, credit, Direction.CREDIT)
    _add(store, statement.id, "100.00", Direction.DEBIT)

    assert ReconciliationCalculator(store).get_summary(statement.id).is_reconciled is expected


def test_summary_counts_matches(store, statement):
    first = _add(store, statement.id, "10.00", Direction.CREDIT)
    _add(store, statement.id, "10.00", Direction.DEBIT)
    store.match_transaction(first.id, "JE-1")

    summary = ReconciliationCalculator(store).get_summary(statement.id)
    assert summary.matched_count == 1
    assert summary.unmatched_count == 1
    assert summary.match_rate == 50.0


def test_summary_unknown_statement(store):
    with pytest.raises(NotFoundError):
        ReconciliationCalculator(store).get_summary("stmt-missing")


def test_items_split_by_match_state(store, statement):
    first = _add(store, statement.id, "10.00", Direction.CREDIT)
    second = _add(store, statement.id, "20.00", Direction.DEBIT)
    store.match_transaction(first.id, "JE-1")

    items = ReconciliationCalculator(store).get_items(statement.id)
    assert [t.id for t in items.matched] == [first.id]
    assert [t.id for t in items.unmatched] == [second.id]


def test_mark_reconciled_when_balanced(store, statement):
    _add(store, statement.id, "50.00", Direction.CREDIT)
    _add(store, statement.id, "50.00", Direction.DEBIT)

    assert ReconciliationCalculator(store).mark_reconciled(statement.id)
    stored = store.get_statement(statement.id)
    assert stored.status == StatementStatus.RECONCILED
    assert stored.reconciled_at is not None


def test_mark_reconciled_refuses_unbalanced(store, statement):
    _add(store, statement.id, "50.00", Direction.CREDIT)

    calculator = ReconciliationCalculator(store)
    assert not calculator.mark_reconciled(statement.id)
    assert store.get_statement(statement.id).status == StatementStatus.IMPORTED
    assert not calculator.mark_reconciled("stmt-missing")


def test_balance_range(store, statement):
    _add(store, statement.id, "1000.00", Direction.CREDIT)
    _add(store, statement.id, "400.00", Direction.DEBIT)

    balance_range = ReconciliationCalculator(store).get_balance_range(statement.id)
    assert balance_range.closing_balance == Decimal("100000")
    assert balance_range.opening_balance == Decimal("99400.00")


def test_history_newest_first(store, account):
    now = datetime.now()
    old = _statement(store, account, "STMT-OLD", imported_at=now - timedelta(days=30))
    new = _statement(store, account, "STMT-NEW", imported_at=now)
    _add(store, old.id, "10.00", Direction.CREDIT)

    history = ReconciliationCalculator(store).get_history(account.id)

    assert [h.statement_number for h in history] == ["STMT-NEW", "STMT-OLD"]
    assert history[1].unmatched_count == 1
    assert history[1].difference == Decimal("10.00")


def test_report_recommendations(store, account):
    statement = _statement(store, account, "STMT-A")
    _add(store, statement.id, "10.00", Direction.CREDIT)
    _add(store, statement.id, "20.00", Direction.DEBIT)

    report = ReconciliationCalculator(store).generate_report(account.id)

    assert report.summary.total_statements == 1
    assert report.summary.unreconciled_count == 1
    assert report.summary.total_unmatched == 2
    assert report.recommendations == [
        "1 statements have not been reconciled yet.",
        "Unmatched transactions found in statements: STMT-A, STMT-A",
        "Consider reconciling remaining statements to maintain accurate records.",
        "Review unmatched transactions for potential matching opportunities.",
    ]


def test_report_preview_truncates_statement_refs(store, account):
    statement = _statement(store, account, "STMT-B")
    for _ in range(7):
        _add(store, statement.id, "1.00", Direction.CREDIT)

    report = ReconciliationCalculator(store).generate_report(account.id)
    preview = report.recommendations[1]

    assert preview == "Unmatched transactions found in statements: " + ", ".join(["STMT-B"] * 5) + "..."


def test_report_for_clean_account_has_no_recommendations(store, account):
    statement = _statement(store, account, "STMT-C")
    txn = _add(store, statement.id, "5.00", Direction.CREDIT)
    _add(store, statement.id, "5.00", Direction.DEBIT)
    store.match_transaction(txn.id, "JE-1")

    calculator = ReconciliationCalculator(store)
    assert calculator.mark_reconciled(statement.id)

    # One pending transaction remains, but the statement itself is reconciled
    report = calculator.generate_report(account.id)
    assert report.summary.reconciled_count == 1
    assert report.recommendations == [
        "Review unmatched transactions for potential matching opportunities."
    ]


def test_report_unknown_account(store):
    with pytest.raises(NotFoundError):
        ReconciliationCalculator(store).generate_report("bank-missing")
