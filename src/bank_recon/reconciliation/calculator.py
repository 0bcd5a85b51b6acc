"""
Reconciliation arithmetic and account-level reporting.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional
import logging

from ..config import ReconciliationConfig
from ..models.ledger import BankStatement, BankTransaction, Direction, StatementStatus
from ..models.results import (
    BalanceRange,
    ReconciliationHistoryEntry,
    ReconciliationItems,
    ReconciliationReport,
    ReconciliationSummary,
    ReportTotals,
)
from ..store.repository import LedgerRepository
from ..utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _totals(transactions: Iterable[BankTransaction]) -> tuple[Decimal, Decimal]:
    """Return (total credits, total debits)."""
    credits = ZERO
    debits = ZERO
    for txn in transactions:
        if txn.direction == Direction.CREDIT:
            credits += txn.amount
        else:
            debits += txn.amount
    return credits, debits


def calculate_difference(
    statement: BankStatement, transactions: Iterable[BankTransaction]
) -> Decimal:
    """
    Reconciliation difference of a statement.

    The expected balance is the closing balance moved by the statement's
    credits and debits; the difference is measured against the closing
    balance, so it always equals total credits minus total debits.
    """
    total_credits, total_debits = _totals(transactions)
    expected_balance = statement.closing_balance + total_credits - total_debits
    return expected_balance - statement.closing_balance


class ReconciliationCalculator:
    """
    Derives statement summaries and account history from the ledger store.

    Only ``mark_reconciled`` writes, and it does so through the store.
    """

    def __init__(
        self, store: LedgerRepository, config: Optional[ReconciliationConfig] = None
    ):
        """
        Initialize the calculator.

        Args:
            store: Bank ledger store
            config: Reconciliation tolerances and report settings
        """
        self.store = store
        self.config = config or ReconciliationConfig()

    def _require_statement(self, statement_id: str) -> BankStatement:
        statement = self.store.get_statement(statement_id)
        if statement is None:
            raise NotFoundError(f"Bank statement not found: {statement_id}")
        return statement

    def is_within_tolerance(self, difference: Decimal) -> bool:
        return abs(difference) < self.config.balance_tolerance_decimal

    def get_summary(self, statement_id: str) -> ReconciliationSummary:
        """
        Summarize a statement's transactions.

        Raises:
            NotFoundError: If the statement does not exist
        """
        statement = self._require_statement(statement_id)
        transactions = self.store.list_transactions_by_statement(statement_id)

        total_credits, total_debits = _totals(transactions)
        matched_count = sum(1 for t in transactions if t.is_matched)
        difference = calculate_difference(statement, transactions)

        return ReconciliationSummary(
            statement_id=statement_id,
            total_transactions=len(transactions),
            total_debits=total_debits,
            total_credits=total_credits,
            matched_count=matched_count,
            unmatched_count=len(transactions) - matched_count,
            difference=difference,
            is_reconciled=self.is_within_tolerance(difference),
        )

    def get_items(self, statement_id: str) -> ReconciliationItems:
        """Split a statement's transactions into matched and unmatched."""
        items = ReconciliationItems()
        for txn in self.store.list_transactions_by_statement(statement_id):
            if txn.is_matched:
                items.matched.append(txn)
            else:
                items.unmatched.append(txn)
        return items

    def mark_reconciled(self, statement_id: str) -> bool:
        """
        Mark a statement reconciled if its difference is within tolerance.

        Returns:
            False, without changing anything, for unknown or unbalanced
            statements
        """
        if self.store.get_statement(statement_id) is None:
            return False

        summary = self.get_summary(statement_id)
        if not summary.is_reconciled:
            logger.info(
                f"Statement {statement_id} not reconciled: difference {summary.difference}"
            )
            return False

        updated = self.store.update_statement_status(
            statement_id, StatementStatus.RECONCILED, reconciled_at=datetime.now()
        )
        if updated:
            logger.info(f"Statement {statement_id} marked reconciled")
        return updated

    def get_balance_range(self, statement_id: str) -> BalanceRange:
        """
        Opening balance implied by the closing balance and the movements.

        Raises:
            NotFoundError: If the statement does not exist
        """
        statement = self._require_statement(statement_id)
        total_credits, total_debits = _totals(
            self.store.list_transactions_by_statement(statement_id)
        )
        return BalanceRange(
            opening_balance=statement.closing_balance - total_credits + total_debits,
            closing_balance=statement.closing_balance,
            total_credits=total_credits,
            total_debits=total_debits,
        )

    def get_history(self, account_id: str) -> list[ReconciliationHistoryEntry]:
        """One entry per statement of the account, newest import first."""
        history: list[ReconciliationHistoryEntry] = []
        for statement in self.store.list_statements_by_account(account_id):
            summary = self.get_summary(statement.id)
            history.append(
                ReconciliationHistoryEntry(
                    statement_id=statement.id,
                    statement_number=statement.statement_number,
                    imported_at=statement.imported_at,
                    reconciled_at=statement.reconciled_at,
                    status=statement.status,
                    matched_count=summary.matched_count,
                    unmatched_count=summary.unmatched_count,
                    difference=summary.difference,
                )
            )
        return history

    def generate_report(self, account_id: str) -> ReconciliationReport:
        """
        Roll the account history into totals and recommendations.

        Raises:
            NotFoundError: If the account does not exist
        """
        if self.store.get_account(account_id) is None:
            raise NotFoundError(f"Bank account not found: {account_id}")

        history = self.get_history(account_id)
        totals = ReportTotals(
            total_statements=len(history),
            reconciled_count=sum(1 for h in history if h.status == StatementStatus.RECONCILED),
            unreconciled_count=sum(1 for h in history if h.status == StatementStatus.IMPORTED),
            total_transactions=sum(h.matched_count + h.unmatched_count for h in history),
            total_matched=sum(h.matched_count for h in history),
            total_unmatched=sum(h.unmatched_count for h in history),
        )

        return ReconciliationReport(
            account_id=account_id,
            summary=totals,
            statements=history,
            recommendations=self._recommendations(totals, history),
        )

    def _recommendations(
        self, totals: ReportTotals, history: list[ReconciliationHistoryEntry]
    ) -> list[str]:
        recommendations: list[str] = []

        if totals.unreconciled_count > 0:
            recommendations.append(
                f"{totals.unreconciled_count} statements have not been reconciled yet."
            )

        # One entry per unmatched transaction in a statement not yet reconciled
        unmatched_refs = [
            h.statement_number
            for h in history
            if h.status == StatementStatus.IMPORTED
            for _ in range(h.unmatched_count)
        ]
        if unmatched_refs:
            limit = self.config.recommendation_preview_limit
            preview = ", ".join(unmatched_refs[:limit])
            suffix = "..." if len(unmatched_refs) > limit else ""
            recommendations.append(f"Unmatched transactions found in statements: {preview}{suffix}")

        if totals.reconciled_count < totals.total_statements:
            recommendations.append(
                "Consider reconciling remaining statements to maintain accurate records."
            )

        if totals.total_unmatched > 0:
            recommendations.append(
                "Review unmatched transactions for potential matching opportunities."
            )

        return recommendations
