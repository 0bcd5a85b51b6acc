"""
Confidence matcher pairing a bank transaction with book records.
"""

from typing import Iterator, Optional, Sequence
import logging

from ..config import MatchingConfig
from ..models.books import BookRecord, BookRecordKind, Invoice, JournalEntry
from ..models.ledger import BankTransaction, Direction
from ..models.results import MatchResult
from .signals import (
    AmountSignal,
    DateSignal,
    DescriptionSignal,
    MatchSignal,
    calculate_confidence,
)

logger = logging.getLogger(__name__)

NO_MATCH_REASON = "No match found"

REASON_PREFIX = {
    BookRecordKind.JOURNAL_ENTRY: "Journal entry match",
    BookRecordKind.INVOICE: "Invoice match",
}


class Matcher:
    """
    Scores a bank transaction against every candidate book record.

    Three signals are tested per candidate (description, amount, date) and
    the number that fire gives the confidence. The matcher never mutates
    state.
    """

    def __init__(self, config: Optional[MatchingConfig] = None):
        """
        Initialize the matcher.

        Args:
            config: Matching tolerances and thresholds
        """
        self.config = config or MatchingConfig()
        self.description_signal = DescriptionSignal()
        self.amount_signal = AmountSignal(self.config.amount_tolerance_decimal)
        self.date_signal = DateSignal(self.config.date_tolerance_days)

    @property
    def signals(self) -> list[MatchSignal]:
        # Order used in match reasons
        return [self.description_signal, self.amount_signal, self.date_signal]

    def score(self, bank_txn: BankTransaction, record: BookRecord) -> MatchResult:
        """Score a single bank transaction / book record pair."""
        description_match = self.description_signal.evaluate(bank_txn, record)
        amount_match = self.amount_signal.evaluate(bank_txn, record)
        date_match = self.date_signal.evaluate(bank_txn, record)

        fired = [
            signal.label(record)
            for signal, hit in zip(self.signals, (description_match, amount_match, date_match))
            if hit
        ]
        reason = f"{REASON_PREFIX[record.kind]}: {', '.join(fired) if fired else 'none'}"

        return MatchResult(
            bank_transaction_id=bank_txn.id,
            book_transaction_id=record.id,
            confidence=calculate_confidence(amount_match, date_match, description_match),
            reason=reason,
            book_record_kind=record.kind,
            amount_match=amount_match,
            date_match=date_match,
            description_match=description_match,
        )

    def candidates(
        self,
        bank_txn: BankTransaction,
        journal_entries: Sequence[JournalEntry],
        invoices: Sequence[Invoice],
    ) -> Iterator[BookRecord]:
        """
        Yield candidate records: journal entries first, then invoices.

        Invoices are money owed to the business, so they are only candidates
        for credit (money in) transactions.
        """
        yield from journal_entries
        if bank_txn.direction == Direction.CREDIT or not self.config.invoices_for_credits_only:
            yield from invoices

    def find_match(
        self,
        bank_txn: BankTransaction,
        journal_entries: Sequence[JournalEntry],
        invoices: Sequence[Invoice],
    ) -> MatchResult:
        """
        Find the highest-confidence book record for a bank transaction.

        Ties keep the first candidate found, so a journal entry is never
        displaced by an invoice with the same confidence.

        Returns:
            The best match, or a result with no book id and confidence 0
        """
        best = MatchResult(
            bank_transaction_id=bank_txn.id,
            book_transaction_id=None,
            confidence=0,
            reason=NO_MATCH_REASON,
        )

        for record in self.candidates(bank_txn, journal_entries, invoices):
            result = self.score(bank_txn, record)
            if result.confidence > best.confidence:
                best = result

        logger.debug(
            f"Best match for {bank_txn.id}: {best.book_transaction_id} "
            f"(confidence {best.confidence})"
        )
        return best

    def recommend(
        self,
        bank_txn: BankTransaction,
        journal_entries: Sequence[JournalEntry],
        invoices: Sequence[Invoice],
    ) -> list[MatchResult]:
        """
        Every candidate at or above the recommendation threshold.

        Returns:
            Results sorted by descending confidence; equal confidences keep
            candidate order
        """
        minimum = self.config.recommendation_min_confidence
        results = [
            result
            for result in (
                self.score(bank_txn, record)
                for record in self.candidates(bank_txn, journal_entries, invoices)
            )
            if result.confidence >= minimum
        ]
        return sorted(results, key=lambda r: r.confidence, reverse=True)
