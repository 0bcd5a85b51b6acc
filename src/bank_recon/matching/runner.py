"""
Auto-match runner.
Applies high-confidence matches to pending bank transactions.
"""

from datetime import datetime
from typing import Optional
import logging

from ..books import BookRecordSource
from ..config import MatchingConfig
from ..models.ledger import BankTransaction
from ..models.results import AutoMatchResult, MatchResult
from ..store.repository import LedgerRepository
from .matcher import Matcher

logger = logging.getLogger(__name__)


class AutoMatchRunner:
    """
    One-shot batch matcher over every pending bank transaction.

    Matches at or above the auto-match threshold are written through the
    ledger store; everything else stays pending. Writes are serialized per
    bank account and each transaction is re-read under the account lock,
    so overlapping runs never match the same transaction twice.
    """

    def __init__(
        self,
        store: LedgerRepository,
        books: BookRecordSource,
        config: Optional[MatchingConfig] = None,
        matcher: Optional[Matcher] = None,
    ):
        """
        Initialize the runner.

        Args:
            store: Bank ledger store
            books: Source of journal entries and invoices
            config: Matching configuration
            matcher: Matcher to use (built from config if omitted)
        """
        self.store = store
        self.books = books
        self.config = config or MatchingConfig()
        self.matcher = matcher or Matcher(self.config)

    def run(self, account_id: Optional[str] = None) -> AutoMatchResult:
        """
        Run auto-matching over pending transactions.

        Args:
            account_id: Restrict the run to one bank account (all if None)

        Returns:
            Counts and the list of applied matches
        """
        start_time = datetime.now()
        pending_by_account = self._pending_by_account(account_id)
        total_processed = sum(len(txns) for txns in pending_by_account.values())

        journal_entries = self.books.list_all_journal_entries()
        invoices = self.books.list_all_invoices()
        logger.info(
            f"Starting auto-match: {total_processed} pending transactions, "
            f"{len(journal_entries)} journal entries, {len(invoices)} invoices"
        )

        matches: list[MatchResult] = []
        threshold = self.config.auto_match_threshold

        for acct_id, transactions in pending_by_account.items():
            with self.store.account_lock(acct_id):
                for txn in transactions:
                    # Another run may have matched it since the snapshot
                    current = self.store.get_transaction(txn.id)
                    if current is None or current.is_matched:
                        continue

                    match = self.matcher.find_match(current, journal_entries, invoices)
                    if match.book_transaction_id and match.confidence >= threshold:
                        if self.store.match_transaction(current.id, match.book_transaction_id):
                            matches.append(match)

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Auto-match complete in {elapsed:.2f}s: {len(matches)} of "
            f"{total_processed} transactions matched"
        )

        return AutoMatchResult(
            matched_count=len(matches),
            total_processed=total_processed,
            matches=matches,
        )

    def recommendations(self, bank_transaction_id: str) -> list[MatchResult]:
        """Ranked candidates for one transaction; empty for unknown ids."""
        bank_txn = self.store.get_transaction(bank_transaction_id)
        if bank_txn is None:
            return []

        return self.matcher.recommend(
            bank_txn,
            self.books.list_all_journal_entries(),
            self.books.list_all_invoices(),
        )

    def _pending_by_account(
        self, account_id: Optional[str]
    ) -> dict[str, list[BankTransaction]]:
        grouped: dict[str, list[BankTransaction]] = {}
        for txn in self.store.get_unmatched_transactions():
            acct_id = self.store.account_id_for_transaction(txn.id)
            if acct_id is None:
                logger.warning(f"Transaction {txn.id} has no owning account, skipping")
                continue
            if account_id is not None and acct_id != account_id:
                continue
            grouped.setdefault(acct_id, []).append(txn)
        return grouped
