"""
Match signals for pairing bank transactions with book records.
Each signal is a yes/no test on one field; confidence comes from how many fire.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
import math
import re

from ..models.books import BookRecord, BookRecordKind
from ..models.ledger import BankTransaction

AMOUNT_TOLERANCE = Decimal("0.01")
DATE_TOLERANCE_DAYS = 2

# Signal count -> confidence. Compound matches are worth more than the sum
# of their parts.
CONFIDENCE_BY_SIGNAL_COUNT = {0: 0, 1: 1, 2: 3, 3: 5}

_WHITESPACE = re.compile(r"\s+")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")


def amount_matches(
    bank_amount: Decimal, book_amount: Decimal, tolerance: Decimal = AMOUNT_TOLERANCE
) -> bool:
    """Amounts agree within an absolute tolerance."""
    return abs(Decimal(str(bank_amount)) - Decimal(str(book_amount))) <= tolerance


def date_matches(
    bank_date: datetime, book_date: datetime, tolerance_days: int = DATE_TOLERANCE_DAYS
) -> bool:
    """Dates agree when the day difference, rounded up, is within tolerance."""
    diff_days = abs((book_date - bank_date).total_seconds()) / 86400
    return math.ceil(diff_days) <= tolerance_days


def description_matches(bank_description: str, book_description: str) -> bool:
    """
    Case-insensitive description comparison.

    Also true when one text, with its whitespace or its non-alphanumeric
    characters removed, equals the other text. A stripped form is never
    compared with its own source. Empty text never matches.
    """
    if not bank_description or not book_description:
        return False

    bank_lower = bank_description.lower()
    book_lower = book_description.lower()
    if bank_lower == book_lower:
        return True

    for pattern in (_WHITESPACE, _NON_ALPHANUMERIC):
        if pattern.sub("", bank_lower) == book_lower:
            return True
        if pattern.sub("", book_lower) == bank_lower:
            return True

    return False


def calculate_confidence(amount_match: bool, date_match: bool, description_match: bool) -> int:
    """Map the number of matching signals to a confidence of 0, 1, 3 or 5."""
    return CONFIDENCE_BY_SIGNAL_COUNT[sum([amount_match, date_match, description_match])]


class MatchSignal(ABC):
    """Abstract base class for match signals."""

    name: str

    @abstractmethod
    def evaluate(self, bank_txn: BankTransaction, record: BookRecord) -> bool:
        """
        Test one field of a bank transaction against a book record.

        Args:
            bank_txn: Bank transaction being matched
            record: Candidate journal entry or invoice

        Returns:
            True if the signal fires
        """
        pass

    def label(self, record: BookRecord) -> str:
        """Name of the signal in a human-readable match reason."""
        return self.name


class AmountSignal(MatchSignal):
    """Amount within an absolute tolerance (one cent by default)."""

    name = "amount"

    def __init__(self, tolerance: Decimal = AMOUNT_TOLERANCE):
        self.tolerance = tolerance

    def evaluate(self, bank_txn: BankTransaction, record: BookRecord) -> bool:
        return amount_matches(bank_txn.amount, record.match_amount, self.tolerance)


class DateSignal(MatchSignal):
    """Posting date within a number of days."""

    name = "date"

    def __init__(self, tolerance_days: int = DATE_TOLERANCE_DAYS):
        self.tolerance_days = tolerance_days

    def evaluate(self, bank_txn: BankTransaction, record: BookRecord) -> bool:
        return date_matches(bank_txn.transaction_date, record.match_date, self.tolerance_days)


class DescriptionSignal(MatchSignal):
    """Description equal to the record's label (invoice number for invoices)."""

    name = "description"

    def evaluate(self, bank_txn: BankTransaction, record: BookRecord) -> bool:
        return description_matches(bank_txn.description, record.label)

    def label(self, record: BookRecord) -> str:
        if record.kind == BookRecordKind.INVOICE:
            return "invoice number"
        return self.name
