"""
QIF (Quicken Interchange Format) bank statement parser.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from threading import Event
from typing import Optional
import logging

from ..models.ledger import FileType
from ..models.results import ParseResult
from ..utils.exceptions import StatementParseError
from .base import StatementParser, check_cancelled, make_row, parse_amount, parse_date

logger = logging.getLogger(__name__)


@dataclass
class _PendingTransaction:
    date: datetime
    description: str = ""
    amount: Decimal = Decimal("0")


class QIFStatementParser(StatementParser):
    """
    Line-oriented parser for QIF statements.

    Record lines:
        D  date, starts a new transaction
        T  signed amount
        P  payee, used as the description
        ^  end of transaction

    A transaction is emitted at ``^`` only when its amount is non-zero.
    Other record types (N, M, L, headers) are ignored.
    """

    file_type = FileType.QIF

    def parse(self, content: str, cancel_event: Optional[Event] = None) -> ParseResult:
        """Parse QIF statement content."""
        if content is None:
            raise StatementParseError("QIF content is missing")

        result = ParseResult()
        current: Optional[_PendingTransaction] = None

        for line_no, line in enumerate(content.splitlines(), start=1):
            check_cancelled(cancel_event)
            trimmed = line.strip()
            if not trimmed:
                continue

            code, value = trimmed[0], trimmed[1:].strip()

            if code == "D":
                current = _PendingTransaction(date=self._parse_qif_date(value, line_no, result))

            elif code == "T":
                if current is not None:
                    amount = parse_amount(value)
                    if amount is None:
                        logger.warning(f"Line {line_no}: invalid QIF amount {value!r}")
                        amount = Decimal("0")
                    current.amount = amount

            elif code == "P":
                if current is not None:
                    current.description = value

            elif code == "^":
                if current is not None:
                    if abs(current.amount) > 0:
                        result.transactions.append(
                            make_row(current.date, current.description, current.amount)
                        )
                    else:
                        logger.debug(f"Line {line_no}: dropping zero-amount QIF transaction")
                        result.skipped_count += 1
                current = None

        logger.info(
            f"Parsed {len(result.transactions)} QIF transactions "
            f"({result.date_fallback_count} date fallbacks, {result.skipped_count} skipped)"
        )
        return result

    def _parse_qif_date(self, value: str, line_no: int, result: ParseResult) -> datetime:
        """
        Parse a QIF date such as ``01/05/2025`` or ``1/5'25``.

        Unparsable dates fall back to the current time and are counted.
        """
        txn_date = parse_date(value.replace("'", "/"))
        if txn_date is None:
            logger.warning(f"Line {line_no}: invalid QIF date {value!r}, using current time")
            result.date_fallback_count += 1
            return datetime.now()
        return txn_date
