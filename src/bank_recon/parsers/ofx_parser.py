"""
OFX bank statement parser.

Extracts ``<STMTTRN>`` blocks with regular expressions rather than a full
SGML/XML parse, so both OFX 1.x (unclosed tags) and OFX 2.x files work.
"""

from datetime import datetime
from threading import Event
from typing import Optional
import logging
import re

from ..models.ledger import FileType
from ..models.results import ParseResult
from .base import StatementParser, check_cancelled, make_row, parse_amount, parse_date

logger = logging.getLogger(__name__)

TRANSACTION_BLOCK = re.compile(r"<STMTTRN>(.*?)</STMTTRN>", re.IGNORECASE | re.DOTALL)

# YYYYMMDD[HHMM[SS]][.XXX][[gmt offset:tz name]]
OFX_DATE = re.compile(r"^(\d{8})(\d{4}(\d{2})?)?")


def _field(block: str, tag: str) -> Optional[str]:
    """Return the value of ``<TAG>value`` (or ``TAG:value``) inside a block."""
    match = re.search(rf"{tag}\s*(?:>|:)\s*([^<\r\n]*)", block, re.IGNORECASE)
    return match.group(1).strip() if match else None


def parse_ofx_date(value: str) -> Optional[datetime]:
    """Parse an OFX datetime, falling back to a general date parser."""
    match = OFX_DATE.match(value)
    if match:
        digits = match.group(1) + (match.group(2) or "")
        fmt = {8: "%Y%m%d", 12: "%Y%m%d%H%M", 14: "%Y%m%d%H%M%S"}[len(digits)]
        try:
            return datetime.strptime(digits, fmt)
        except ValueError:
            return None
    return parse_date(value)


class OFXStatementParser(StatementParser):
    """
    Parser for OFX statements.

    A block is emitted only when it has a date, a non-zero amount and the
    date parses. Bad blocks are logged and skipped. The description is the
    MEMO, or the NAME when ``input.ofx.name_fallback`` is set.
    """

    file_type = FileType.OFX

    def parse(self, content: str, cancel_event: Optional[Event] = None) -> ParseResult:
        """Parse OFX statement content."""
        result = ParseResult()

        for block_no, match in enumerate(TRANSACTION_BLOCK.finditer(content or ""), start=1):
            check_cancelled(cancel_event)
            block = match.group(1)

            date_str = _field(block, "DTPOSTED") or ""
            amount = parse_amount(_field(block, "TRNAMT"))
            description = _field(block, "MEMO") or ""
            if not description and self.config.input.ofx.name_fallback:
                description = _field(block, "NAME") or ""

            if not date_str or amount is None or amount == 0:
                logger.debug(f"Block {block_no}: missing date or zero amount, skipping")
                result.skipped_count += 1
                continue

            txn_date = parse_ofx_date(date_str)
            if txn_date is None:
                logger.error(f"Block {block_no}: error parsing OFX date {date_str!r}")
                result.skipped_count += 1
                continue

            result.transactions.append(make_row(txn_date, description or "Unknown", amount))

        logger.info(
            f"Parsed {len(result.transactions)} OFX transactions "
            f"({result.skipped_count} skipped)"
        )
        return result
