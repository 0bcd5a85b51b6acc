"""
Base class and value helpers shared by the statement parsers.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from threading import Event
from typing import Any, Optional
import logging
import re

import pandas as pd

from ..config import ReconConfig
from ..models.ledger import Direction, FileType
from ..models.results import ParsedTransaction, ParseResult
from ..utils.exceptions import ImportCancelledError, StatementParseError

logger = logging.getLogger(__name__)

# Leading signed decimal; trailing text such as a currency code is ignored
NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


class StatementParser(ABC):
    """
    Converts raw statement text into normalized rows.

    Parsing is a single pass over the content. Row-level problems are
    logged and counted on the ParseResult rather than aborting the parse.
    """

    file_type: FileType

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the parser with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config or ReconConfig()

    @abstractmethod
    def parse(self, content: str, cancel_event: Optional[Event] = None) -> ParseResult:
        """
        Parse statement content.

        Args:
            content: Statement file content as text
            cancel_event: When set, parsing stops with ImportCancelledError

        Returns:
            Parsed rows and degraded-row counts
        """
        pass

    def parse_file(
        self, file_path: Path, cancel_event: Optional[Event] = None
    ) -> ParseResult:
        """Read a statement file with the configured encoding and parse it."""
        logger.info(f"Parsing {self.file_type.value.upper()} statement: {file_path}")
        content = read_statement_text(file_path, self.config.input.encoding)
        return self.parse(content, cancel_event=cancel_event)


def read_statement_text(file_path: Path, encoding: str = "utf-8") -> str:
    """
    Read a statement file as text.

    Raises:
        StatementParseError: If the file cannot be opened or decoded
    """
    try:
        with open(file_path, "r", encoding=encoding) as f:
            return f.read()
    except (OSError, UnicodeError) as e:
        logger.error(f"Failed to read statement file {file_path}: {e}")
        raise StatementParseError(f"Failed to read statement file {file_path}: {e}") from e


def check_cancelled(cancel_event: Optional[Event]) -> None:
    """Raise ImportCancelledError if the caller has requested cancellation."""
    if cancel_event is not None and cancel_event.is_set():
        raise ImportCancelledError("Statement parsing cancelled")


def parse_amount(amount_value: Any) -> Optional[Decimal]:
    """
    Parse a signed amount from statement text.

    Currency symbols, thousands separators and surrounding whitespace are
    ignored; an accounting-style "(12.50)" is negative. Only the leading
    number is read, so "4.50 USD" is 4.50.

    Returns:
        Decimal amount or None if the value is not a finite number
    """
    if amount_value is None:
        return None

    text = str(amount_value).strip()
    if not text:
        return None

    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]

    for symbol in ("$", "€", "£", "¥", ",", " "):
        text = text.replace(symbol, "")

    match = NUMBER_PREFIX.match(text)
    if match is None:
        return None

    try:
        amount = Decimal(match.group(0))
    except InvalidOperation:
        return None
    return -amount if negative else amount


def parse_date(date_value: Any) -> Optional[datetime]:
    """
    Parse a date or timestamp string.

    Returns:
        Naive datetime or None if the value cannot be parsed
    """
    if date_value is None:
        return None

    text = str(date_value).strip()
    if not text:
        return None

    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None

    if pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_localize(None)
    return parsed.to_pydatetime()


def direction_for(signed_amount: Decimal) -> Direction:
    """Negative amounts are debits, everything else is a credit."""
    return Direction.DEBIT if signed_amount < 0 else Direction.CREDIT


def make_row(date: datetime, description: str, signed_amount: Decimal) -> ParsedTransaction:
    """Build a normalized row from a signed amount."""
    return ParsedTransaction(
        date=date,
        description=description,
        amount=abs(signed_amount),
        direction=direction_for(signed_amount),
    )
