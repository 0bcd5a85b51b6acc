"""
CSV bank statement parser.
Locates the date, description and amount columns by header keyword.
"""

from datetime import datetime
from decimal import Decimal
from io import StringIO
from threading import Event
from typing import Optional
import logging

import pandas as pd

from ..models.ledger import FileType
from ..models.results import ParseResult
from ..utils.exceptions import FormatError
from .base import StatementParser, check_cancelled, make_row, parse_amount, parse_date

logger = logging.getLogger(__name__)


class CSVStatementParser(StatementParser):
    """
    Parser for CSV bank statements.

    The first line is a header. A column is selected when its header
    contains the configured keyword (case-insensitive). Amounts that do not
    parse count as zero and unparsable dates fall back to the current time.
    """

    file_type = FileType.CSV

    def parse(self, content: str, cancel_event: Optional[Event] = None) -> ParseResult:
        """
        Parse CSV statement content.

        Raises:
            FormatError: If the content is empty or a required column is missing
        """
        check_cancelled(cancel_event)
        result = ParseResult()

        def skip_bad_line(fields: list[str]) -> None:
            logger.warning(f"Skipping malformed CSV row: {fields}")
            result.skipped_count += 1
            return None

        try:
            df = pd.read_csv(
                StringIO(content),
                sep=self.config.input.csv.delimiter,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                skipinitialspace=True,
                engine="python",
                on_bad_lines=skip_bad_line,
            )
        except pd.errors.EmptyDataError as e:
            raise FormatError("CSV statement is empty") from e
        except pd.errors.ParserError as e:
            raise FormatError(f"Failed to read CSV statement: {e}") from e

        date_idx, desc_idx, amount_idx = self._locate_columns(list(df.columns))
        df = df.fillna("")

        now = datetime.now()
        for idx, row in df.iterrows():
            check_cancelled(cancel_event)

            date_str = str(row.iloc[date_idx]).strip()
            description = str(row.iloc[desc_idx]).strip()
            amount = parse_amount(row.iloc[amount_idx])

            if amount is None:
                logger.debug(f"Row {idx}: unparsable amount, using 0")
                amount = Decimal("0")

            txn_date = parse_date(date_str)
            if txn_date is None:
                logger.warning(f"Row {idx}: invalid date {date_str!r}, using current time")
                txn_date = now
                result.date_fallback_count += 1

            result.transactions.append(make_row(txn_date, description or "Unknown", amount))

        logger.info(
            f"Parsed {len(result.transactions)} CSV transactions "
            f"({result.date_fallback_count} date fallbacks, {result.skipped_count} skipped)"
        )
        return result

    def _locate_columns(self, columns: list) -> tuple[int, int, int]:
        """
        Find the date, description and amount column positions.

        Returns:
            Tuple of (date, description, amount) column indices
        """
        headers = [str(c).strip().lower() for c in columns]
        keywords = self.config.input.csv.column_keywords

        positions: dict[str, int] = {}
        missing: list[str] = []
        for name in ("date", "description", "amount"):
            keyword = keywords.get(name, name).lower()
            idx = next((i for i, h in enumerate(headers) if keyword in h), None)
            if idx is None:
                missing.append(name)
            else:
                positions[name] = idx

        if missing:
            raise FormatError(
                "CSV must have date, description, and amount columns "
                f"(missing: {', '.join(missing)})"
            )

        return positions["date"], positions["description"], positions["amount"]
