"""Parsers for bank statements (CSV, QIF, OFX) and book record exports."""

from .base import StatementParser
from .book_parser import BookRecordParser
from .csv_parser import CSVStatementParser
from .ofx_parser import OFXStatementParser
from .qif_parser import QIFStatementParser
from .statement import get_parser, parse_statement

__all__ = [
    "StatementParser",
    "BookRecordParser",
    "CSVStatementParser",
    "OFXStatementParser",
    "QIFStatementParser",
    "get_parser",
    "parse_statement",
]
