"""Dispatch from a statement file type to its parser."""

from threading import Event
from typing import Optional, Union

from ..config import ReconConfig
from ..models.ledger import FileType
from ..models.results import ParseResult
from ..utils.exceptions import ValidationError
from .base import StatementParser
from .csv_parser import CSVStatementParser
from .ofx_parser import OFXStatementParser
from .qif_parser import QIFStatementParser

PARSERS: dict[FileType, type[StatementParser]] = {
    FileType.CSV: CSVStatementParser,
    FileType.QIF: QIFStatementParser,
    FileType.OFX: OFXStatementParser,
}


def get_parser(
    file_type: Union[str, FileType], config: Optional[ReconConfig] = None
) -> StatementParser:
    """
    Return the parser for a file type.

    Raises:
        ValidationError: If the file type is not supported
    """
    try:
        resolved = FileType.from_value(file_type)
    except ValueError as e:
        raise ValidationError(f"Unsupported file type: {file_type}") from e
    return PARSERS[resolved](config)


def parse_statement(
    file_type: Union[str, FileType],
    content: str,
    config: Optional[ReconConfig] = None,
    cancel_event: Optional[Event] = None,
) -> ParseResult:
    """Parse raw statement content of the given format."""
    return get_parser(file_type, config).parse(content, cancel_event=cancel_event)
