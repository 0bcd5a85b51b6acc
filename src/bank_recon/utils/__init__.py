"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    NotFoundError,
    StatementParseError,
    FormatError,
    EmptyImportError,
    ImportCancelledError,
    ConfigurationError,
    ValidationError,
    ReportGenerationError,
)
from .logging_config import setup_logging, get_logger

__all__ = [
    "ReconciliationError",
    "NotFoundError",
    "StatementParseError",
    "FormatError",
    "EmptyImportError",
    "ImportCancelledError",
    "ConfigurationError",
    "ValidationError",
    "ReportGenerationError",
    "setup_logging",
    "get_logger",
]
