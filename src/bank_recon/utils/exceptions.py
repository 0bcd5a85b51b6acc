"""Custom exceptions for the bank reconciliation package."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class NotFoundError(ReconciliationError):
    """Unknown bank account, statement or transaction id."""

    pass


class StatementParseError(ReconciliationError):
    """Error parsing a bank statement file."""

    pass


class FormatError(StatementParseError):
    """Statement content does not have the required structure."""

    pass


class EmptyImportError(ReconciliationError):
    """No transactions could be parsed from a statement."""

    pass


class ImportCancelledError(ReconciliationError):
    """Statement parsing was cancelled by the caller."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class ValidationError(ReconciliationError):
    """Data validation error."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or [message]


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
