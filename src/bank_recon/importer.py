"""
Statement import: validation, parsing and creation of ledger records.
"""

from pathlib import Path
from threading import Event
from typing import Optional, Union
import logging
import time

from .config import ReconConfig
from .models.ledger import BankTransaction, FileType
from .models.results import ImportResult, ValidationResult
from .parsers.base import read_statement_text
from .parsers.statement import get_parser
from .store.repository import LedgerRepository
from .utils.exceptions import EmptyImportError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def validate_statement(
    filename: str,
    size_bytes: int,
    file_type: Optional[Union[str, FileType]] = None,
    config: Optional[ReconConfig] = None,
) -> ValidationResult:
    """
    Pre-flight check of a statement file, before any parsing.

    Args:
        filename: File name, used to infer the type when none is given
        size_bytes: File size in bytes
        file_type: Explicit file type (csv, qif or ofx)
        config: Application configuration

    Returns:
        Validation result listing the problem found
    """
    input_config = (config or ReconConfig()).input

    candidate = file_type if file_type else Path(filename).suffix
    try:
        resolved = FileType.from_value(candidate) if candidate else None
    except ValueError:
        resolved = None

    if resolved is None or resolved.value not in input_config.supported_file_types:
        return ValidationResult(
            is_valid=False,
            errors=["Unsupported file format. Please upload CSV, QIF, or OFX file."],
        )

    if size_bytes > input_config.max_file_size_bytes:
        limit_mb = input_config.max_file_size_bytes / (1024 * 1024)
        return ValidationResult(
            is_valid=False,
            errors=[f"File size exceeds {limit_mb:g}MB limit."],
            file_type=resolved,
        )

    return ValidationResult(is_valid=True, file_type=resolved)


def validate_statement_file(
    file_path: Path,
    file_type: Optional[Union[str, FileType]] = None,
    config: Optional[ReconConfig] = None,
) -> ValidationResult:
    """Validate a statement file on disk without reading its content."""
    try:
        size_bytes = file_path.stat().st_size
    except OSError as e:
        logger.error(f"Cannot access statement file {file_path}: {e}")
        return ValidationResult(is_valid=False, errors=[f"Cannot access file: {file_path}"])
    return validate_statement(file_path.name, size_bytes, file_type, config)


def make_statement_number(account_id: str) -> str:
    """Statement number from the account id tail and the current time."""
    millis = str(int(time.time() * 1000))
    return f"STMT-{account_id[-6:]}-{millis[-4:]}"


class ImportOrchestrator:
    """
    Turns a raw statement file into a statement and its transactions.

    Validation (extension, size) happens before any parsing. The statement
    and its transactions are created under the account's writer lock.
    """

    def __init__(self, store: LedgerRepository, config: Optional[ReconConfig] = None):
        """
        Initialize the orchestrator.

        Args:
            store: Bank ledger store that receives the imported records
            config: Application configuration
        """
        self.store = store
        self.config = config or ReconConfig()

    def validate_statement(
        self,
        filename: str,
        size_bytes: int,
        file_type: Optional[Union[str, FileType]] = None,
    ) -> ValidationResult:
        """Pre-flight check of a statement file against this orchestrator's config."""
        return validate_statement(filename, size_bytes, file_type, self.config)

    def validate_statement_file(
        self, file_path: Path, file_type: Optional[Union[str, FileType]] = None
    ) -> ValidationResult:
        """Validate a statement file on disk without reading its content."""
        return validate_statement_file(file_path, file_type, self.config)

    def import_statement(
        self,
        account_id: str,
        file_type: Union[str, FileType],
        content: str,
        cancel_event: Optional[Event] = None,
    ) -> ImportResult:
        """
        Parse statement content and store it against an account.

        Args:
            account_id: Bank account receiving the statement
            file_type: csv, qif or ofx
            content: Raw statement text
            cancel_event: Optional cancellation signal for long parses

        Returns:
            The new statement, its transactions and degraded-row counts

        Raises:
            NotFoundError: If the account does not exist
            FormatError: If a CSV statement lacks a required column
            EmptyImportError: If no transactions were parsed
        """
        if self.store.get_account(account_id) is None:
            raise NotFoundError(f"Bank account not found: {account_id}")

        parsed = get_parser(file_type, self.config).parse(content, cancel_event=cancel_event)
        if not parsed.transactions:
            raise EmptyImportError("No transactions found in file")

        start_date, end_date = parsed.date_range

        with self.store.account_lock(account_id):
            account = self.store.get_account(account_id)
            if account is None:
                raise NotFoundError(f"Bank account not found: {account_id}")

            statement = self.store.create_statement(
                bank_account_id=account_id,
                statement_number=make_statement_number(account_id),
                start_date=start_date,
                end_date=end_date,
                closing_balance=account.balance,
                currency=account.currency,
            )

            transactions: list[BankTransaction] = [
                self.store.create_transaction(
                    statement_id=statement.id,
                    transaction_date=row.date,
                    description=row.description,
                    amount=row.amount,
                    direction=row.direction,
                )
                for row in parsed.transactions
            ]

        if parsed.date_fallback_count:
            logger.warning(
                f"{parsed.date_fallback_count} rows in statement {statement.statement_number} "
                "had unparsable dates and were dated today"
            )
        logger.info(
            f"Imported {len(transactions)} transactions into statement "
            f"{statement.statement_number} for account {account_id}"
        )

        return ImportResult(
            statement=statement,
            transactions=transactions,
            imported_count=len(transactions),
            date_fallback_count=parsed.date_fallback_count,
            skipped_count=parsed.skipped_count,
        )

    def import_file(
        self,
        account_id: str,
        file_path: Path,
        file_type: Optional[Union[str, FileType]] = None,
        cancel_event: Optional[Event] = None,
    ) -> ImportResult:
        """
        Validate, read and import a statement file.

        Raises:
            ValidationError: If the file fails pre-flight validation
            StatementParseError: If the file cannot be read with the configured encoding
        """
        validation = self.validate_statement_file(file_path, file_type)
        if not validation.is_valid:
            raise ValidationError("; ".join(validation.errors), validation.errors)

        content = read_statement_text(file_path, self.config.input.encoding)

        return self.import_statement(account_id, validation.file_type, content, cancel_event)
