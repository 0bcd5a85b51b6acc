"""Configuration loader and validation for reconciliation settings."""

from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024


class CSVInputConfig(BaseModel):
    """Settings for CSV statement parsing."""

    delimiter: str = ","
    # Header substrings used to locate each required column
    column_keywords: dict[str, str] = Field(
        default_factory=lambda: {
            "date": "date",
            "description": "description",
            "amount": "amount",
        }
    )


class BookInputConfig(BaseModel):
    """Column mappings for book-record CSV exports."""

    journal_columns: dict[str, str] = Field(
        default_factory=lambda: {
            "id": "id",
            "description": "description",
            "amount": "amount",
            "date": "date",
        }
    )
    invoice_columns: dict[str, str] = Field(
        default_factory=lambda: {
            "id": "id",
            "invoice_number": "invoice_number",
            "total": "total",
            "due_date": "due_date",
            "issued_date": "issued_date",
        }
    )


class OFXInputConfig(BaseModel):
    """Settings for OFX statements."""

    # Use <NAME> as the description when a transaction has no <MEMO>
    name_fallback: bool = False


class InputConfig(BaseModel):
    """Configuration for statement and book-record input."""

    encoding: str = "utf-8"
    max_file_size_bytes: int = MAX_FILE_SIZE_BYTES
    supported_file_types: list[str] = Field(default_factory=lambda: ["csv", "qif", "ofx"])
    csv: CSVInputConfig = Field(default_factory=CSVInputConfig)
    ofx: OFXInputConfig = Field(default_factory=OFXInputConfig)
    books: BookInputConfig = Field(default_factory=BookInputConfig)


class MatchingConfig(BaseModel):
    """Tolerances and thresholds for the confidence matcher."""

    amount_tolerance: float = 0.01
    date_tolerance_days: int = 2
    auto_match_threshold: int = 3
    recommendation_min_confidence: int = 1
    invoices_for_credits_only: bool = True

    @property
    def amount_tolerance_decimal(self) -> Decimal:
        return Decimal(str(self.amount_tolerance))


class ReconciliationConfig(BaseModel):
    """Settings for reconciliation arithmetic and reporting."""

    balance_tolerance: float = 0.01
    recommendation_preview_limit: int = 5

    @property
    def balance_tolerance_decimal(self) -> Decimal:
        return Decimal(str(self.balance_tolerance))


class SeedAccountConfig(BaseModel):
    """Account created by an explicit seeding call."""

    name: str = "Main Business Account"
    bank_name: str = "HSBC"
    account_number: str = "123456789"
    account_type: str = "checking"
    currency: str = "HKD"
    opening_balance: float = 100000.0
    is_primary: bool = True


class LedgerConfig(BaseModel):
    """Bank ledger store behaviour."""

    enforce_single_primary: bool = False
    seed_default_account: bool = False
    seed_account: SeedAccountConfig = Field(default_factory=SeedAccountConfig)


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "reconciliation_report_{date}_{time}.xlsx"
    include_timestamp: bool = True


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    statements: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Statements"))
    matched: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Matched Transactions")
    )
    unmatched: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Unmatched Transactions")
    )
    recommendations: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Recommendations")
    )


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ReconConfig(BaseModel):
    """Main configuration model for bank reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    reconciliation: ReconciliationConfig = Field(default_factory=ReconciliationConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "input": {
            "encoding": "utf-8",
            "max_file_size_bytes": MAX_FILE_SIZE_BYTES,
            "supported_file_types": ["csv", "qif", "ofx"],
            "csv": {
                "delimiter": ",",
                "column_keywords": {
                    "date": "date",
                    "description": "description",
                    "amount": "amount",
                },
            },
            "ofx": {
                "name_fallback": False,
            },
            "books": {
                "journal_columns": {
                    "id": "id",
                    "description": "description",
                    "amount": "amount",
                    "date": "date",
                },
                "invoice_columns": {
                    "id": "id",
                    "invoice_number": "invoice_number",
                    "total": "total",
                    "due_date": "due_date",
                    "issued_date": "issued_date",
                },
            },
        },
        "matching": {
            "amount_tolerance": 0.01,
            "date_tolerance_days": 2,
            "auto_match_threshold": 3,
            "recommendation_min_confidence": 1,
            "invoices_for_credits_only": True,
        },
        "reconciliation": {
            "balance_tolerance": 0.01,
            "recommendation_preview_limit": 5,
        },
        "ledger": {
            "enforce_single_primary": False,
            "seed_default_account": False,
            "seed_account": {
                "name": "Main Business Account",
                "bank_name": "HSBC",
                "account_number": "123456789",
                "account_type": "checking",
                "currency": "HKD",
                "opening_balance": 100000.0,
                "is_primary": True,
            },
        },
        "output": {
            "excel": {
                "filename_template": "reconciliation_report_{date}_{time}.xlsx",
                "include_timestamp": True,
            },
            "sheets": {
                "summary": {"enabled": True, "name": "Summary"},
                "statements": {"enabled": True, "name": "Statements"},
                "matched": {"enabled": True, "name": "Matched Transactions"},
                "unmatched": {"enabled": True, "name": "Unmatched Transactions"},
                "recommendations": {"enabled": True, "name": "Recommendations"},
            },
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    }


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Bank statement reconciliation configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
