"""Data models for bank accounts, statements and transactions."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(Enum):
    """Kind of bank account."""

    CHECKING = "checking"
    SAVINGS = "savings"


class Direction(Enum):
    """Transaction direction from the bank's perspective."""

    CREDIT = "credit"  # Money in
    DEBIT = "debit"  # Money out


class StatementStatus(Enum):
    """Statement lifecycle: imported until its difference balances."""

    IMPORTED = "imported"
    RECONCILED = "reconciled"


class TransactionStatus(Enum):
    """Bank transaction matching state."""

    PENDING = "pending"
    MATCHED = "matched"


class FileType(Enum):
    """Supported statement file formats."""

    CSV = "csv"
    QIF = "qif"
    OFX = "ofx"

    @classmethod
    def from_value(cls, value: "str | FileType") -> "FileType":
        """Coerce a string such as "CSV" or ".ofx" to a file type."""
        if isinstance(value, FileType):
            return value
        return cls(str(value).strip().lower().lstrip("."))


@dataclass
class BankAccount:
    """A bank account whose balance is a running total independent of statements."""

    id: str
    name: str
    bank_name: str
    account_number: str
    account_type: AccountType
    currency: str
    opening_balance: Decimal
    balance: Decimal
    is_primary: bool = False
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


@dataclass
class BankStatement:
    """An imported batch of bank transactions covering a date range."""

    id: str
    bank_account_id: str
    statement_number: str
    start_date: date
    end_date: date
    # Snapshot of the account balance taken at import time
    closing_balance: Decimal
    currency: str
    status: StatementStatus = StatementStatus.IMPORTED
    imported_at: datetime = field(default_factory=datetime.now)
    reconciled_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_reconciled(self) -> bool:
        return self.status == StatementStatus.RECONCILED


@dataclass
class BankTransaction:
    """
    A single line of an imported bank statement.

    The amount is always non-negative; ``direction`` carries the sign.
    ``status`` is MATCHED exactly when ``matched_book_transaction_id`` is set.
    """

    id: str
    statement_id: str
    transaction_date: datetime
    description: str
    amount: Decimal
    direction: Direction
    category: Optional[str] = None
    reference: Optional[str] = None
    status: TransactionStatus = TransactionStatus.PENDING
    matched_book_transaction_id: Optional[str] = None
    matched_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_matched(self) -> bool:
        return self.status == TransactionStatus.MATCHED

    @property
    def signed_amount(self) -> Decimal:
        """Amount with debits negative."""
        return -self.amount if self.direction == Direction.DEBIT else self.amount
