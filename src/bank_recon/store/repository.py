"""
Repository interface for the bank ledger.

All mutation of accounts, statements and transactions goes through these
operations so the ledger invariants live in one place.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Any, ContextManager, Optional

from ..models.ledger import (
    AccountType,
    BankAccount,
    BankStatement,
    BankTransaction,
    Direction,
    StatementStatus,
)


class LedgerRepository(ABC):
    """Abstract store of bank accounts, statements and transactions."""

    # Accounts

    @abstractmethod
    def create_account(
        self,
        name: str,
        bank_name: str,
        account_number: str,
        account_type: AccountType,
        currency: str,
        opening_balance: Decimal = Decimal("0"),
        is_primary: bool = False,
    ) -> BankAccount:
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[BankAccount]:
        pass

    @abstractmethod
    def list_accounts(self) -> list[BankAccount]:
        """Active accounts only."""
        pass

    @abstractmethod
    def update_account(self, account_id: str, **updates: Any) -> Optional[BankAccount]:
        """Partial update; the id never changes. Returns None for unknown ids."""
        pass

    @abstractmethod
    def delete_account(self, account_id: str) -> bool:
        pass

    @abstractmethod
    def adjust_balance(self, account_id: str, delta: Decimal) -> Optional[BankAccount]:
        """Move the running balance by a signed amount. Returns None for unknown ids."""
        pass

    def list_accounts_by_type(self, account_type: AccountType) -> list[BankAccount]:
        return [a for a in self.list_accounts() if a.account_type == account_type]

    def get_primary_account(self) -> Optional[BankAccount]:
        return next((a for a in self.list_accounts() if a.is_primary), None)

    # Statements

    @abstractmethod
    def create_statement(
        self,
        bank_account_id: str,
        statement_number: str,
        start_date: date,
        end_date: date,
        closing_balance: Decimal,
        currency: str,
        imported_at: Optional[datetime] = None,
    ) -> BankStatement:
        """Raises NotFoundError for an unknown account."""
        pass

    @abstractmethod
    def get_statement(self, statement_id: str) -> Optional[BankStatement]:
        pass

    @abstractmethod
    def list_statements_by_account(self, bank_account_id: str) -> list[BankStatement]:
        """Newest import first."""
        pass

    @abstractmethod
    def update_statement_status(
        self,
        statement_id: str,
        status: StatementStatus,
        reconciled_at: Optional[datetime] = None,
    ) -> bool:
        pass

    # Transactions

    @abstractmethod
    def create_transaction(
        self,
        statement_id: str,
        transaction_date: datetime,
        description: str,
        amount: Decimal,
        direction: Direction,
        category: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> BankTransaction:
        """Raises NotFoundError for an unknown statement."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[BankTransaction]:
        pass

    @abstractmethod
    def list_transactions_by_statement(self, statement_id: str) -> list[BankTransaction]:
        """Ordered by transaction date."""
        pass

    @abstractmethod
    def list_transactions(self) -> list[BankTransaction]:
        pass

    @abstractmethod
    def match_transaction(self, transaction_id: str, book_transaction_id: str) -> bool:
        """Mark as matched. Returns False for unknown ids, never raises."""
        pass

    @abstractmethod
    def unmatch_transaction(self, transaction_id: str) -> bool:
        """Return to pending. Returns False for unknown ids, never raises."""
        pass

    @abstractmethod
    def account_lock(self, bank_account_id: str) -> ContextManager:
        """Writer lock serializing imports and matching for one account."""
        pass

    def get_unmatched_transactions(self) -> list[BankTransaction]:
        return [t for t in self.list_transactions() if not t.is_matched]

    def get_matched_transactions(self) -> list[BankTransaction]:
        return [t for t in self.list_transactions() if t.is_matched]

    def account_id_for_transaction(self, transaction_id: str) -> Optional[str]:
        transaction = self.get_transaction(transaction_id)
        if transaction is None:
            return None
        statement = self.get_statement(transaction.statement_id)
        return statement.bank_account_id if statement else None
