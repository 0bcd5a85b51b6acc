"""
In-memory implementation of the bank ledger repository.
"""

from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterator, Optional
import logging
import threading
import uuid

from ..config import LedgerConfig
from ..models.ledger import (
    AccountType,
    BankAccount,
    BankStatement,
    BankTransaction,
    Direction,
    StatementStatus,
    TransactionStatus,
)
from ..utils.exceptions import NotFoundError, ValidationError
from .repository import LedgerRepository

logger = logging.getLogger(__name__)

# Fields update_account accepts; "id" and the timestamps are managed here
UPDATABLE_ACCOUNT_FIELDS = {
    "name",
    "bank_name",
    "account_number",
    "account_type",
    "currency",
    "opening_balance",
    "balance",
    "is_primary",
    "is_active",
}


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


class InMemoryLedgerStore(LedgerRepository):
    """
    Ledger store keeping accounts, statements and transactions in dicts.

    The store is an explicit object owned by the application; nothing is
    created at import time. Reads return copies, so callers iterate over a
    consistent snapshot and cannot change stored records behind the
    store's back.
    """

    def __init__(self, config: Optional[LedgerConfig] = None):
        self.config = config or LedgerConfig()
        self._accounts: dict[str, BankAccount] = {}
        self._statements: dict[str, BankStatement] = {}
        self._transactions: dict[str, BankTransaction] = {}
        self._lock = threading.RLock()
        self._account_locks: dict[str, threading.RLock] = {}

    # Accounts

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
        now = datetime.now()
        opening = Decimal(str(opening_balance or 0))
        account = BankAccount(
            id=_new_id("bank"),
            name=name,
            bank_name=bank_name,
            account_number=account_number,
            account_type=AccountType(account_type),
            currency=currency,
            opening_balance=opening,
            balance=opening,
            is_primary=bool(is_primary),
            is_active=True,
            created_at=now,
            updated_at=now,
        )

        with self._lock:
            if account.is_primary and self.config.enforce_single_primary:
                self._clear_primary_flags(now)
            self._accounts[account.id] = account

        logger.debug(f"Created bank account {account.id} ({account.name})")
        return replace(account)

    def get_account(self, account_id: str) -> Optional[BankAccount]:
        with self._lock:
            account = self._accounts.get(account_id)
            return replace(account) if account else None

    def list_accounts(self) -> list[BankAccount]:
        with self._lock:
            return [replace(a) for a in self._accounts.values() if a.is_active]

    def update_account(self, account_id: str, **updates: Any) -> Optional[BankAccount]:
        unknown = set(updates) - UPDATABLE_ACCOUNT_FIELDS - {"id"}
        if unknown:
            raise ValidationError(f"Unknown bank account fields: {', '.join(sorted(unknown))}")

        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return None

            # Omitted or None fields keep their current values
            changes = {
                key: value
                for key, value in updates.items()
                if key in UPDATABLE_ACCOUNT_FIELDS and value is not None
            }
            for key in ("name", "bank_name", "account_number", "currency"):
                if key in changes and not changes[key]:
                    del changes[key]
            if "account_type" in changes:
                changes["account_type"] = AccountType(changes["account_type"])
            for key in ("opening_balance", "balance"):
                if key in changes:
                    changes[key] = Decimal(str(changes[key]))

            now = datetime.now()
            if changes.get("is_primary") and self.config.enforce_single_primary:
                self._clear_primary_flags(now)

            updated = replace(account, **changes, updated_at=now)
            self._accounts[account_id] = updated
            return replace(updated)

    def delete_account(self, account_id: str) -> bool:
        with self._lock:
            return self._accounts.pop(account_id, None) is not None

    def adjust_balance(self, account_id: str, delta: Decimal) -> Optional[BankAccount]:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return None

            updated = replace(
                account,
                balance=account.balance + Decimal(str(delta)),
                updated_at=datetime.now(),
            )
            self._accounts[account_id] = updated
            return replace(updated)

    def _clear_primary_flags(self, now: datetime) -> None:
        for other_id, other in self._accounts.items():
            if other.is_primary:
                self._accounts[other_id] = replace(other, is_primary=False, updated_at=now)

    # Statements

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
        now = datetime.now()
        with self._lock:
            if bank_account_id not in self._accounts:
                raise NotFoundError(f"Bank account not found: {bank_account_id}")

            statement = BankStatement(
                id=_new_id("stmt"),
                bank_account_id=bank_account_id,
                statement_number=statement_number,
                start_date=start_date,
                end_date=end_date,
                closing_balance=Decimal(str(closing_balance)),
                currency=currency,
                status=StatementStatus.IMPORTED,
                imported_at=imported_at or now,
                reconciled_at=None,
                created_at=now,
                updated_at=now,
            )
            self._statements[statement.id] = statement

        return replace(statement)

    def get_statement(self, statement_id: str) -> Optional[BankStatement]:
        with self._lock:
            statement = self._statements.get(statement_id)
            return replace(statement) if statement else None

    def list_statements_by_account(self, bank_account_id: str) -> list[BankStatement]:
        with self._lock:
            statements = [
                replace(s)
                for s in self._statements.values()
                if s.bank_account_id == bank_account_id
            ]
        return sorted(statements, key=lambda s: s.imported_at, reverse=True)

    def update_statement_status(
        self,
        statement_id: str,
        status: StatementStatus,
        reconciled_at: Optional[datetime] = None,
    ) -> bool:
        with self._lock:
            statement = self._statements.get(statement_id)
            if statement is None:
                return False

            status = StatementStatus(status)
            if status == StatementStatus.RECONCILED:
                reconciled_at = reconciled_at or datetime.now()
            else:
                reconciled_at = None

            self._statements[statement_id] = replace(
                statement,
                status=status,
                reconciled_at=reconciled_at,
                updated_at=datetime.now(),
            )
            return True

    # Transactions

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
        amount = Decimal(str(amount))
        if amount < 0:
            raise ValidationError("Transaction amount must be non-negative")

        now = datetime.now()
        with self._lock:
            if statement_id not in self._statements:
                raise NotFoundError(f"Bank statement not found: {statement_id}")

            transaction = BankTransaction(
                id=_new_id("txn"),
                statement_id=statement_id,
                transaction_date=transaction_date,
                description=description,
                amount=amount,
                direction=Direction(direction),
                category=category,
                reference=reference,
                status=TransactionStatus.PENDING,
                matched_book_transaction_id=None,
                matched_at=None,
                created_at=now,
                updated_at=now,
            )
            self._transactions[transaction.id] = transaction

        return replace(transaction)

    def get_transaction(self, transaction_id: str) -> Optional[BankTransaction]:
        with self._lock:
            transaction = self._transactions.get(transaction_id)
            return replace(transaction) if transaction else None

    def list_transactions_by_statement(self, statement_id: str) -> list[BankTransaction]:
        with self._lock:
            transactions = [
                replace(t) for t in self._transactions.values() if t.statement_id == statement_id
            ]
        return sorted(transactions, key=lambda t: t.transaction_date)

    def list_transactions(self) -> list[BankTransaction]:
        with self._lock:
            return [replace(t) for t in self._transactions.values()]

    def match_transaction(self, transaction_id: str, book_transaction_id: str) -> bool:
        with self._lock:
            transaction = self._transactions.get(transaction_id)
            if transaction is None:
                logger.debug(f"match_transaction: unknown transaction {transaction_id}")
                return False

            now = datetime.now()
            self._transactions[transaction_id] = replace(
                transaction,
                status=TransactionStatus.MATCHED,
                matched_book_transaction_id=book_transaction_id,
                matched_at=now,
                updated_at=now,
            )
            return True

    def unmatch_transaction(self, transaction_id: str) -> bool:
        with self._lock:
            transaction = self._transactions.get(transaction_id)
            if transaction is None:
                logger.debug(f"unmatch_transaction: unknown transaction {transaction_id}")
                return False

            self._transactions[transaction_id] = replace(
                transaction,
                status=TransactionStatus.PENDING,
                matched_book_transaction_id=None,
                matched_at=None,
                updated_at=datetime.now(),
            )
            return True

    @contextmanager
    def account_lock(self, bank_account_id: str) -> Iterator[None]:
        with self._lock:
            lock = self._account_locks.setdefault(bank_account_id, threading.RLock())
        with lock:
            yield


def seed_default_account(
    store: LedgerRepository, config: Optional[LedgerConfig] = None
) -> BankAccount:
    """Create the demo account described by ``ledger.seed_account``."""
    seed = (config or LedgerConfig()).seed_account
    account = store.create_account(
        name=seed.name,
        bank_name=seed.bank_name,
        account_number=seed.account_number,
        account_type=AccountType(seed.account_type),
        currency=seed.currency,
        opening_balance=Decimal(str(seed.opening_balance)),
        is_primary=seed.is_primary,
    )
    logger.info(f"Seeded default bank account {account.id}")
    return account
