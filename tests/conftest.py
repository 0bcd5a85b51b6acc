from datetime import datetime
from decimal import Decimal

import pytest

from bank_recon.books import InMemoryBookSource
from bank_recon.config import LedgerConfig, ReconConfig
from bank_recon.models.books import Invoice, JournalEntry
from bank_recon.models.ledger import AccountType, BankTransaction, Direction
from bank_recon.store.memory import InMemoryLedgerStore

CSV_STATEMENT = """Date,Description,Amount
2025-01-05,Coffee,-4.50
2025-01-10,Office Supplies,-250.00
2025-01-20,INV-1001,"1,200.00"
"""

QIF_STATEMENT = """!Type:Bank
D01/05/2025
T-4.50
PCoffee
^
D01/10/2025
T-250.00
POffice Supplies
^
"""

OFX_STATEMENT = """OFXHEADER:100
DATA:OFXSGML
<OFX>
<BANKMSGSRSV1><STMTTRNRS><STMTRS><BANKTRANLIST>
<STMTTRN>
<TRNTYPE>DEBIT
<DTPOSTED>20250105120000[-5:EST]
<TRNAMT>-4.50
<NAME>Coffee Shop
<MEMO>Coffee
</STMTTRN>
<STMTTRN>
<TRNTYPE>CREDIT
<DTPOSTED>20250120
<TRNAMT>1200.00
<NAME>INV-1001
</STMTTRN>
</BANKTRANLIST></STMTRS></STMTTRNRS></BANKMSGSRSV1>
</OFX>
"""


def make_txn(
    amount: str = "100.00",
    direction: Direction = Direction.DEBIT,
    description: str = "Payment",
    when: datetime = datetime(2025, 1, 10),
    txn_id: str = "txn-test",
) -> BankTransaction:
    """Build a detached bank transaction for matcher tests."""
    return BankTransaction(
        id=txn_id,
        statement_id="stmt-test",
        transaction_date=when,
        description=description,
        amount=Decimal(amount),
        direction=direction,
    )


@pytest.fixture
def config() -> ReconConfig:
    return ReconConfig()


@pytest.fixture
def store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore(LedgerConfig())


@pytest.fixture
def account(store):
    return store.create_account(
        name="Operating",
        bank_name="HSBC",
        account_number="123456789",
        account_type=AccountType.CHECKING,
        currency="HKD",
        opening_balance=Decimal("100000"),
        is_primary=True,
    )


@pytest.fixture
def statement(store, account):
    return store.create_statement(
        bank_account_id=account.id,
        statement_number="STMT-000001",
        start_date=datetime(2025, 1, 1).date(),
        end_date=datetime(2025, 1, 31).date(),
        closing_balance=account.balance,
        currency=account.currency,
    )


@pytest.fixture
def journal_entries() -> list[JournalEntry]:
    return [
        JournalEntry(
            id="JE-1",
            description="Office Supplies",
            amount=Decimal("250.00"),
            date=datetime(2025, 1, 10),
        ),
        JournalEntry(
            id="JE-2",
            description="Rent",
            amount=Decimal("5000.00"),
            date=datetime(2025, 1, 1),
        ),
    ]


@pytest.fixture
def invoices() -> list[Invoice]:
    return [
        Invoice(
            id="INV-A",
            invoice_number="INV-1001",
            total=Decimal("1200.00"),
            issued_date=datetime(2024, 12, 15),
            due_date=datetime(2025, 1, 15),
        ),
    ]


@pytest.fixture
def books(journal_entries, invoices) -> InMemoryBookSource:
    return InMemoryBookSource(journal_entries, invoices)
