"""Bank ledger store."""

from .memory import InMemoryLedgerStore, seed_default_account
from .repository import LedgerRepository

__all__ = ["LedgerRepository", "InMemoryLedgerStore", "seed_default_account"]
