"""Bank statement import, auto-matching and reconciliation."""

__version__ = "0.1.0"
