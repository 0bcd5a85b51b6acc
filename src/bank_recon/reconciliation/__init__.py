"""Reconciliation arithmetic and reporting."""

from .calculator import ReconciliationCalculator, calculate_difference

__all__ = ["ReconciliationCalculator", "calculate_difference"]
