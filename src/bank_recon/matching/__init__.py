"""Confidence matcher and auto-match runner."""

from .matcher import Matcher
from .runner import AutoMatchRunner
from .signals import (
    MatchSignal,
    AmountSignal,
    DateSignal,
    DescriptionSignal,
    amount_matches,
    date_matches,
    description_matches,
    calculate_confidence,
)

__all__ = [
    "Matcher",
    "AutoMatchRunner",
    "MatchSignal",
    "AmountSignal",
    "DateSignal",
    "DescriptionSignal",
    "amount_matches",
    "date_matches",
    "description_matches",
    "calculate_confidence",
]
