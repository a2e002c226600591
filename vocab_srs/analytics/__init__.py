"""
Analytics package exports.
"""

from vocab_srs.analytics.service import build_deck_dashboard
from vocab_srs.analytics.types import DeckDashboardData, DeckStats

__all__ = [
    "build_deck_dashboard",
    "DeckDashboardData",
    "DeckStats",
]
