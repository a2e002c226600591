"""
Types for deck statistics and dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from vocab_srs.sm2.constants import CardPhase


@dataclass(frozen=True)
class DeckStats:
    """
    Headline numbers for one user's deck.
    """
    total_cards: int
    due_cards: int
    total_reviews: int
    accuracy: float  # percent of correct reviews, 0 with no reviews

    def to_dict(self) -> dict[str, float]:
        return {
            "totalCards": self.total_cards,
            "dueCards": self.due_cards,
            "totalReviews": self.total_reviews,
            "accuracy": self.accuracy,
        }


@dataclass(frozen=True)
class DeckDashboardData:
    """
    Precomputed metrics and series for one user's deck.
    """
    user_id: str
    stats: DeckStats
    phase_counts: dict[CardPhase, int]
    mean_ease_factor: float
    due_forecast: pd.Series
