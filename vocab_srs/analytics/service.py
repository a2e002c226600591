"""
Service layer to assemble a deck dashboard.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from vocab_srs.analytics.metrics import (
    cards_to_frame,
    compute_deck_stats,
    compute_due_forecast,
    compute_mean_ease,
    compute_phase_counts,
)
from vocab_srs.analytics.types import DeckDashboardData
from vocab_srs.sm2.card import as_utc
from vocab_srs.storage.card_store import CardStore


def build_deck_dashboard(
    store: CardStore,
    user_id: str,
    as_of: Optional[datetime] = None,
    horizon_days: int = 7
) -> DeckDashboardData:
    """
    Build all KPI values and series for a user's deck.
    """
    as_of = as_utc(as_of) if as_of is not None else datetime.now(timezone.utc)
    cards_df = cards_to_frame(store.list_by_user(user_id))

    return DeckDashboardData(
        user_id=user_id,
        stats=compute_deck_stats(cards_df, as_of),
        phase_counts=compute_phase_counts(cards_df),
        mean_ease_factor=compute_mean_ease(cards_df),
        due_forecast=compute_due_forecast(cards_df, as_of, horizon_days),
    )
