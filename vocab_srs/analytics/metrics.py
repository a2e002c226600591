"""
Metric computations for deck statistics and dashboards.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from vocab_srs.analytics.types import DeckStats
from vocab_srs.sm2.card import Card, card_phase
from vocab_srs.sm2.constants import CardPhase

CARD_COLUMNS = [
    "id",
    "user_id",
    "label",
    "term",
    "ease_factor",
    "interval",
    "repetitions",
    "next_review",
    "last_review",
    "times_seen_count",
    "correct_count",
    "incorrect_count",
    "phase",
]


def cards_to_frame(cards: list[Card]) -> pd.DataFrame:
    """
    One row per card, timestamps as UTC datetimes.
    """
    if not cards:
        return pd.DataFrame(columns=CARD_COLUMNS)

    df = pd.DataFrame([
        {
            "id": c.id,
            "user_id": c.user_id,
            "label": c.label,
            "term": c.term,
            "ease_factor": c.ease_factor,
            "interval": c.interval,
            "repetitions": c.repetitions,
            "next_review": c.next_review,
            "last_review": c.last_review,
            "times_seen_count": c.times_seen_count,
            "correct_count": c.correct_count,
            "incorrect_count": c.incorrect_count,
            "phase": card_phase(c).value,
        }
        for c in cards
    ])
    df["next_review"] = pd.to_datetime(df["next_review"], utc=True)
    df["last_review"] = pd.to_datetime(df["last_review"], utc=True)
    return df


def zero_series(day_index: pd.DatetimeIndex, dtype: str = "int64") -> pd.Series:
    """
    Convenience zero-valued series aligned to day index.
    """
    return pd.Series(0, index=day_index, dtype=dtype)


def compute_deck_stats(cards_df: pd.DataFrame, as_of: datetime) -> DeckStats:
    """
    Totals, due count and accuracy for a deck.

    accuracy = correct / (correct + incorrect) * 100, or 0 with no reviews.
    """
    if cards_df.empty:
        return DeckStats(total_cards=0, due_cards=0, total_reviews=0, accuracy=0.0)

    correct = int(cards_df["correct_count"].sum())
    total_reviews = correct + int(cards_df["incorrect_count"].sum())
    due = int((cards_df["next_review"] <= pd.Timestamp(as_of)).sum())
    accuracy = correct / total_reviews * 100 if total_reviews else 0.0

    return DeckStats(
        total_cards=len(cards_df),
        due_cards=due,
        total_reviews=total_reviews,
        accuracy=accuracy,
    )


def compute_phase_counts(cards_df: pd.DataFrame) -> dict[CardPhase, int]:
    """
    Number of cards in each scheduling phase (every phase present).
    """
    counts = cards_df["phase"].value_counts() if not cards_df.empty else pd.Series(dtype="int64")
    return {phase: int(counts.get(phase.value, 0)) for phase in CardPhase}


def compute_mean_ease(cards_df: pd.DataFrame) -> float:
    """
    Mean ease factor of reviewed cards (0 when none were reviewed).
    """
    if cards_df.empty:
        return 0.0
    reviewed = cards_df[cards_df["correct_count"] + cards_df["incorrect_count"] > 0]
    if reviewed.empty:
        return 0.0
    return float(reviewed["ease_factor"].mean())


def compute_due_forecast(
    cards_df: pd.DataFrame,
    as_of: datetime,
    horizon_days: int = 7
) -> pd.Series:
    """
    Cards falling due on each UTC day from as_of's day to horizon_days later.

    Overdue cards count on the first day; cards due after the horizon are
    left out.
    """
    as_of_ts = pd.Timestamp(as_of)
    day_index = pd.date_range(start=as_of_ts.floor("D"), periods=horizon_days + 1, freq="D")
    if cards_df.empty:
        return zero_series(day_index).rename("due_cards")

    next_review = cards_df["next_review"]
    due_at = next_review.where(next_review > as_of_ts, as_of_ts)
    counts = due_at.dt.floor("D").value_counts()
    return counts.reindex(day_index, fill_value=0).astype("int64").rename("due_cards")
