"""
SM-2 card model, constants and update rules.

The Scheduler lives in vocab_srs.sm2.scheduler and is imported from there.
"""

from vocab_srs.sm2.algorithm import (
    ScheduleUpdate,
    calculate_next_review,
    is_due,
    next_ease_factor,
    next_review_at,
    round_interval,
)
from vocab_srs.sm2.card import Card, card_phase, new_card
from vocab_srs.sm2.constants import (
    INITIAL_EASE_FACTOR,
    MIN_EASE_FACTOR,
    AnalyticsEvents,
    CardPhase,
    ReviewQuality,
)

__all__ = [
    "ScheduleUpdate",
    "calculate_next_review",
    "is_due",
    "next_ease_factor",
    "next_review_at",
    "round_interval",
    "Card",
    "card_phase",
    "new_card",
    "INITIAL_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "AnalyticsEvents",
    "CardPhase",
    "ReviewQuality",
]
