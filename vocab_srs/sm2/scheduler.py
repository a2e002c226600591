"""
Scheduler - SM-2 Review Processing and Due Queries

Applies review grades to stored cards and answers due-set and statistics
queries. The update rules live in the algorithm module; this module adds
the store round-trip, the review clock and analytics notifications.

Main workflow for a review (steps 1-4 run atomically in CardStore.modify):
1. Load the card from the store (CardNotFoundError if absent)
2. Apply the SM-2 update for the grade
3. Stamp last/next review dates and usage statistics
4. Persist through the store
5. Notify the analytics sink (failures discarded)
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Optional, Union

from vocab_srs.analytics.metrics import cards_to_frame, compute_deck_stats
from vocab_srs.analytics.types import DeckStats
from vocab_srs.events import AnalyticsSink, notify_safely
from vocab_srs.exceptions import InvalidQualityError
from vocab_srs.sm2.algorithm import (
    ScheduleUpdate,
    calculate_next_review,
    is_due,
    next_review_at,
)
from vocab_srs.sm2.card import Card, as_utc, card_phase
from vocab_srs.sm2.constants import (
    ANCHOR_CALENDAR,
    NEXT_REVIEW_ANCHORS,
    PASSING_QUALITY,
    PHASE_RANK,
    ROUND_HALF_AWAY,
    ROUNDING_MODES,
    AnalyticsEvents,
    CardPhase,
    ReviewQuality,
)
from vocab_srs.storage.card_store import CardStore

logger = logging.getLogger(__name__)

QualityLike = Union[ReviewQuality, int, str]


def coerce_quality(quality: QualityLike) -> ReviewQuality:
    """
    Accept a ReviewQuality, its int value (0-3) or its name ("good").

    Raises:
        InvalidQualityError: for anything else
    """
    if isinstance(quality, ReviewQuality):
        return quality
    if isinstance(quality, bool):
        raise InvalidQualityError(f"Invalid review quality: {quality!r}")
    if isinstance(quality, str):
        try:
            return ReviewQuality[quality.strip().upper()]
        except KeyError:
            raise InvalidQualityError(f"Invalid review quality: {quality!r}") from None
    try:
        return ReviewQuality(quality)
    except ValueError:
        raise InvalidQualityError(f"Invalid review quality: {quality!r}") from None


class Scheduler:
    """
    SM-2 scheduler over a CardStore.

    Each review is applied through CardStore.modify, so concurrent graders
    and rediscoveries of the same card cannot overwrite one another.
    """

    def __init__(
        self,
        store: CardStore,
        sink: Optional[AnalyticsSink] = None,
        tz: Optional[tzinfo] = None,
        anchor: str = ANCHOR_CALENDAR,
        rounding: str = ROUND_HALF_AWAY
    ) -> None:
        if anchor not in NEXT_REVIEW_ANCHORS:
            raise ValueError(f"Unknown next-review anchor: {anchor!r}")
        if rounding not in ROUNDING_MODES:
            raise ValueError(f"Unknown rounding mode: {rounding!r}")
        self.store = store
        self.sink = sink
        self.tz = tz or timezone.utc
        self.anchor = anchor
        self.rounding = rounding

    # ---- Reviews ----

    def review_card(
        self,
        card_id: str,
        quality: QualityLike,
        timestamp: Optional[datetime] = None
    ) -> Card:
        """
        Apply a review grade to a card.

        Args:
            card_id: Card to review
            quality: AGAIN, HARD, GOOD or EASY
            timestamp: Review time (defaults to now)

        Returns:
            The updated card

        Raises:
            CardNotFoundError: if the card does not exist
            InvalidQualityError: if the grade is not AGAIN..EASY
        """
        grade = coerce_quality(quality)
        reviewed_at = as_utc(timestamp) if timestamp is not None else datetime.now(timezone.utc)
        phase_before: Optional[CardPhase] = None

        def apply_review(card: Card) -> None:
            nonlocal phase_before
            phase_before = card_phase(card)

            update = calculate_next_review(
                card.ease_factor,
                card.interval,
                card.repetitions,
                grade,
                self.rounding
            )

            card.ease_factor = update.ease_factor
            card.interval = update.interval
            card.repetitions = update.repetitions
            card.last_review = reviewed_at
            card.next_review = next_review_at(reviewed_at, update.interval, self.tz, self.anchor)

            if grade >= PASSING_QUALITY:
                card.correct_count += 1
            else:
                card.incorrect_count += 1

        card = self.store.modify(card_id, apply_review)

        phase_after = card_phase(card)
        logger.info(
            "Card reviewed: %s | Quality: %s | Next: %d days",
            card.term, grade.name, card.interval
        )

        notify_safely(self.sink, AnalyticsEvents.SRS_CARD_ANSWERED, card.user_id, {
            "word": card.term,
            "quality": grade.name,
            "nextInterval": card.interval,
            "easeFactor": f"{card.ease_factor:.2f}",
        })
        if PHASE_RANK[phase_after] > PHASE_RANK[phase_before]:
            notify_safely(self.sink, AnalyticsEvents.SRS_LEVEL_UP, card.user_id, {
                "word": card.term,
                "fromPhase": phase_before.value,
                "toPhase": phase_after.value,
            })

        return card

    def preview(self, card_id: str, quality: QualityLike) -> ScheduleUpdate:
        """
        Scheduling outcome of a grade, without applying it.

        Raises:
            CardNotFoundError: if the card does not exist
        """
        card = self.store.get_by_id(card_id)
        return calculate_next_review(
            card.ease_factor,
            card.interval,
            card.repetitions,
            coerce_quality(quality),
            self.rounding
        )

    # ---- Queries ----

    def get_due_cards(self, user_id: str, as_of: Optional[datetime] = None) -> list[Card]:
        """
        Cards of a user due at as_of, most overdue first.

        Read-only: repeated calls without a review in between return the
        same cards in the same order.

        Args:
            user_id: User to query
            as_of: Query time (defaults to now)

        Returns:
            Due cards sorted by next review (ties by card id)
        """
        as_of = as_utc(as_of) if as_of is not None else datetime.now(timezone.utc)
        due_cards = [c for c in self.store.list_by_user(user_id) if is_due(c, as_of)]
        due_cards.sort(key=lambda c: (c.next_review, c.id))

        if due_cards:
            notify_safely(self.sink, AnalyticsEvents.SRS_CARD_DUE, user_id, {
                "count": len(due_cards),
            })

        return due_cards

    def get_user_cards(self, user_id: str) -> list[Card]:
        """All cards of a user, most recently reviewed first."""
        cards = self.store.list_by_user(user_id)
        cards.sort(key=lambda c: (c.last_review, c.id), reverse=True)
        return cards

    def get_stats(self, user_id: str, as_of: Optional[datetime] = None) -> DeckStats:
        """
        Aggregate statistics for a user's deck.

        Accuracy is the percentage of correct reviews, 0 when there are none.
        """
        as_of = as_utc(as_of) if as_of is not None else datetime.now(timezone.utc)
        frame = cards_to_frame(self.store.list_by_user(user_id))
        return compute_deck_stats(frame, as_of)
