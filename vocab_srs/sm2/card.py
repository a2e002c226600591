"""
Card - Scheduling State for One (User, Word) Pair

Defines the persisted card record and derived quantities.

A card carries three groups of fields:
- Identity and content (fixed at creation)
- SM-2 scheduling state (ease factor, interval, repetitions, review dates)
- Usage statistics (informational, never read by the algorithm)

Serialized field names are camelCase (easeFactor, nextReview, ...) so the
stored collection stays readable by any client of the same storage key.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from vocab_srs.sm2.constants import (
    CardPhase,
    INITIAL_EASE_FACTOR,
    MATURE_REPETITIONS,
    MIN_EASE_FACTOR,
)


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC and express every instant in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Card(BaseModel):
    """
    Learning card for one vocabulary item of one user.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    # Identity
    id: str = Field(frozen=True)
    user_id: str = Field(frozen=True)

    # Content
    label: str = Field(frozen=True, description="Source-language label, e.g. 'dumpling'")
    term: str = Field(frozen=True, description="Target-language term, e.g. '饺子'")
    pronunciation: str = Field("", frozen=True)
    note: str = Field("", frozen=True, description="Cultural or contextual note")

    # SM-2 scheduling state
    ease_factor: float = Field(INITIAL_EASE_FACTOR, ge=MIN_EASE_FACTOR)
    interval: int = Field(0, ge=0)  # days
    repetitions: int = Field(0, ge=0)
    next_review: datetime
    last_review: datetime

    # Usage statistics
    times_seen_count: int = Field(1, ge=0)
    correct_count: int = Field(0, ge=0)
    incorrect_count: int = Field(0, ge=0)
    created_at: datetime

    @field_validator("next_review", "last_review", "created_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def total_reviews(self) -> int:
        return self.correct_count + self.incorrect_count

    def matches(self, user_id: str, label: str) -> bool:
        """Case-insensitive identity check used for de-duplication."""
        return self.user_id == user_id and self.label.casefold() == label.casefold()


def generate_card_id() -> str:
    """
    Generate a unique card ID (UUID).

    Returns:
        UUID string
    """
    return str(uuid.uuid4())


def new_card(
    user_id: str,
    label: str,
    term: str,
    pronunciation: str = "",
    note: str = "",
    timestamp: Optional[datetime] = None
) -> Card:
    """
    Initialize a card for an item the user has just discovered.

    The card is due immediately: interval 0, no repetitions, and
    next_review equal to the discovery time.

    Args:
        user_id: Owning user
        label: Source-language label
        term: Target-language term
        pronunciation: Phonetic pronunciation
        note: Free-text cultural/contextual note
        timestamp: Discovery time (defaults to now)

    Returns:
        New Card with default scheduling state
    """
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)

    return Card(
        id=generate_card_id(),
        user_id=user_id,
        label=label,
        term=term,
        pronunciation=pronunciation,
        note=note,
        ease_factor=INITIAL_EASE_FACTOR,
        interval=0,
        repetitions=0,
        next_review=timestamp,
        last_review=timestamp,
        times_seen_count=1,
        correct_count=0,
        incorrect_count=0,
        created_at=timestamp,
    )


def card_phase(card: Card) -> CardPhase:
    """Classify a card into its scheduling phase."""
    if card.repetitions == 0:
        return CardPhase.NEW if card.interval == 0 else CardPhase.LAPSED
    if card.repetitions < MATURE_REPETITIONS:
        return CardPhase.LEARNING
    return CardPhase.MATURE
