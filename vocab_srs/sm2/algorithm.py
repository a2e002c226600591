"""
Algorithm - SM-2 Interval Scheduling

Pure SM-2 update rules (no storage, no logging, no clock).

Update rules for a review with quality q in 0..3:
- Ease: EF' = max(1.3, EF + (0.1 - (3 - q) * (0.08 + (3 - q) * 0.02)))
  applied for every grade, including failures
- q < GOOD: repetitions -> 0, interval -> 1 (lapse)
- q >= GOOD: repetitions += 1, interval -> 1, 6, then round(I * EF')
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone, tzinfo
from decimal import Decimal, ROUND_HALF_EVEN as DECIMAL_HALF_EVEN, ROUND_HALF_UP
from typing import Optional, Union

from vocab_srs.sm2.card import Card
from vocab_srs.sm2.constants import (
    ANCHOR_CALENDAR,
    ANCHOR_MIDNIGHT,
    FIRST_INTERVAL_DAYS,
    LAPSE_INTERVAL_DAYS,
    MAX_INTERVAL_DAYS,
    MIN_EASE_FACTOR,
    PASSING_QUALITY,
    ROUND_HALF_AWAY,
    ROUND_HALF_EVEN,
    SECOND_INTERVAL_DAYS,
    ReviewQuality,
)


EASE_PRECISION = Decimal("0.01")


@dataclass(frozen=True)
class ScheduleUpdate:
    """Scheduling fields produced by one review."""
    ease_factor: float
    interval: int
    repetitions: int


def next_ease_factor(ease_factor: float, quality: ReviewQuality) -> float:
    """
    Update the ease factor for a review.

    Computed in decimal and kept at two decimal places: every adjustment is
    a multiple of 0.02, so repeated reviews cannot accumulate float error.

    Args:
        ease_factor: Current ease factor
        quality: Review grade

    Returns:
        New ease factor, never below MIN_EASE_FACTOR
    """
    miss = 3 - int(quality)
    delta = Decimal("0.1") - miss * (Decimal("0.08") + miss * Decimal("0.02"))
    ease = (Decimal(str(ease_factor)) + delta).quantize(EASE_PRECISION, rounding=ROUND_HALF_UP)
    return float(max(Decimal(str(MIN_EASE_FACTOR)), ease))


def round_interval(value: Union[float, Decimal], mode: str = ROUND_HALF_AWAY) -> int:
    """
    Round a fractional interval to whole days.

    half_away rounds x.5 up (15.5 -> 16), half_even rounds it to the
    nearest even day (14.5 -> 14, 15.5 -> 16). A float is rounded at its
    exact binary value; pass a Decimal for exact ties.
    """
    if mode == ROUND_HALF_AWAY:
        rounding = ROUND_HALF_UP
    elif mode == ROUND_HALF_EVEN:
        rounding = DECIMAL_HALF_EVEN
    else:
        raise ValueError(f"Unknown rounding mode: {mode!r}")
    return int(Decimal(value).quantize(Decimal(1), rounding=rounding))


def calculate_next_review(
    ease_factor: float,
    interval: int,
    repetitions: int,
    quality: ReviewQuality,
    rounding: str = ROUND_HALF_AWAY
) -> ScheduleUpdate:
    """
    Apply the SM-2 update to a card's scheduling state.

    The multiplicative step uses the interval from before this review and
    is capped at MAX_INTERVAL_DAYS.

    Args:
        ease_factor: Current ease factor
        interval: Current interval in days
        repetitions: Current count of consecutive successful reviews
        quality: Review grade
        rounding: Rounding mode for the multiplicative step

    Returns:
        ScheduleUpdate with the new ease factor, interval and repetitions
    """
    new_ease = next_ease_factor(ease_factor, quality)

    if quality < PASSING_QUALITY:
        return ScheduleUpdate(new_ease, LAPSE_INTERVAL_DAYS, 0)

    new_repetitions = repetitions + 1
    if new_repetitions == 1:
        new_interval = FIRST_INTERVAL_DAYS
    elif new_repetitions == 2:
        new_interval = SECOND_INTERVAL_DAYS
    else:
        new_interval = min(MAX_INTERVAL_DAYS, round_interval(interval * Decimal(str(new_ease)), rounding))

    return ScheduleUpdate(new_ease, new_interval, new_repetitions)


def next_review_at(
    reviewed_at: datetime,
    interval_days: int,
    tz: Optional[tzinfo] = None,
    anchor: str = ANCHOR_CALENDAR
) -> datetime:
    """
    Compute when a card is due again.

    calendar: the same local wall-clock time, interval_days calendar days
    later in tz (a DST change does not shift the time of day).
    midnight: the start of the local day interval_days after the review day.

    An interval of 0 means due immediately (the review instant itself).

    Args:
        reviewed_at: Review instant (timezone-aware)
        interval_days: Whole days until the next review
        tz: Time zone whose calendar is used (defaults to UTC)
        anchor: ANCHOR_CALENDAR or ANCHOR_MIDNIGHT

    Returns:
        Next review instant in UTC
    """
    if interval_days == 0:
        return reviewed_at.astimezone(timezone.utc)

    local = reviewed_at.astimezone(tz or timezone.utc)

    if anchor == ANCHOR_CALENDAR:
        # Aware + timedelta is wall-clock arithmetic; tzinfo recomputes the offset
        target = local + timedelta(days=interval_days)
    elif anchor == ANCHOR_MIDNIGHT:
        target_date = local.date() + timedelta(days=interval_days)
        target = datetime.combine(target_date, time.min, tzinfo=local.tzinfo)
    else:
        raise ValueError(f"Unknown next-review anchor: {anchor!r}")

    return target.astimezone(timezone.utc)


def is_due(card: Card, as_of: datetime) -> bool:
    """A card is due when its next review is at or before as_of."""
    return card.next_review <= as_of
