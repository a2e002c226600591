"""
SM-2 Constants and Parameters

All configurable parameters for the SM-2 scheduler in one place.
"""

from enum import Enum, IntEnum


# ---- Review Quality ----

class ReviewQuality(IntEnum):
    """Learner's judgment of a recall attempt."""
    AGAIN = 0   # Complete blackout
    HARD = 1    # Incorrect response but partially remembered
    GOOD = 2    # Correct response with hesitation
    EASY = 3    # Perfect response


# Lowest grade that counts as a successful recall
PASSING_QUALITY = ReviewQuality.GOOD


# ---- Ease Factor ----

INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


# ---- Intervals (days) ----

FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
LAPSE_INTERVAL_DAYS = 1

# Upper bound for the multiplicative step (keeps review dates representable)
MAX_INTERVAL_DAYS = 36500

# Repetitions at which a card counts as mature
MATURE_REPETITIONS = 3


# ---- Scheduling Policies ----

ROUND_HALF_AWAY = "half_away"
ROUND_HALF_EVEN = "half_even"
ROUNDING_MODES = (ROUND_HALF_AWAY, ROUND_HALF_EVEN)

ANCHOR_CALENDAR = "calendar"  # same wall-clock time, N calendar days later
ANCHOR_MIDNIGHT = "midnight"  # start of the local day N days later
NEXT_REVIEW_ANCHORS = (ANCHOR_CALENDAR, ANCHOR_MIDNIGHT)


# ---- Persistence ----

STORAGE_KEY = "@vocabulary_srs"


# ---- Card Phases ----

class CardPhase(str, Enum):
    """Position of a card in the scheduling state machine."""
    NEW = "new"            # Never reviewed
    LEARNING = "learning"  # One or two successful reviews in a row
    MATURE = "mature"      # Three or more successful reviews in a row
    LAPSED = "lapsed"      # Last review was AGAIN or HARD


PHASE_RANK = {
    CardPhase.NEW: 0,
    CardPhase.LAPSED: 0,
    CardPhase.LEARNING: 1,
    CardPhase.MATURE: 2,
}


# ---- Analytics Events ----

class AnalyticsEvents:
    """Event names sent to the analytics sink."""
    WORD_DISCOVERED = "word_discovered"
    WORD_REVIEWED = "word_reviewed"
    SRS_CARD_DUE = "srs_card_due"
    SRS_CARD_ANSWERED = "srs_card_answered"
    SRS_LEVEL_UP = "srs_level_up"
