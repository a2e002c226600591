"""
vocab_srs - Spaced Repetition for Discovered Vocabulary

Decides when each learned word is shown to a learner again, using the
SM-2 algorithm over a persisted collection of per-user cards.

Quick start:
    from vocab_srs import ReviewQuality, build_scheduler

    scheduler = build_scheduler()
    store = scheduler.store

    # A word was discovered (scan/lookup)
    card = store.find_or_create("u1", "dumpling", "饺子", "jiǎozi", "Eaten at New Year")

    # The learner graded a recall attempt
    card = scheduler.review_card(card.id, ReviewQuality.GOOD)

    # What to review now, and how it's going
    due = scheduler.get_due_cards("u1")
    stats = scheduler.get_stats("u1")
"""

from vocab_srs.analytics import DeckDashboardData, DeckStats, build_deck_dashboard
from vocab_srs.config import SrsSettings
from vocab_srs.events import AnalyticsSink, BufferedAnalyticsSink, notify_safely
from vocab_srs.exceptions import (
    AnalyticsNotificationError,
    CardNotFoundError,
    ConfigurationError,
    InvalidQualityError,
    PersistenceError,
    SrsError,
)
from vocab_srs.factory import build_scheduler
from vocab_srs.sm2 import AnalyticsEvents, Card, CardPhase, ReviewQuality, card_phase
from vocab_srs.sm2.scheduler import Scheduler
from vocab_srs.storage import (
    CardStore,
    InMemoryBackend,
    KeyValueBackend,
    MongoBackend,
    SqlAlchemyBackend,
)

__version__ = "0.1.0"

__all__ = [
    # Core API
    "build_scheduler",
    "Scheduler",
    "CardStore",
    "Card",
    "ReviewQuality",
    "CardPhase",
    "card_phase",

    # Persistence
    "KeyValueBackend",
    "InMemoryBackend",
    "SqlAlchemyBackend",
    "MongoBackend",

    # Analytics
    "AnalyticsEvents",
    "AnalyticsSink",
    "BufferedAnalyticsSink",
    "notify_safely",
    "DeckStats",
    "DeckDashboardData",
    "build_deck_dashboard",

    # Configuration
    "SrsSettings",

    # Errors
    "SrsError",
    "CardNotFoundError",
    "PersistenceError",
    "AnalyticsNotificationError",
    "InvalidQualityError",
    "ConfigurationError",
]
