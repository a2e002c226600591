"""
Error taxonomy for the spaced repetition engine.
"""

from __future__ import annotations


class SrsError(Exception):
    """Base class for all engine errors."""


class CardNotFoundError(SrsError, KeyError):
    """A card id does not exist in the store. Never retried."""

    def __init__(self, card_id: str):
        super().__init__(card_id)
        self.card_id = card_id

    def __str__(self) -> str:
        return f"Card not found: {self.card_id}"


class PersistenceError(SrsError):
    """The durable read or write of the card collection failed."""


class AnalyticsNotificationError(SrsError):
    """The analytics sink failed. Caught and discarded at the boundary."""


class InvalidQualityError(SrsError, ValueError):
    """A review grade outside AGAIN..EASY."""


class ConfigurationError(SrsError, ValueError):
    """An environment setting has an unusable value."""
