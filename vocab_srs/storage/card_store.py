"""
Card Store - Canonical Card Collection

Owns every user's cards and mirrors the collection to durable storage.

Guarantees:
- At most one card per (user, label), labels compared case-insensitively
- Write-through: every mutating call persists before returning
- Callers only ever receive copies; stored cards change through the store

The whole collection is stored under one key as a JSON array of
camelCase card records.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import TypeAdapter

from vocab_srs.events import AnalyticsSink, notify_safely
from vocab_srs.exceptions import CardNotFoundError, PersistenceError
from vocab_srs.sm2.card import Card, as_utc, new_card
from vocab_srs.sm2.constants import STORAGE_KEY, AnalyticsEvents
from vocab_srs.storage.backends import KeyValueBackend

logger = logging.getLogger(__name__)

_CARD_LIST = TypeAdapter(list[Card])


# ---- Serialization ----

def dump_cards(cards: list[Card]) -> str:
    """Serialize cards to the stored JSON document."""
    return json.dumps(
        [card.model_dump(mode="json", by_alias=True) for card in cards],
        ensure_ascii=False
    )


def parse_cards(data: str) -> list[Card]:
    """
    Parse the stored JSON document.

    Raises:
        ValueError: if the document is not a valid card list
    """
    return _CARD_LIST.validate_json(data)


class CardStore:
    """
    In-memory card collection with write-through persistence.

    Construct once per process and share it; the collection is loaded
    lazily on first use.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        sink: Optional[AnalyticsSink] = None,
        storage_key: str = STORAGE_KEY,
        strict: bool = False
    ) -> None:
        """
        Args:
            backend: Durable key-value persistence
            sink: Analytics sink notified on discovery events
            storage_key: Key the collection is stored under
            strict: Raise PersistenceError when a write fails instead of
                logging it and keeping the in-memory state
        """
        self.backend = backend
        self.sink = sink
        self.storage_key = storage_key
        self.strict = strict
        self._cards: dict[str, Card] = {}
        self._loaded = False
        self._lock = threading.RLock()

    # ---- Persistence ----

    def load(self) -> int:
        """
        Replace the in-memory collection with the stored one.

        A missing, empty or unreadable record yields an empty collection.

        Returns:
            Number of cards loaded
        """
        with self._lock:
            cards: list[Card] = []
            try:
                data = self.backend.get(self.storage_key)
                if data:
                    cards = parse_cards(data)
            except PersistenceError as exc:
                logger.warning("Failed to load SRS cards, starting empty: %s", exc)
            except ValueError as exc:
                logger.warning("Stored SRS cards are corrupt, starting empty: %s", exc)

            self._cards = {card.id: card for card in cards}
            self._loaded = True
            logger.info("Loaded %d SRS cards from storage", len(self._cards))
            return len(self._cards)

    def save(self) -> None:
        """
        Write the full collection to durable storage.

        Raises:
            PersistenceError: on failure, only when the store is strict
        """
        with self._lock:
            self._ensure_loaded()
            try:
                self.backend.set(self.storage_key, dump_cards(list(self._cards.values())))
            except PersistenceError:
                if self.strict:
                    raise
                logger.exception("Failed to save SRS cards; in-memory state kept")
                return
            logger.debug("Saved %d SRS cards to storage", len(self._cards))

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def _save_or_rollback(self, rollback: Callable[[], object]) -> None:
        """Persist a mutation; a strict store undoes it when the write fails."""
        try:
            self.save()
        except PersistenceError:
            rollback()
            raise

    # ---- Queries ----

    def get_by_id(self, card_id: str) -> Card:
        """
        Get a card by id.

        Raises:
            CardNotFoundError: if no card has this id
        """
        with self._lock:
            self._ensure_loaded()
            card = self._cards.get(card_id)
            if card is None:
                raise CardNotFoundError(card_id)
            return card.model_copy(deep=True)

    def list_by_user(self, user_id: str) -> list[Card]:
        """All cards of a user, in no particular order."""
        with self._lock:
            self._ensure_loaded()
            return [
                card.model_copy(deep=True)
                for card in self._cards.values()
                if card.user_id == user_id
            ]

    def find(self, user_id: str, label: str) -> Optional[Card]:
        """Case-insensitive lookup by (user, label)."""
        with self._lock:
            self._ensure_loaded()
            existing = self._find(user_id, label)
            return existing.model_copy(deep=True) if existing else None

    def _find(self, user_id: str, label: str) -> Optional[Card]:
        return next((c for c in self._cards.values() if c.matches(user_id, label)), None)

    def __len__(self) -> int:
        with self._lock:
            self._ensure_loaded()
            return len(self._cards)

    # ---- Mutations ----

    def find_or_create(
        self,
        user_id: str,
        label: str,
        term: str,
        pronunciation: str = "",
        note: str = "",
        timestamp: Optional[datetime] = None
    ) -> Card:
        """
        Record that a user discovered an item.

        Re-discovering a known item bumps its times-seen counter and
        last-review time; scheduling fields are left alone.

        Args:
            user_id: Owning user
            label: Source-language label (matched case-insensitively)
            term: Target-language term
            pronunciation: Phonetic pronunciation
            note: Cultural/contextual note
            timestamp: Discovery time (defaults to now)

        Returns:
            The existing or newly created card
        """
        with self._lock:
            self._ensure_loaded()
            existing = self._find(user_id, label)

            if existing is not None:
                previous = existing.model_copy(deep=True)
                existing.times_seen_count += 1
                existing.last_review = as_utc(timestamp) if timestamp is not None else datetime.now(timezone.utc)
                self._save_or_rollback(lambda: self._cards.__setitem__(previous.id, previous))
                result = existing.model_copy(deep=True)
                created = False
            else:
                card = new_card(user_id, label, term, pronunciation, note, timestamp)
                self._cards[card.id] = card
                self._save_or_rollback(lambda: self._cards.pop(card.id, None))
                result = card.model_copy(deep=True)
                created = True

        if created:
            logger.info("New SRS card created: %s (%s)", result.term, result.label)
            notify_safely(self.sink, AnalyticsEvents.WORD_DISCOVERED, user_id, {
                "word": result.term,
                "english": result.label,
            })
        else:
            notify_safely(self.sink, AnalyticsEvents.WORD_REVIEWED, user_id, {
                "word": result.term,
                "timesSeenCount": result.times_seen_count,
            })
        return result

    def update(self, card: Card) -> Card:
        """
        Replace a stored card with a new version of it and persist.

        Raises:
            CardNotFoundError: if the card id is not in the store
        """
        with self._lock:
            self._ensure_loaded()
            if card.id not in self._cards:
                raise CardNotFoundError(card.id)
            previous = self._cards[card.id]
            stored = card.model_copy(deep=True)
            self._cards[stored.id] = stored
            self._save_or_rollback(lambda: self._cards.__setitem__(previous.id, previous))
            return stored.model_copy(deep=True)

    def modify(self, card_id: str, change: Callable[[Card], object]) -> Card:
        """
        Read-modify-write one card atomically and persist.

        change receives a working copy of the stored card and edits it in
        place; no other store call can interleave with it.

        Raises:
            CardNotFoundError: if no card has this id
        """
        with self._lock:
            self._ensure_loaded()
            previous = self._cards.get(card_id)
            if previous is None:
                raise CardNotFoundError(card_id)
            card = previous.model_copy(deep=True)
            change(card)
            self._cards[card_id] = card
            self._save_or_rollback(lambda: self._cards.__setitem__(card_id, previous))
            return card.model_copy(deep=True)

    def clear_all(self) -> None:
        """
        DANGEROUS: Delete every card of every user, in memory and on disk.
        """
        with self._lock:
            self._cards.clear()
            self._loaded = True
            try:
                self.backend.remove(self.storage_key)
            except PersistenceError:
                if self.strict:
                    raise
                logger.exception("Failed to clear stored SRS cards")
                return
        logger.info("All SRS data cleared")
