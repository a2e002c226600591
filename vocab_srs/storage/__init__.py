"""
Card store and its durable key-value backends.
"""

from vocab_srs.storage.backends import (
    InMemoryBackend,
    KeyValueBackend,
    MongoBackend,
    SqlAlchemyBackend,
    create_backend,
)
from vocab_srs.storage.card_store import CardStore, dump_cards, parse_cards

__all__ = [
    "InMemoryBackend",
    "KeyValueBackend",
    "MongoBackend",
    "SqlAlchemyBackend",
    "create_backend",
    "CardStore",
    "dump_cards",
    "parse_cards",
]
