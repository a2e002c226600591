"""
Wiring of backend, store and scheduler from settings.
"""

from __future__ import annotations

from typing import Optional

from vocab_srs.config import SrsSettings
from vocab_srs.events import AnalyticsSink
from vocab_srs.sm2.scheduler import Scheduler
from vocab_srs.storage.backends import create_backend
from vocab_srs.storage.card_store import CardStore


def build_scheduler(
    settings: Optional[SrsSettings] = None,
    sink: Optional[AnalyticsSink] = None
) -> Scheduler:
    """
    Build a Scheduler over a CardStore on the configured backend.

    Call once per process and share the result. The store is reachable
    as scheduler.store.

    Args:
        settings: Settings (defaults to SrsSettings.from_env())
        sink: Analytics sink shared by store and scheduler

    Returns:
        Ready-to-use Scheduler
    """
    if settings is None:
        settings = SrsSettings.from_env()

    store = CardStore(
        create_backend(settings),
        sink=sink,
        storage_key=settings.storage_key,
        strict=settings.strict_persistence,
    )
    return Scheduler(
        store,
        sink=sink,
        tz=settings.tz,
        anchor=settings.next_review_anchor,
        rounding=settings.interval_rounding,
    )
