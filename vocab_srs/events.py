"""
Analytics event boundary.

The engine reports state transitions (word discovered, card answered, ...)
to an external analytics sink. Notifications are fire-and-forget: a failing
sink is logged and discarded, never surfaced to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from vocab_srs.exceptions import AnalyticsNotificationError

logger = logging.getLogger(__name__)


class AnalyticsSink(Protocol):
    """Behavioral-analytics collaborator."""

    def notify(self, event_name: str, user_id: str, properties: dict[str, Any]) -> None:
        ...


@dataclass(frozen=True)
class BehaviorEvent:
    """One recorded analytics event."""
    event_name: str
    user_id: str
    timestamp: datetime
    properties: dict[str, Any] = field(default_factory=dict)


class BufferedAnalyticsSink:
    """
    Development sink: keeps every event in memory and logs it.

    Useful for tests and for inspecting what a session would send to the
    real analytics pipeline.
    """

    def __init__(self) -> None:
        self._buffer: list[BehaviorEvent] = []

    def notify(self, event_name: str, user_id: str, properties: dict[str, Any]) -> None:
        event = BehaviorEvent(
            event_name=event_name,
            user_id=user_id,
            timestamp=datetime.now(timezone.utc),
            properties=dict(properties),
        )
        self._buffer.append(event)
        logger.info(
            "analytics_event",
            extra={"event_name": event_name, "user_id": user_id, "properties": event.properties},
        )

    def get_event_buffer(self) -> list[BehaviorEvent]:
        return list(self._buffer)

    def events_named(self, event_name: str) -> list[BehaviorEvent]:
        return [e for e in self._buffer if e.event_name == event_name]

    def clear_buffer(self) -> None:
        self._buffer.clear()


def notify_safely(
    sink: Optional[AnalyticsSink],
    event_name: str,
    user_id: str,
    properties: Optional[dict[str, Any]] = None
) -> None:
    """
    Send an event to the sink, discarding any failure.

    Args:
        sink: Analytics sink, or None to skip notification
        event_name: Event name (see AnalyticsEvents)
        user_id: User the event belongs to
        properties: Event payload
    """
    if sink is None:
        return
    try:
        sink.notify(event_name, user_id, properties or {})
    except Exception as exc:
        error = AnalyticsNotificationError(f"{event_name}: {exc}")
        logger.warning("analytics_notification_failed: %s", error, exc_info=True)
