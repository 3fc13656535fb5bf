"""Structured telemetry for roadmap generation and progress tracking.

Events are logged as one JSON line on the ``leaderreps.telemetry`` logger,
fanned out to in-process listeners, and kept in a short history so health
and debug surfaces can show what happened recently without a metrics backend.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import RLock
from typing import Any, Callable, Deque, Dict, List, Optional

logger = logging.getLogger("leaderreps.telemetry")

MAX_RECENT_EVENTS = 200


@dataclass(frozen=True)
class TelemetryEvent:
    name: str
    payload: Dict[str, Any]
    emitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def owner_id(self) -> Optional[str]:
        value = self.payload.get("owner_id")
        return value if isinstance(value, str) else None


Listener = Callable[[TelemetryEvent], None]

_listeners: List[Listener] = []
_recent: Deque[TelemetryEvent] = deque(maxlen=MAX_RECENT_EVENTS)
_lock = RLock()


def register_listener(listener: Listener) -> None:
    with _lock:
        _listeners.append(listener)


def clear_listeners() -> None:
    """Drop listeners and history; tests call this between cases."""
    with _lock:
        _listeners.clear()
        _recent.clear()


def recent_events(name: Optional[str] = None, *, owner_id: Optional[str] = None, limit: int = 50) -> List[TelemetryEvent]:
    """Newest-first slice of the in-process event history."""
    with _lock:
        events = list(_recent)
    matching = [
        event
        for event in reversed(events)
        if (name is None or event.name == name) and (owner_id is None or event.owner_id == owner_id)
    ]
    return matching[: max(limit, 0)]


def emit_event(name: str, **fields: Any) -> TelemetryEvent:
    payload = {key: _sanitize(value) for key, value in fields.items()}
    event = TelemetryEvent(name=name, payload=payload)

    with _lock:
        _recent.append(event)
        listeners = list(_listeners)

    for listener in listeners:
        try:
            listener(event)
        except Exception:  # noqa: BLE001
            logger.exception("Telemetry listener failed for %s", name)

    structured = {"event": name, "emitted_at": event.emitted_at.isoformat(), **payload}
    logger.info("TELEMETRY %s", json.dumps(structured, default=str, sort_keys=True))
    return event


def _sanitize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return [_sanitize(entry) for entry in value]
    if isinstance(value, list):
        return [_sanitize(entry) for entry in value]
    if isinstance(value, dict):
        return {str(key): _sanitize(entry) for key, entry in value.items()}
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return value


__all__ = [
    "MAX_RECENT_EVENTS",
    "TelemetryEvent",
    "clear_listeners",
    "emit_event",
    "recent_events",
    "register_listener",
]
