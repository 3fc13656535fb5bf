"""Connection-pool counters for the roadmap database, reported via telemetry."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict

from sqlalchemy import event
from sqlalchemy.engine import Engine

from ..telemetry import emit_event

POOL_EVENTS = ("connect", "checkout", "checkin")


@dataclass
class PoolCounters:
    counts: Dict[str, int] = field(default_factory=lambda: {name: 0 for name in POOL_EVENTS})
    last_report: float = 0.0
    lock: Lock = field(default_factory=Lock)

    def bump(self, name: str) -> bool:
        """Count one pool event; True when a telemetry report is due."""
        interval = float(os.getenv("LEADERREPS_DB_TELEMETRY_INTERVAL", "30"))
        with self.lock:
            self.counts[name] += 1
            now = time.monotonic()
            if interval > 0 and self.last_report and now - self.last_report < interval:
                return False
            self.last_report = now
            return True


_COUNTERS: Dict[int, PoolCounters] = {}


def instrument_engine(engine: Engine) -> None:
    key = id(engine)
    if key in _COUNTERS:
        return
    counters = PoolCounters()
    _COUNTERS[key] = counters

    def _listener(name: str):  # type: ignore[no-untyped-def]
        def _on_event(*_args) -> None:  # type: ignore[no-untyped-def]
            if counters.bump(name):
                emit_event("db_pool_status", pool_event=name, **pool_snapshot(engine))

        return _on_event

    for name in POOL_EVENTS:
        event.listen(engine, name, _listener(name))


def pool_snapshot(engine: Engine) -> Dict[str, object]:
    counters = _COUNTERS.get(id(engine))
    snapshot: Dict[str, object] = {"status": _pool_status(engine)}
    for name in POOL_EVENTS:
        snapshot[f"{name}s"] = counters.counts[name] if counters else 0
    return snapshot


def _pool_status(engine: Engine) -> str:
    try:
        return engine.pool.status()
    except Exception as exc:  # noqa: BLE001
        return f"unavailable: {exc}"


__all__ = ["PoolCounters", "instrument_engine", "pool_snapshot"]
