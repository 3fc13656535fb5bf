from __future__ import annotations

import pytest
from sqlalchemy import create_engine, text

from leaderreps.db import monitoring


def test_instrument_engine_emits_pool_telemetry(monkeypatch: pytest.MonkeyPatch) -> None:
    emitted: list[tuple[str, dict[str, object]]] = []

    def record(event_name: str, **payload: object) -> None:
        emitted.append((event_name, payload))

    monkeypatch.setenv("LEADERREPS_DB_TELEMETRY_INTERVAL", "0")
    monkeypatch.setattr(monitoring, "emit_event", record)

    engine = create_engine("sqlite:///:memory:", future=True)
    try:
        monitoring.instrument_engine(engine)
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        assert emitted
        event_name, payload = emitted[0]
        assert event_name == "db_pool_status"
        assert payload["pool_event"] == "connect"
        assert payload["connects"] >= 1

        snapshot = monitoring.pool_snapshot(engine)
        assert snapshot["checkouts"] >= 1
        assert snapshot["checkins"] >= 1
    finally:
        engine.dispose()


def test_pool_snapshot_for_uninstrumented_engine() -> None:
    engine = create_engine("sqlite:///:memory:", future=True)
    try:
        snapshot = monitoring.pool_snapshot(engine)
        assert snapshot["connects"] == 0
        assert "status" in snapshot
    finally:
        engine.dispose()
