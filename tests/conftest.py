from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterator

import pytest

from leaderreps.config import get_settings
from leaderreps.db.session import dispose_engine
from leaderreps.roadmap import Assessment
from leaderreps.telemetry import clear_listeners
from leaderreps.tracker import reset_tracker

ASSESSED_AT = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("LEADERREPS_PERSISTENCE_MODE", "memory")
    monkeypatch.delenv("LEADERREPS_DATABASE_URL", raising=False)
    monkeypatch.delenv("LEADERREPS_LEGACY_STORE_PATH", raising=False)
    get_settings.cache_clear()
    dispose_engine()
    clear_listeners()
    reset_tracker()
    yield
    get_settings.cache_clear()
    dispose_engine()
    clear_listeners()
    reset_tracker()


def make_assessment(
    level: str = "Novice",
    goals: list[int] | None = None,
    ratings: Dict[int, int] | None = None,
) -> Assessment:
    return Assessment(
        experience_level=level,
        goal_topic_ids=[2] if goals is None else goals,
        self_rating_by_topic_id=ratings or {1: 5, 2: 2, 3: 5, 4: 5, 5: 5},
        created_at=ASSESSED_AT,
    )


class FixedClock:
    """Deterministic clock that ticks one minute per call."""

    def __init__(self, start: datetime = ASSESSED_AT) -> None:
        self._now = start

    def __call__(self) -> datetime:
        self._now = self._now + timedelta(minutes=1)
        return self._now


@pytest.fixture()
def assessment() -> Assessment:
    return make_assessment()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()
