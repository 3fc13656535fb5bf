from __future__ import annotations

import json
from pathlib import Path

import pytest
from sqlalchemy import select

from conftest import make_assessment
from leaderreps.cache import RoadmapCache
from leaderreps.config import get_settings
from leaderreps.db.models import RoadmapDocumentModel
from leaderreps.db.session import create_schema, dispose_engine, session_scope
from leaderreps.errors import ConfigurationError, PersistenceFailure
from leaderreps.plan_generator import generate_roadmap
from leaderreps.progress import mark_period_complete
from leaderreps.roadmap import Roadmap, roadmap_document_path
from leaderreps.roadmap_store import InMemoryRoadmapStore, RoadmapDocumentStore

OWNER = "store-user"


def _roadmap() -> Roadmap:
    return generate_roadmap(OWNER, make_assessment())


@pytest.fixture()
def sqlite_store(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> RoadmapDocumentStore:
    monkeypatch.setenv("LEADERREPS_PERSISTENCE_MODE", "database")
    monkeypatch.setenv("LEADERREPS_DATABASE_URL", f"sqlite:///{tmp_path / 'roadmaps.sqlite'}")
    get_settings.cache_clear()
    dispose_engine()
    create_schema()
    return RoadmapDocumentStore(get_settings(), cache=RoadmapCache())


@pytest.fixture()
def legacy_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "legacy" / "roadmaps.json"
    monkeypatch.setenv("LEADERREPS_PERSISTENCE_MODE", "legacy")
    monkeypatch.setenv("LEADERREPS_LEGACY_STORE_PATH", str(path))
    get_settings.cache_clear()
    return path


def test_document_uses_camel_case_shape() -> None:
    document = _roadmap().to_document()
    assert document["ownerId"] == OWNER
    assert document["currentPeriodIndex"] == 1
    assert document["latestScenario"] is None
    period = document["periods"][0]
    assert set(period) == {"index", "topicId", "theme", "items", "status", "reflectionText", "completedAt"}
    assert period["items"][0] == {"catalogItemId": "c1-b", "adjustedDurationMinutes": 15}
    assert Roadmap.from_document(document).to_document() == document


def test_document_path_layout() -> None:
    assert roadmap_document_path("app", "u1") == "artifacts/app/users/u1/leadership_plan/roadmap"


def test_in_memory_store_round_trip() -> None:
    store = InMemoryRoadmapStore("tenant")
    assert store.load(OWNER) is None
    store.save(_roadmap())
    assert store.paths() == [roadmap_document_path("tenant", OWNER)]
    assert store.load(OWNER).to_document() == _roadmap().to_document()
    assert store.delete(OWNER) is True
    assert store.delete(OWNER) is False


def test_database_store_persists_document_and_progress_columns(sqlite_store: RoadmapDocumentStore) -> None:
    assert sqlite_store.mode == "database"
    roadmap = _roadmap()
    sqlite_store.save(roadmap)

    completed = mark_period_complete(roadmap, 1, now=roadmap.last_updated, skip_reflection_check=True)
    sqlite_store.save(completed)

    with session_scope(commit=False) as session:
        model = session.execute(select(RoadmapDocumentModel)).scalar_one()
        assert model.path == roadmap_document_path(get_settings().app_id, OWNER)
        assert model.current_period_index == 2
        assert model.completed_count == 1
        assert model.revision == 2
        assert model.payload["periods"][0]["status"] == "Completed"

    fresh = RoadmapDocumentStore(get_settings(), cache=RoadmapCache())
    loaded = fresh.load(OWNER)
    assert loaded is not None
    assert loaded.current_period_index == 2
    assert loaded.period(1).is_completed

    assert fresh.delete(OWNER) is True
    assert fresh.load(OWNER) is None
    assert fresh.delete(OWNER) is False


def test_legacy_store_writes_json_atomically(legacy_path: Path) -> None:
    store = RoadmapDocumentStore(get_settings(), cache=RoadmapCache())
    assert store.mode == "legacy"
    store.save(_roadmap())

    raw = json.loads(legacy_path.read_text(encoding="utf-8"))
    key = roadmap_document_path(get_settings().app_id, OWNER)
    assert list(raw) == [key]
    assert raw[key]["ownerId"] == OWNER
    assert [entry.name for entry in legacy_path.parent.iterdir()] == ["roadmaps.json"]

    reopened = RoadmapDocumentStore(get_settings(), cache=RoadmapCache())
    assert reopened.load(OWNER).to_document() == _roadmap().to_document()
    assert reopened.delete(OWNER) is True
    assert json.loads(legacy_path.read_text(encoding="utf-8")) == {}


def test_corrupt_legacy_file_surfaces_persistence_failure(legacy_path: Path) -> None:
    legacy_path.parent.mkdir(parents=True)
    legacy_path.write_text("{not json", encoding="utf-8")
    store = RoadmapDocumentStore(get_settings(), cache=RoadmapCache())
    with pytest.raises(PersistenceFailure):
        store.load(OWNER)


def test_database_mode_without_url_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEADERREPS_PERSISTENCE_MODE", "database")
    get_settings.cache_clear()
    store = RoadmapDocumentStore(get_settings(), cache=RoadmapCache())
    with pytest.raises(ConfigurationError):
        store.load(OWNER)


def test_cache_is_refreshed_only_after_successful_writes() -> None:
    cache = RoadmapCache()
    backend = InMemoryRoadmapStore()
    store = RoadmapDocumentStore(backend=backend, cache=cache)
    assert store.load(OWNER) is None
    assert cache.get(OWNER) is None

    stored = store.save(_roadmap())
    cached = cache.get(OWNER)
    assert cached.to_document() == stored.to_document()
    cached.current_period_index = 9
    assert cache.get(OWNER).current_period_index == 1

    store.delete(OWNER)
    assert cache.get(OWNER) is None


def test_stores_for_different_tenants_do_not_share_cached_roadmaps() -> None:
    first = RoadmapDocumentStore(backend=InMemoryRoadmapStore("tenant-a"))
    second = RoadmapDocumentStore(backend=InMemoryRoadmapStore("tenant-b"))

    first.save(_roadmap())
    assert first.load(OWNER) is not None
    assert second.load(OWNER) is None

    second.save(generate_roadmap(OWNER, make_assessment(level="Advanced")))
    assert first.load(OWNER).period(1).topic_id == 1
    assert second.load(OWNER).period(1).topic_id == 4


def test_backfill_copies_legacy_roadmaps_into_database(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    from scripts.backfill_roadmaps import backfill_roadmaps

    legacy_file = tmp_path / "legacy.json"
    app_id = get_settings().app_id
    key = roadmap_document_path(app_id, OWNER)
    legacy_file.write_text(
        json.dumps({key: _roadmap().to_document(), "broken": {"ownerId": "x"}}),
        encoding="utf-8",
    )

    monkeypatch.setenv("LEADERREPS_PERSISTENCE_MODE", "database")
    monkeypatch.setenv("LEADERREPS_DATABASE_URL", f"sqlite:///{tmp_path / 'backfill.sqlite'}")
    get_settings.cache_clear()
    dispose_engine()
    create_schema()

    assert backfill_roadmaps(legacy_file, app_id=app_id) == 1
    loaded = RoadmapDocumentStore(get_settings(), cache=RoadmapCache()).load(OWNER)
    assert loaded is not None
    assert loaded.to_document() == _roadmap().to_document()
