from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect

from scripts import run_migrations as runner


def test_resolve_database_url_prefers_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEADERREPS_DATABASE_URL", "sqlite://")
    config = runner.load_config(str(runner.PROJECT_ROOT / "alembic.ini"))
    assert runner.resolve_database_url(config) == "sqlite://"
    assert config.get_main_option("sqlalchemy.url") == "sqlite://"


def test_resolve_database_url_requires_configuration() -> None:
    config = runner.load_config(str(runner.PROJECT_ROOT / "alembic.ini"))
    with pytest.raises(RuntimeError):
        runner.resolve_database_url(config)


def test_wait_for_database_succeeds_with_sqlite(tmp_path: Path) -> None:
    runner.wait_for_database(f"sqlite:///{tmp_path / 'ready.sqlite'}", timeout=2, poll_interval=0.1)


def test_wait_for_database_times_out(monkeypatch: pytest.MonkeyPatch) -> None:
    class DummyEngine:
        def connect(self):
            raise runner.OperationalError("SELECT 1", {}, Exception("boom"))

        def dispose(self) -> None:
            pass

    monkeypatch.setattr(runner, "create_engine", lambda *_, **__: DummyEngine())
    with pytest.raises(RuntimeError):
        runner.wait_for_database("postgresql://example", timeout=0, poll_interval=0)


def test_upgrade_creates_roadmap_documents_table(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.sqlite'}"
    monkeypatch.setenv("LEADERREPS_DATABASE_URL", url)

    runner.run_migrations("head", timeout=2, poll_interval=0.1)

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        assert "roadmap_documents" in inspector.get_table_names()
        columns = {column["name"] for column in inspector.get_columns("roadmap_documents")}
        assert {"path", "payload", "current_period_index", "revision"} <= columns
    finally:
        engine.dispose()
