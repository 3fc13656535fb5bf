from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from leaderreps.config import get_settings
from leaderreps.db.session import dispose_engine
from leaderreps.main import app


def test_health_endpoint_reports_persistence_mode() -> None:
    response = TestClient(app).get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "persistence_mode": "memory"}


def test_database_health_endpoint_success(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEADERREPS_DATABASE_URL", "sqlite://")
    get_settings.cache_clear()
    dispose_engine()

    response = TestClient(app).get("/healthz/database")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert "pool" in payload
    assert payload["pool"]["connects"] >= 1
    assert "persistence_mode" in payload


def test_database_health_endpoint_without_url() -> None:
    response = TestClient(app).get("/healthz/database")
    assert response.status_code == 503
    assert "LEADERREPS_DATABASE_URL" in response.json()["detail"]


def test_database_health_endpoint_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def raise_runtime_error():
        raise RuntimeError("database unreachable")

    monkeypatch.setattr("leaderreps.main.get_engine", raise_runtime_error)
    response = TestClient(app).get("/healthz/database")
    assert response.status_code == 503
    assert response.json()["detail"] == "database unreachable"
