"""Persistence port and adapters for roadmap documents.

The tracker only depends on :class:`RoadmapStore` (load / save / delete by
owner). :class:`RoadmapDocumentStore` picks the configured adapter, keeps the
process-local cache in step with successful writes, and turns driver and
filesystem errors into :class:`~leaderreps.errors.PersistenceFailure`.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from .cache import RoadmapCache
from .config import Settings, get_settings
from .db.session import session_scope
from .errors import PersistenceFailure, RoadmapError
from .repositories.roadmaps import RoadmapRepository
from .roadmap import Roadmap, roadmap_document_path

logger = logging.getLogger(__name__)

DATA_DIR = Path(os.getenv("LEADERREPS_DATA_DIR", Path(__file__).resolve().parent.parent / "data"))


class RoadmapStore(Protocol):
    def load(self, owner_id: str) -> Optional[Roadmap]:  # pragma: no cover - protocol definition
        ...

    def save(self, roadmap: Roadmap) -> Roadmap:  # pragma: no cover - protocol definition
        ...

    def delete(self, owner_id: str) -> bool:  # pragma: no cover - protocol definition
        ...


class InMemoryRoadmapStore:
    """Dictionary of serialized documents keyed by document path."""

    def __init__(self, app_id: str = "leaderreps-pd-plan") -> None:
        self._app_id = app_id
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    def path_for(self, owner_id: str) -> str:
        return roadmap_document_path(self._app_id, owner_id)

    def load(self, owner_id: str) -> Optional[Roadmap]:
        with self._lock:
            document = self._documents.get(self.path_for(owner_id))
        return Roadmap.from_document(document) if document is not None else None

    def save(self, roadmap: Roadmap) -> Roadmap:
        document = roadmap.to_document()
        with self._lock:
            self._documents[self.path_for(roadmap.owner_id)] = document
        return Roadmap.from_document(document)

    def delete(self, owner_id: str) -> bool:
        with self._lock:
            return self._documents.pop(self.path_for(owner_id), None) is not None

    def paths(self) -> list[str]:
        with self._lock:
            return sorted(self._documents)


class _LegacyRoadmapStore:
    """JSON-file store used for offline and single-node deployments."""

    def __init__(self, app_id: str, path: Optional[Path] = None) -> None:
        self._app_id = app_id
        self._path = path or DATA_DIR / "roadmaps.json"
        self._lock = threading.RLock()

    def _load_unlocked(self) -> Dict[str, Dict[str, Any]]:
        if not self._path.exists():
            return {}
        with self._path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
        if not isinstance(raw, dict):
            raise ValueError(f"Legacy roadmap store {self._path} is not a JSON object.")
        return raw

    def _write_unlocked(self, documents: Dict[str, Dict[str, Any]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            dir=str(self._path.parent),
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(documents, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load(self, owner_id: str) -> Optional[Roadmap]:
        key = roadmap_document_path(self._app_id, owner_id)
        with self._lock:
            document = self._load_unlocked().get(key)
        return Roadmap.from_document(document) if document is not None else None

    def save(self, roadmap: Roadmap) -> Roadmap:
        document = roadmap.to_document()
        key = roadmap_document_path(self._app_id, roadmap.owner_id)
        with self._lock:
            documents = self._load_unlocked()
            documents[key] = document
            self._write_unlocked(documents)
        return Roadmap.from_document(document)

    def delete(self, owner_id: str) -> bool:
        key = roadmap_document_path(self._app_id, owner_id)
        with self._lock:
            documents = self._load_unlocked()
            if key not in documents:
                return False
            documents.pop(key)
            self._write_unlocked(documents)
        return True


class _DatabaseRoadmapStore:
    """SQLAlchemy-backed store; each write runs in its own transaction."""

    def __init__(self, app_id: str) -> None:
        self._repo = RoadmapRepository(app_id)

    def load(self, owner_id: str) -> Optional[Roadmap]:
        with session_scope(commit=False) as session:
            return self._repo.get(session, owner_id)

    def save(self, roadmap: Roadmap) -> Roadmap:
        with session_scope() as session:
            return self._repo.save(session, roadmap)

    def delete(self, owner_id: str) -> bool:
        with session_scope() as session:
            return self._repo.delete(session, owner_id)


def build_backend(settings: Settings) -> RoadmapStore:
    mode = settings.persistence_mode
    if mode == "memory":
        return InMemoryRoadmapStore(settings.app_id)
    if mode == "legacy":
        return _LegacyRoadmapStore(settings.app_id, path=settings.legacy_store_path)
    return _DatabaseRoadmapStore(settings.app_id)


class RoadmapDocumentStore:
    """Facade that delegates to the configured backend and maintains the roadmap cache.

    The cache is keyed by owner only, so each facade owns one unless a cache is
    passed in explicitly.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        backend: Optional[RoadmapStore] = None,
        cache: Optional[RoadmapCache] = None,
    ) -> None:
        settings = settings or get_settings()
        self._mode = settings.persistence_mode if backend is None else "custom"
        self._backend = backend or build_backend(settings)
        self._cache = cache if cache is not None else RoadmapCache()

    @property
    def mode(self) -> str:
        return self._mode

    def _call(self, method: str, owner_id: str, *args: Any) -> Any:
        try:
            return getattr(self._backend, method)(*args)
        except RoadmapError:
            raise
        except (SQLAlchemyError, OSError, ValueError, ValidationError) as exc:
            logger.warning(
                "Roadmap %s failed for %s via %s store: %s",
                method,
                owner_id,
                self._mode,
                exc,
            )
            raise PersistenceFailure(f"Roadmap {method} failed: {exc}") from exc

    def load(self, owner_id: str) -> Optional[Roadmap]:
        cached = self._cache.get(owner_id)
        if cached is not None:
            return cached
        roadmap = self._call("load", owner_id, owner_id)
        if roadmap is not None:
            self._cache.set(owner_id, roadmap)
        return roadmap

    def save(self, roadmap: Roadmap) -> Roadmap:
        try:
            stored = self._call("save", roadmap.owner_id, roadmap)
        except PersistenceFailure:
            self._cache.invalidate(roadmap.owner_id)
            raise
        self._cache.set(roadmap.owner_id, stored)
        return stored

    def delete(self, owner_id: str) -> bool:
        try:
            return self._call("delete", owner_id, owner_id)
        finally:
            self._cache.invalidate(owner_id)


__all__ = [
    "InMemoryRoadmapStore",
    "RoadmapDocumentStore",
    "RoadmapStore",
    "build_backend",
]
