"""Process-local read-through cache of roadmap documents keyed by owner."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, Optional

from ..roadmap import Roadmap


def _cache_key(owner_id: str) -> str:
    key = owner_id.strip()
    if not key:
        raise ValueError("Owner id cannot be empty when caching roadmaps.")
    return key


@dataclass
class _CachedRoadmap:
    roadmap: Roadmap
    cached_at: datetime


class RoadmapCache:
    """Holds deep copies so callers can never mutate a cached roadmap in place."""

    def __init__(self) -> None:
        self._entries: Dict[str, _CachedRoadmap] = {}
        self._lock = RLock()

    def get(self, owner_id: str) -> Optional[Roadmap]:
        with self._lock:
            entry = self._entries.get(_cache_key(owner_id))
        if entry is None:
            return None
        return entry.roadmap.model_copy(deep=True)

    def cached_at(self, owner_id: str) -> Optional[datetime]:
        with self._lock:
            entry = self._entries.get(_cache_key(owner_id))
        return entry.cached_at if entry else None

    def set(self, owner_id: str, roadmap: Roadmap) -> None:
        entry = _CachedRoadmap(
            roadmap=roadmap.model_copy(deep=True),
            cached_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._entries[_cache_key(owner_id)] = entry

    def invalidate(self, owner_id: str) -> None:
        with self._lock:
            self._entries.pop(_cache_key(owner_id), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["RoadmapCache"]
