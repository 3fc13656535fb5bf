"""In-memory caches used by the roadmap services."""

from .roadmap_cache import RoadmapCache

__all__ = ["RoadmapCache"]
