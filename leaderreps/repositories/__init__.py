"""Repository layer for persistence-backed stores."""

from .roadmaps import RoadmapRepository

__all__ = ["RoadmapRepository"]
