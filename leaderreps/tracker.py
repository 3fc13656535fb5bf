"""Progress tracker: loads a learner's roadmap, applies one command, persists it.

Every command computes the new roadmap from a copy and only then writes it,
so a failed write leaves the stored roadmap exactly as it was and the caller
can retry the same command.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union
from urllib.parse import urlencode

from .config import get_settings
from .errors import (
    InvalidArgument,
    PeriodAlreadyCompleted,
    PersistenceFailure,
    ReflectionRequired,
    RoadmapAlreadyExists,
    RoadmapNotFound,
)
from .payloads import RoadmapSnapshotPayload, empty_snapshot, snapshot_from_roadmap
from .plan_generator import PlanGenerator
from .plan_generator import generator as default_generator
from .progress import (
    mark_period_complete,
    record_reflection,
    record_scenario,
    validate_reflection_text,
)
from .roadmap import Assessment, Roadmap
from .roadmap_store import RoadmapDocumentStore, RoadmapStore
from .telemetry import emit_event

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
AssessmentInput = Union[Assessment, Mapping[str, Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_owner(owner_id: str) -> str:
    normalized = (owner_id or "").strip()
    if not normalized:
        raise InvalidArgument("Owner id cannot be empty.")
    return normalized


class ProgressTracker:
    def __init__(
        self,
        store: RoadmapStore,
        *,
        generator: Optional[PlanGenerator] = None,
        clock: Optional[Clock] = None,
        feedback_form_url: Optional[str] = None,
    ) -> None:
        self._store = store
        self._generator = generator or default_generator
        self._clock = clock or _utcnow
        self._feedback_form_url = feedback_form_url

    def get_roadmap(self, owner_id: str) -> Optional[Roadmap]:
        return self._store.load(_normalize_owner(owner_id))

    def require_roadmap(self, owner_id: str) -> Roadmap:
        owner = _normalize_owner(owner_id)
        roadmap = self._store.load(owner)
        if roadmap is None:
            raise RoadmapNotFound(owner)
        return roadmap

    def create_roadmap(
        self,
        owner_id: str,
        assessment: AssessmentInput,
        *,
        replace: bool = False,
    ) -> Roadmap:
        owner = _normalize_owner(owner_id)
        if not isinstance(assessment, Assessment):
            assessment = Assessment.from_payload(assessment)

        existing = self._store.load(owner)
        if existing is not None and not replace:
            raise RoadmapAlreadyExists(owner)

        roadmap = self._generator.generate(owner, assessment)
        stored = self._persist("create_roadmap", roadmap)
        emit_event(
            "roadmap_generated",
            owner_id=owner,
            experience_level=assessment.experience_level,
            goal_topic_ids=assessment.goal_topic_ids,
            topic_sequence=[period.topic_id for period in stored.periods],
            replaced=existing is not None,
        )
        logger.info("Generated roadmap for %s (replaced=%s)", owner, existing is not None)
        return stored

    def submit_reflection(self, owner_id: str, period_index: int, text: str) -> Roadmap:
        roadmap = self.require_roadmap(owner_id)
        updated = record_reflection(roadmap, period_index, text, now=self._clock())
        stored = self._persist("submit_reflection", updated)
        emit_event(
            "reflection_recorded",
            owner_id=stored.owner_id,
            period_index=period_index,
            length=len(text),
            audit_correction=roadmap.period(period_index).is_completed,
        )
        return stored

    def complete_period(
        self,
        owner_id: str,
        period_index: int,
        *,
        skip_reflection_check: bool = False,
    ) -> Roadmap:
        roadmap = self.require_roadmap(owner_id)
        try:
            updated = mark_period_complete(
                roadmap,
                period_index,
                now=self._clock(),
                skip_reflection_check=skip_reflection_check,
            )
        except ReflectionRequired:
            emit_event("reflection_required", owner_id=roadmap.owner_id, period_index=period_index)
            raise

        stored = self._persist("complete_period", updated)
        emit_event(
            "period_completed",
            owner_id=stored.owner_id,
            period_index=period_index,
            current_period_index=stored.current_period_index,
            percent_complete=stored.percent_complete,
            skipped_reflection=skip_reflection_check and not roadmap.period(period_index).has_reflection,
        )
        logger.info(
            "Period %s completed for %s; pointer at %s",
            period_index,
            stored.owner_id,
            stored.current_period_index,
        )
        return stored

    def reflect_and_complete(self, owner_id: str, period_index: int, text: str) -> Roadmap:
        """Record a validated reflection, then complete the period.

        If the reflection write lands and the completion write fails, calling
        this again with the same text skips the reflection write and only
        retries the completion.
        """
        text = validate_reflection_text(text)
        roadmap = self.require_roadmap(owner_id)
        period = roadmap.period(period_index)
        if period.is_completed:
            raise PeriodAlreadyCompleted(period_index)
        if period.reflection_text != text:
            self.submit_reflection(owner_id, period_index, text)
        return self.complete_period(owner_id, period_index)

    def submit_scenario(self, owner_id: str, period_index: int, text: str) -> Roadmap:
        roadmap = self.require_roadmap(owner_id)
        updated = record_scenario(roadmap, period_index, text, now=self._clock())
        stored = self._persist("submit_scenario", updated)
        emit_event(
            "scenario_submitted",
            owner_id=stored.owner_id,
            period_index=period_index,
            replaced_previous=roadmap.latest_scenario is not None,
        )
        return stored

    def restart(self, owner_id: str) -> None:
        owner = _normalize_owner(owner_id)
        try:
            deleted = self._store.delete(owner)
        except PersistenceFailure as exc:
            self._report_failure("restart", owner, exc)
            raise
        if not deleted:
            raise RoadmapNotFound(owner)
        emit_event("roadmap_restarted", owner_id=owner)
        logger.info("Roadmap for %s discarded", owner)

    def snapshot(self, owner_id: str) -> RoadmapSnapshotPayload:
        owner = _normalize_owner(owner_id)
        roadmap = self._store.load(owner)
        if roadmap is None:
            return empty_snapshot(owner)
        return snapshot_from_roadmap(roadmap)

    def feedback_link(self, owner_id: str) -> str:
        roadmap = self.require_roadmap(owner_id)
        base_url = self._feedback_form_url or get_settings().feedback_form_url
        query = urlencode({"user": roadmap.owner_id, "tier": roadmap.current_period.topic_id})
        return f"{base_url}?{query}"

    def _persist(self, action: str, roadmap: Roadmap) -> Roadmap:
        try:
            return self._store.save(roadmap)
        except PersistenceFailure as exc:
            self._report_failure(action, roadmap.owner_id, exc)
            raise

    @staticmethod
    def _report_failure(action: str, owner_id: str, exc: PersistenceFailure) -> None:
        logger.warning("Persistence failed during %s for %s: %s", action, owner_id, exc)
        emit_event(
            "roadmap_persistence_failed",
            owner_id=owner_id,
            action=action,
            error=str(exc),
        )


_tracker: Optional[ProgressTracker] = None


def get_tracker() -> ProgressTracker:
    global _tracker
    if _tracker is None:
        settings = get_settings()
        _tracker = ProgressTracker(
            RoadmapDocumentStore(settings),
            feedback_form_url=settings.feedback_form_url,
        )
    return _tracker


def reset_tracker() -> None:
    global _tracker
    _tracker = None


__all__ = ["ProgressTracker", "get_tracker", "reset_tracker"]
