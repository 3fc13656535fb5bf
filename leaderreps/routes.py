"""Roadmap REST endpoints surfaced to the dashboard client."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from .errors import InvalidArgument
from .payloads import (
    ROADMAP_CREATED_MESSAGE,
    ROADMAP_RESTARTED_MESSAGE,
    SCENARIO_MESSAGE,
    CatalogPayload,
    FeedbackLinkPayload,
    RoadmapActionPayload,
    RoadmapSnapshotPayload,
    catalog_payload,
    completion_message,
    empty_snapshot,
    reflection_message,
    snapshot_from_roadmap,
)
from .progress import (
    MIN_REFLECTION_LENGTH,
    MIN_SCENARIO_LENGTH,
    validate_reflection_text,
    validate_scenario_text,
)
from .roadmap import MAX_GOALS
from .tracker import ProgressTracker, get_tracker

router = APIRouter(prefix="/api/roadmap", tags=["roadmap"])
catalog_router = APIRouter(prefix="/api/catalog", tags=["catalog"])
logger = logging.getLogger(__name__)


class AssessmentRequest(BaseModel):
    experience_level: Literal["Novice", "Intermediate", "Advanced"]
    goal_topic_ids: List[int] = Field(default_factory=list, description=f"Up to {MAX_GOALS} topic ids.")
    self_rating_by_topic_id: Dict[int, int] = Field(default_factory=dict)
    force: bool = Field(
        default=False,
        description="Replace an existing roadmap instead of rejecting the request.",
    )

    def assessment_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"force"})


class ReflectionRequest(BaseModel):
    text: str = Field(..., description=f"At least {MIN_REFLECTION_LENGTH} characters.")


class CompleteRequest(BaseModel):
    skip_reflection_check: bool = False


class ScenarioRequest(BaseModel):
    text: str = Field(..., description=f"At least {MIN_SCENARIO_LENGTH} characters.")
    period_index: Optional[int] = Field(
        default=None,
        ge=1,
        description="Period the scenario belongs to. Defaults to the current period.",
    )


@catalog_router.get("", response_model=CatalogPayload, status_code=status.HTTP_200_OK)
def get_catalog() -> CatalogPayload:
    return catalog_payload()


@router.get("/{owner_id}", response_model=RoadmapSnapshotPayload, status_code=status.HTTP_200_OK)
def get_snapshot(owner_id: str, tracker: ProgressTracker = Depends(get_tracker)) -> RoadmapSnapshotPayload:
    return tracker.snapshot(owner_id)


@router.get("/{owner_id}/document", status_code=status.HTTP_200_OK)
def get_document(owner_id: str, tracker: ProgressTracker = Depends(get_tracker)) -> Dict[str, Any]:
    return tracker.require_roadmap(owner_id).to_document()


@router.post("/{owner_id}", response_model=RoadmapActionPayload, status_code=status.HTTP_201_CREATED)
def create_roadmap(
    owner_id: str,
    request: AssessmentRequest,
    tracker: ProgressTracker = Depends(get_tracker),
) -> RoadmapActionPayload:
    roadmap = tracker.create_roadmap(owner_id, request.assessment_payload(), replace=request.force)
    return RoadmapActionPayload(message=ROADMAP_CREATED_MESSAGE, snapshot=snapshot_from_roadmap(roadmap))


@router.put(
    "/{owner_id}/periods/{period_index}/reflection",
    response_model=RoadmapActionPayload,
    status_code=status.HTTP_200_OK,
)
def submit_reflection(
    owner_id: str,
    period_index: int,
    request: ReflectionRequest,
    tracker: ProgressTracker = Depends(get_tracker),
) -> RoadmapActionPayload:
    text = validate_reflection_text(request.text)
    roadmap = tracker.submit_reflection(owner_id, period_index, text)
    return RoadmapActionPayload(
        message=reflection_message(period_index),
        snapshot=snapshot_from_roadmap(roadmap),
    )


@router.post(
    "/{owner_id}/periods/{period_index}/complete",
    response_model=RoadmapActionPayload,
    status_code=status.HTTP_200_OK,
)
def complete_period(
    owner_id: str,
    period_index: int,
    request: Optional[CompleteRequest] = None,
    tracker: ProgressTracker = Depends(get_tracker),
) -> RoadmapActionPayload:
    skip = request.skip_reflection_check if request else False
    roadmap = tracker.complete_period(owner_id, period_index, skip_reflection_check=skip)
    return RoadmapActionPayload(
        message=completion_message(period_index, roadmap),
        snapshot=snapshot_from_roadmap(roadmap),
    )


@router.post(
    "/{owner_id}/periods/{period_index}/reflect-and-complete",
    response_model=RoadmapActionPayload,
    status_code=status.HTTP_200_OK,
)
def reflect_and_complete(
    owner_id: str,
    period_index: int,
    request: ReflectionRequest,
    tracker: ProgressTracker = Depends(get_tracker),
) -> RoadmapActionPayload:
    roadmap = tracker.reflect_and_complete(owner_id, period_index, request.text)
    return RoadmapActionPayload(
        message=completion_message(period_index, roadmap),
        snapshot=snapshot_from_roadmap(roadmap),
    )


@router.put("/{owner_id}/scenario", response_model=RoadmapActionPayload, status_code=status.HTTP_200_OK)
def submit_scenario(
    owner_id: str,
    request: ScenarioRequest,
    tracker: ProgressTracker = Depends(get_tracker),
) -> RoadmapActionPayload:
    text = validate_scenario_text(request.text)
    period_index = request.period_index
    if period_index is None:
        period_index = tracker.require_roadmap(owner_id).current_period_index
    roadmap = tracker.submit_scenario(owner_id, period_index, text)
    return RoadmapActionPayload(message=SCENARIO_MESSAGE, snapshot=snapshot_from_roadmap(roadmap))


@router.get("/{owner_id}/feedback-link", response_model=FeedbackLinkPayload, status_code=status.HTTP_200_OK)
def get_feedback_link(owner_id: str, tracker: ProgressTracker = Depends(get_tracker)) -> FeedbackLinkPayload:
    roadmap = tracker.require_roadmap(owner_id)
    return FeedbackLinkPayload(
        owner_id=roadmap.owner_id,
        topic_id=roadmap.current_period.topic_id,
        url=tracker.feedback_link(owner_id),
    )


@router.delete("/{owner_id}", response_model=RoadmapActionPayload, status_code=status.HTTP_200_OK)
def restart_roadmap(
    owner_id: str,
    confirm: bool = Query(
        default=False,
        description="Must be true; restarting permanently discards the roadmap.",
    ),
    tracker: ProgressTracker = Depends(get_tracker),
) -> RoadmapActionPayload:
    if not confirm:
        raise InvalidArgument("Restarting discards all progress; pass confirm=true to proceed.")
    tracker.restart(owner_id)
    return RoadmapActionPayload(
        message=ROADMAP_RESTARTED_MESSAGE,
        snapshot=empty_snapshot(owner_id.strip()),
    )


__all__ = ["catalog_router", "router"]
