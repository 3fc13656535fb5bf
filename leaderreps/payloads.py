"""Response payloads exposed to the presentation layer."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .catalog import (
    CATALOG,
    TOPICS,
    CatalogItem,
    Topic,
    get_item,
    reflection_prompt_for,
    topic_title,
)
from .roadmap import Period, Roadmap

NEXT_PERIOD_PREVIEW_ITEMS = 3


class TopicPayload(BaseModel):
    topic_id: int
    title: str
    description: str
    reflection_prompt: str


class CatalogItemPayload(BaseModel):
    item_id: str
    topic_id: int
    skill: str
    title: str
    content_type: str
    duration_minutes: int
    difficulty: str
    url: str


class CatalogPayload(BaseModel):
    topics: List[TopicPayload] = Field(default_factory=list)
    items: List[CatalogItemPayload] = Field(default_factory=list)


class PeriodItemPayload(BaseModel):
    item_id: str
    title: str
    skill: Optional[str] = None
    content_type: Optional[str] = None
    difficulty: Optional[str] = None
    url: str = "#"
    base_duration_minutes: Optional[int] = None
    adjusted_duration_minutes: int


class PeriodPayload(BaseModel):
    index: int
    topic_id: int
    topic_title: str
    theme: str
    status: str
    reflection_text: Optional[str] = None
    completed_at: Optional[datetime] = None
    items: List[PeriodItemPayload] = Field(default_factory=list)


class NextPeriodPreviewPayload(BaseModel):
    index: int
    topic_id: int
    topic_title: str
    theme: str
    item_titles: List[str] = Field(default_factory=list)


class ScenarioPayload(BaseModel):
    text: str
    period_index: int
    submitted_at: datetime


class RoadmapSnapshotPayload(BaseModel):
    owner_id: str
    has_roadmap: bool = False
    current_period_index: Optional[int] = None
    period_count: int = 0
    percent_complete: int = 0
    completed_count: int = 0
    current_period: Optional[PeriodPayload] = None
    next_period: Optional[NextPeriodPreviewPayload] = None
    roadmap_complete: bool = False
    reflection_prompt: Optional[str] = None
    latest_scenario: Optional[ScenarioPayload] = None
    last_updated: Optional[datetime] = None


class RoadmapActionPayload(BaseModel):
    message: str
    snapshot: RoadmapSnapshotPayload


class FeedbackLinkPayload(BaseModel):
    owner_id: str
    topic_id: int
    url: str


def topic_payload(topic: Topic) -> TopicPayload:
    return TopicPayload(
        topic_id=topic.topic_id,
        title=topic.title,
        description=topic.description,
        reflection_prompt=reflection_prompt_for(topic.topic_id),
    )


def catalog_item_payload(item: CatalogItem) -> CatalogItemPayload:
    return CatalogItemPayload(**item.model_dump())


def catalog_payload() -> CatalogPayload:
    return CatalogPayload(
        topics=[topic_payload(topic) for topic in TOPICS],
        items=[catalog_item_payload(item) for item in CATALOG],
    )


def period_payload(period: Period) -> PeriodPayload:
    items: List[PeriodItemPayload] = []
    for entry in period.items:
        item = get_item(entry.catalog_item_id)
        if item is None:
            items.append(
                PeriodItemPayload(
                    item_id=entry.catalog_item_id,
                    title=entry.catalog_item_id,
                    adjusted_duration_minutes=entry.adjusted_duration_minutes,
                )
            )
            continue
        items.append(
            PeriodItemPayload(
                item_id=item.item_id,
                title=item.title,
                skill=item.skill,
                content_type=item.content_type,
                difficulty=item.difficulty,
                url=item.url,
                base_duration_minutes=item.duration_minutes,
                adjusted_duration_minutes=entry.adjusted_duration_minutes,
            )
        )
    return PeriodPayload(
        index=period.index,
        topic_id=period.topic_id,
        topic_title=topic_title(period.topic_id),
        theme=period.theme,
        status=period.status,
        reflection_text=period.reflection_text,
        completed_at=period.completed_at,
        items=items,
    )


def next_period_preview(period: Period) -> NextPeriodPreviewPayload:
    titles: List[str] = []
    for entry in period.items[:NEXT_PERIOD_PREVIEW_ITEMS]:
        item = get_item(entry.catalog_item_id)
        titles.append(item.title if item else entry.catalog_item_id)
    return NextPeriodPreviewPayload(
        index=period.index,
        topic_id=period.topic_id,
        topic_title=topic_title(period.topic_id),
        theme=period.theme,
        item_titles=titles,
    )


def empty_snapshot(owner_id: str) -> RoadmapSnapshotPayload:
    """The "no roadmap yet" view; the presentation layer shows the assessment form."""
    return RoadmapSnapshotPayload(owner_id=owner_id, has_roadmap=False)


def snapshot_from_roadmap(roadmap: Roadmap) -> RoadmapSnapshotPayload:
    current = roadmap.current_period
    is_last = current.index >= roadmap.period_count
    finished = roadmap.completed_count == roadmap.period_count
    scenario = roadmap.latest_scenario
    return RoadmapSnapshotPayload(
        owner_id=roadmap.owner_id,
        has_roadmap=True,
        current_period_index=roadmap.current_period_index,
        period_count=roadmap.period_count,
        percent_complete=roadmap.percent_complete,
        completed_count=roadmap.completed_count,
        current_period=period_payload(current),
        next_period=None if is_last else next_period_preview(roadmap.period(current.index + 1)),
        roadmap_complete=finished,
        reflection_prompt=reflection_prompt_for(current.topic_id),
        latest_scenario=(
            ScenarioPayload(
                text=scenario.text,
                period_index=scenario.period_index,
                submitted_at=scenario.submitted_at,
            )
            if scenario
            else None
        ),
        last_updated=roadmap.last_updated,
    )


def completion_message(period_index: int, roadmap: Roadmap) -> str:
    if roadmap.completed_count == roadmap.period_count:
        return f"Period {period_index} completed! You've reached the end of your roadmap."
    if roadmap.current_period_index > period_index:
        return (
            f"Period {period_index} completed! "
            f"Advancing to Period {roadmap.current_period_index} reps."
        )
    return f"Period {period_index} completed!"


def reflection_message(period_index: int) -> str:
    return f"Reflection for Period {period_index} saved."


SCENARIO_MESSAGE = "Scenario submitted! Be ready to discuss it in your Leaders Circle."
ROADMAP_CREATED_MESSAGE = "Your personalized 24-period roadmap is ready."
ROADMAP_RESTARTED_MESSAGE = "Your roadmap was reset. Submit a new assessment to generate a fresh plan."


__all__ = [
    "CatalogItemPayload",
    "CatalogPayload",
    "FeedbackLinkPayload",
    "NextPeriodPreviewPayload",
    "PeriodItemPayload",
    "PeriodPayload",
    "ROADMAP_CREATED_MESSAGE",
    "ROADMAP_RESTARTED_MESSAGE",
    "RoadmapActionPayload",
    "RoadmapSnapshotPayload",
    "SCENARIO_MESSAGE",
    "ScenarioPayload",
    "TopicPayload",
    "catalog_payload",
    "completion_message",
    "empty_snapshot",
    "period_payload",
    "reflection_message",
    "snapshot_from_roadmap",
]
