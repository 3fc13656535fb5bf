"""Roadmap aggregate: assessment input, scheduled periods and progress state.

The models serialise to the persisted document shape (camelCase keys) via
``to_document`` and accept either camelCase or snake_case on the way in.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .catalog import TOPIC_IDS
from .errors import InvalidAssessment, PeriodNotFound

ExperienceLevel = Literal["Novice", "Intermediate", "Advanced"]
PeriodStatus = Literal["Pending", "Completed"]

PERIOD_COUNT = 24
ITEMS_PER_PERIOD = 4
BLOCK_LENGTH = 4
MAX_GOALS = 3
MIN_RATING = 1
MAX_RATING = 10
DOCUMENT_COLLECTION = "leadership_plan"
DOCUMENT_NAME = "roadmap"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Assessment(_DocumentModel):
    """One-time self-assessment submitted by the learner."""

    experience_level: ExperienceLevel
    goal_topic_ids: List[int] = Field(default_factory=list)
    self_rating_by_topic_id: Dict[int, int] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_now)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Assessment":
        try:
            assessment = cls.model_validate(dict(payload))
        except ValidationError as exc:
            problems = [
                f"{'.'.join(str(part) for part in error['loc']) or 'assessment'}: {error['msg']}"
                for error in exc.errors()
            ]
            raise InvalidAssessment(problems) from exc
        validate_assessment(assessment)
        return assessment

    def rating_for(self, topic_id: int) -> int:
        return self.self_rating_by_topic_id[topic_id]


class PeriodItem(_DocumentModel):
    catalog_item_id: str
    adjusted_duration_minutes: int = Field(..., ge=0)


class Period(_DocumentModel):
    index: int = Field(..., ge=1)
    topic_id: int
    theme: str
    items: List[PeriodItem] = Field(default_factory=list)
    status: PeriodStatus = "Pending"
    reflection_text: Optional[str] = None
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == "Completed"

    @property
    def has_reflection(self) -> bool:
        return self.reflection_text is not None


class ScenarioSubmission(_DocumentModel):
    text: str
    period_index: int = Field(..., ge=1)
    submitted_at: datetime = Field(default_factory=_now)


class Roadmap(_DocumentModel):
    owner_id: str
    assessment: Assessment
    periods: List[Period] = Field(default_factory=list)
    current_period_index: int = Field(default=1, ge=1)
    latest_scenario: Optional[ScenarioSubmission] = None
    last_updated: datetime = Field(default_factory=_now)

    @property
    def period_count(self) -> int:
        return len(self.periods)

    @property
    def completed_count(self) -> int:
        return sum(1 for period in self.periods if period.is_completed)

    @property
    def percent_complete(self) -> int:
        return percent_complete(self.current_period_index, self.period_count or PERIOD_COUNT)

    @property
    def current_period(self) -> Period:
        return self.period(self.current_period_index)

    def period(self, index: int) -> Period:
        if index < 1 or index > len(self.periods):
            raise PeriodNotFound(self.owner_id, index, len(self.periods))
        return self.periods[index - 1]

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Roadmap":
        return cls.model_validate(dict(document))


def percent_complete(current_period_index: int, period_count: int = PERIOD_COUNT) -> int:
    """floor((current - 1) / count * 100), computed in integers."""
    if period_count <= 0:
        return 0
    completed = max(current_period_index - 1, 0)
    return (completed * 100) // period_count


def roadmap_document_path(app_id: str, owner_id: str) -> str:
    return f"artifacts/{app_id}/users/{owner_id}/{DOCUMENT_COLLECTION}/{DOCUMENT_NAME}"


def validate_assessment(assessment: Assessment, topic_ids: Sequence[int] = TOPIC_IDS) -> Assessment:
    """Reject structurally incomplete assessments before any plan is generated."""
    problems: List[str] = []
    known = set(topic_ids)
    goals = list(assessment.goal_topic_ids)

    if not goals:
        problems.append("Select at least one goal topic.")
    if len(goals) > MAX_GOALS:
        problems.append(f"Select at most {MAX_GOALS} goal topics (got {len(goals)}).")
    if len(set(goals)) != len(goals):
        problems.append("Goal topics must not repeat.")
    unknown_goals = sorted({goal for goal in goals if goal not in known})
    if unknown_goals:
        problems.append(f"Unknown goal topic ids: {unknown_goals}.")

    ratings = assessment.self_rating_by_topic_id
    missing = sorted(known - set(ratings))
    if missing:
        problems.append(f"Missing self-ratings for topic ids: {missing}.")
    extra = sorted(set(ratings) - known)
    if extra:
        problems.append(f"Self-ratings reference unknown topic ids: {extra}.")
    out_of_range = sorted(
        topic_id for topic_id, rating in ratings.items() if not MIN_RATING <= rating <= MAX_RATING
    )
    if out_of_range:
        problems.append(
            f"Self-ratings must be between {MIN_RATING} and {MAX_RATING} (topic ids {out_of_range})."
        )

    if problems:
        raise InvalidAssessment(problems)
    return assessment


__all__ = [
    "Assessment",
    "BLOCK_LENGTH",
    "ExperienceLevel",
    "ITEMS_PER_PERIOD",
    "MAX_GOALS",
    "PERIOD_COUNT",
    "Period",
    "PeriodItem",
    "PeriodStatus",
    "Roadmap",
    "ScenarioSubmission",
    "percent_complete",
    "roadmap_document_path",
    "validate_assessment",
]
