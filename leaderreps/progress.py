"""Pure progress transitions on a roadmap.

Each function returns an updated deep copy and never touches persistence; the
tracker decides when to load and save. ``Pending -> Completed`` is the only
period transition, and the current-period pointer never moves backwards.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .errors import (
    InvalidArgument,
    PeriodAlreadyCompleted,
    ReflectionRequired,
    ReflectionTooShort,
    ScenarioTooShort,
)
from .roadmap import Roadmap, ScenarioSubmission

MIN_REFLECTION_LENGTH = 50
MIN_SCENARIO_LENGTH = 50


def validate_reflection_text(text: Optional[str]) -> str:
    """Boundary rule for reflections collected from the learner.

    Length counts the text as submitted, and the text is returned unchanged.
    Whitespace-only input never passes.
    """
    raw = text or ""
    length = len(raw) if raw.strip() else 0
    if length < MIN_REFLECTION_LENGTH:
        raise ReflectionTooShort(length, MIN_REFLECTION_LENGTH)
    return raw


def validate_scenario_text(text: Optional[str]) -> str:
    raw = text or ""
    length = len(raw) if raw.strip() else 0
    if length < MIN_SCENARIO_LENGTH:
        raise ScenarioTooShort(length, MIN_SCENARIO_LENGTH)
    return raw


def advanced_pointer(current_index: int, completed_index: int, period_count: int) -> int:
    return max(current_index, min(completed_index + 1, period_count))


def record_reflection(roadmap: Roadmap, period_index: int, text: str, *, now: datetime) -> Roadmap:
    """Store reflection text; on a completed period this is an audit correction only."""
    if text is None:
        raise InvalidArgument("Reflection text is required.")
    roadmap.period(period_index)
    updated = roadmap.model_copy(deep=True)
    period = updated.period(period_index)
    period.reflection_text = text
    updated.last_updated = now
    return updated


def mark_period_complete(
    roadmap: Roadmap,
    period_index: int,
    *,
    now: datetime,
    skip_reflection_check: bool = False,
) -> Roadmap:
    period = roadmap.period(period_index)
    if period.is_completed:
        raise PeriodAlreadyCompleted(period_index)
    if not skip_reflection_check and not period.has_reflection:
        raise ReflectionRequired(period_index)

    updated = roadmap.model_copy(deep=True)
    target = updated.period(period_index)
    target.status = "Completed"
    target.completed_at = now
    updated.current_period_index = advanced_pointer(
        updated.current_period_index,
        period_index,
        updated.period_count,
    )
    updated.last_updated = now
    return updated


def record_scenario(roadmap: Roadmap, period_index: int, text: str, *, now: datetime) -> Roadmap:
    """Replace the roadmap's single retained scenario; period status is untouched."""
    if text is None:
        raise InvalidArgument("Scenario text is required.")
    roadmap.period(period_index)
    updated = roadmap.model_copy(deep=True)
    updated.latest_scenario = ScenarioSubmission(
        text=text,
        period_index=period_index,
        submitted_at=now,
    )
    updated.last_updated = now
    return updated


__all__ = [
    "MIN_REFLECTION_LENGTH",
    "MIN_SCENARIO_LENGTH",
    "advanced_pointer",
    "mark_period_complete",
    "record_reflection",
    "record_scenario",
    "validate_reflection_text",
    "validate_scenario_text",
]
