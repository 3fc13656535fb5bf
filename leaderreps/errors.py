"""Error kinds surfaced by the plan generator, progress tracker and roadmap stores.

Every error carries a stable ``code`` so the HTTP layer (and any other
presentation surface) can render it without string matching. Each kind also
subclasses the builtin exception it most resembles, so callers that only know
about ``ValueError`` / ``LookupError`` / ``RuntimeError`` still behave.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class RoadmapError(Exception):
    """Base class for every roadmap-level failure."""

    code = "roadmap_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidAssessment(RoadmapError, ValueError):
    """The assessment is structurally incomplete; nothing was generated or persisted."""

    code = "invalid_assessment"

    def __init__(self, problems: Sequence[str]) -> None:
        self.problems: List[str] = list(problems)
        super().__init__("Invalid assessment: " + "; ".join(self.problems))


class InvalidArgument(RoadmapError, ValueError):
    code = "invalid_argument"


class TextTooShort(RoadmapError, ValueError):
    code = "text_too_short"
    label = "Text"

    def __init__(self, length: int, minimum: int) -> None:
        self.length = length
        self.minimum = minimum
        super().__init__(f"{self.label} must be at least {minimum} characters (got {length}).")


class ReflectionTooShort(TextTooShort):
    code = "reflection_too_short"
    label = "Reflection"


class ScenarioTooShort(TextTooShort):
    code = "scenario_too_short"
    label = "Scenario"


class ReflectionRequired(RoadmapError):
    """Completion was blocked by the reflection gate; record a reflection and retry."""

    code = "reflection_required"

    def __init__(self, period_index: int) -> None:
        self.period_index = period_index
        super().__init__(
            f"Please submit your reflection for Period {period_index} before marking it complete."
        )


class RoadmapNotFound(RoadmapError, LookupError):
    code = "not_found"

    def __init__(self, owner_id: str, message: Optional[str] = None) -> None:
        self.owner_id = owner_id
        super().__init__(message or f"No roadmap found for '{owner_id}'.")


class PeriodNotFound(RoadmapNotFound, InvalidArgument):
    code = "period_not_found"

    def __init__(self, owner_id: str, period_index: int, period_count: int) -> None:
        self.period_index = period_index
        super().__init__(
            owner_id,
            f"Period {period_index} is out of range (expected 1..{period_count}).",
        )


class PeriodAlreadyCompleted(RoadmapError):
    code = "period_already_completed"

    def __init__(self, period_index: int) -> None:
        self.period_index = period_index
        super().__init__(f"Period {period_index} is already completed.")


class RoadmapAlreadyExists(RoadmapError):
    code = "roadmap_exists"

    def __init__(self, owner_id: str) -> None:
        self.owner_id = owner_id
        super().__init__(
            f"A roadmap already exists for '{owner_id}'. Restart it before generating a new one."
        )


class PersistenceFailure(RoadmapError, RuntimeError):
    """The document store rejected or could not complete a read/write. Safe to retry."""

    code = "persistence_failure"


class ConfigurationError(RoadmapError, RuntimeError):
    """The document store is unreachable or misconfigured; fatal until fixed externally."""

    code = "configuration_error"


__all__ = [
    "ConfigurationError",
    "InvalidArgument",
    "InvalidAssessment",
    "PeriodAlreadyCompleted",
    "PeriodNotFound",
    "PersistenceFailure",
    "ReflectionRequired",
    "ReflectionTooShort",
    "RoadmapAlreadyExists",
    "RoadmapError",
    "RoadmapNotFound",
    "ScenarioTooShort",
    "TextTooShort",
]
