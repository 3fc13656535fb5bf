from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import make_assessment
from leaderreps.errors import (
    InvalidArgument,
    PeriodAlreadyCompleted,
    PeriodNotFound,
    ReflectionRequired,
    ReflectionTooShort,
    RoadmapNotFound,
    ScenarioTooShort,
)
from leaderreps.plan_generator import generate_roadmap
from leaderreps.progress import (
    MIN_REFLECTION_LENGTH,
    MIN_SCENARIO_LENGTH,
    advanced_pointer,
    mark_period_complete,
    record_reflection,
    record_scenario,
    validate_reflection_text,
    validate_scenario_text,
)
from leaderreps.roadmap import Roadmap, percent_complete

NOW = datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc)
REFLECTION = "Feedback felt awkward at first, but the CLEAR framework gave me structure."


@pytest.fixture()
def roadmap() -> Roadmap:
    return generate_roadmap("learner", make_assessment())


def test_completion_requires_reflection(roadmap: Roadmap) -> None:
    with pytest.raises(ReflectionRequired) as excinfo:
        mark_period_complete(roadmap, 1, now=NOW)
    assert excinfo.value.period_index == 1
    assert "Period 1" in str(excinfo.value)
    assert roadmap.period(1).status == "Pending"
    assert roadmap.current_period_index == 1


def test_reflection_then_completion_advances_pointer(roadmap: Roadmap) -> None:
    reflected = record_reflection(roadmap, 1, REFLECTION, now=NOW)
    assert roadmap.period(1).reflection_text is None
    assert reflected.period(1).reflection_text == REFLECTION

    completed = mark_period_complete(reflected, 1, now=NOW)
    period = completed.period(1)
    assert period.status == "Completed"
    assert period.completed_at == NOW
    assert completed.current_period_index == 2
    assert completed.last_updated == NOW
    assert reflected.period(1).status == "Pending"


def test_skip_flag_bypasses_reflection_gate(roadmap: Roadmap) -> None:
    completed = mark_period_complete(roadmap, 1, now=NOW, skip_reflection_check=True)
    assert completed.period(1).is_completed
    assert completed.period(1).reflection_text is None
    assert completed.current_period_index == 2


def test_completed_period_cannot_complete_again(roadmap: Roadmap) -> None:
    completed = mark_period_complete(roadmap, 1, now=NOW, skip_reflection_check=True)
    with pytest.raises(PeriodAlreadyCompleted):
        mark_period_complete(completed, 1, now=NOW, skip_reflection_check=True)


def test_pointer_never_moves_backwards(roadmap: Roadmap) -> None:
    ahead = mark_period_complete(roadmap, 5, now=NOW, skip_reflection_check=True)
    assert ahead.current_period_index == 6

    earlier = mark_period_complete(ahead, 2, now=NOW, skip_reflection_check=True)
    assert earlier.current_period_index == 6
    assert earlier.period(2).is_completed


def test_pointer_caps_at_last_period(roadmap: Roadmap) -> None:
    current = roadmap
    for index in range(1, 25):
        current = mark_period_complete(current, index, now=NOW, skip_reflection_check=True)
    assert current.current_period_index == 24
    assert current.completed_count == 24
    assert advanced_pointer(24, 24, 24) == 24
    assert advanced_pointer(3, 1, 24) == 3


def test_audit_correction_on_completed_period_keeps_status(roadmap: Roadmap) -> None:
    completed = mark_period_complete(roadmap, 1, now=NOW, skip_reflection_check=True)
    corrected = record_reflection(completed, 1, REFLECTION, now=NOW)
    assert corrected.period(1).status == "Completed"
    assert corrected.period(1).reflection_text == REFLECTION
    assert corrected.current_period_index == completed.current_period_index


def test_reflection_text_must_not_be_null(roadmap: Roadmap) -> None:
    with pytest.raises(InvalidArgument):
        record_reflection(roadmap, 1, None, now=NOW)  # type: ignore[arg-type]


@pytest.mark.parametrize("index", [0, 25, -1])
def test_out_of_range_period_is_rejected(roadmap: Roadmap, index: int) -> None:
    with pytest.raises(PeriodNotFound) as excinfo:
        mark_period_complete(roadmap, index, now=NOW, skip_reflection_check=True)
    assert isinstance(excinfo.value, InvalidArgument)
    assert isinstance(excinfo.value, RoadmapNotFound)
    with pytest.raises(PeriodNotFound):
        record_reflection(roadmap, index, REFLECTION, now=NOW)
    with pytest.raises(PeriodNotFound):
        record_scenario(roadmap, index, "text", now=NOW)


def test_scenario_keeps_only_latest_submission(roadmap: Roadmap) -> None:
    first = record_scenario(roadmap, 1, "First scenario", now=NOW)
    second = record_scenario(first, 3, "Second scenario", now=NOW)
    assert second.latest_scenario is not None
    assert second.latest_scenario.text == "Second scenario"
    assert second.latest_scenario.period_index == 3
    assert [period.status for period in second.periods] == [period.status for period in roadmap.periods]


def test_boundary_text_validation() -> None:
    exact = "x" * MIN_REFLECTION_LENGTH
    assert validate_reflection_text(exact) == exact
    padded = "x" * (MIN_REFLECTION_LENGTH - 1) + " "
    assert validate_reflection_text(padded) == padded
    with pytest.raises(ReflectionTooShort) as excinfo:
        validate_reflection_text("x" * (MIN_REFLECTION_LENGTH - 1))
    assert excinfo.value.length == MIN_REFLECTION_LENGTH - 1
    with pytest.raises(ReflectionTooShort) as excinfo:
        validate_reflection_text(" " * MIN_REFLECTION_LENGTH)
    assert excinfo.value.length == 0
    with pytest.raises(ReflectionTooShort):
        validate_reflection_text(None)

    scenario = " " + "y" * (MIN_SCENARIO_LENGTH - 1)
    assert validate_scenario_text(scenario) == scenario
    with pytest.raises(ScenarioTooShort):
        validate_scenario_text("y" * (MIN_SCENARIO_LENGTH - 1))
    with pytest.raises(ScenarioTooShort):
        validate_scenario_text("too short")


def test_percent_complete_formula() -> None:
    assert percent_complete(1) == 0
    assert percent_complete(4) == 12
    assert percent_complete(13) == 50
    assert percent_complete(24) == 95
