"""Deterministic 24-period roadmap generation from a learner self-assessment."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from fractions import Fraction
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .catalog import (
    CATALOG,
    TOPICS,
    CatalogItem,
    Difficulty,
    Topic,
    filter_by_difficulty,
)
from .roadmap import (
    BLOCK_LENGTH,
    ITEMS_PER_PERIOD,
    PERIOD_COUNT,
    Assessment,
    ExperienceLevel,
    Period,
    PeriodItem,
    Roadmap,
    validate_assessment,
)

logger = logging.getLogger(__name__)


STARTING_TOPIC_BY_LEVEL: Dict[ExperienceLevel, int] = {
    "Novice": 1,
    "Intermediate": 3,
    "Advanced": 4,
}
LOW_PROFICIENCY_MAX_RATING = 3
HIGH_PROFICIENCY_MIN_RATING = 8
GUIDED_PACE = Fraction(3, 2)
ACCELERATED_PACE = Fraction(7, 10)


def starting_topic_for(level: ExperienceLevel) -> int:
    return STARTING_TOPIC_BY_LEVEL[level]


def topic_priority_order(assessment: Assessment) -> List[int]:
    """Goal topics in chosen order, then every topic by ascending self-rating.

    Ties on rating fall back to the lower topic id; each topic appears once.
    """
    by_rating = sorted(
        assessment.self_rating_by_topic_id.items(),
        key=lambda entry: (entry[1], entry[0]),
    )
    order: List[int] = []
    for topic_id in [*assessment.goal_topic_ids, *(topic_id for topic_id, _ in by_rating)]:
        if topic_id not in order:
            order.append(topic_id)
    return order


def target_difficulties(rating: int) -> Tuple[Difficulty, ...]:
    if rating <= LOW_PROFICIENCY_MAX_RATING:
        return ("Intro", "Core")
    if rating >= HIGH_PROFICIENCY_MIN_RATING:
        return ("Mastery",)
    return ("Core", "Mastery")


def adjust_duration(rating: int, base_minutes: int) -> int:
    """More guided time for low proficiency, a faster pace for high proficiency."""
    if rating <= LOW_PROFICIENCY_MAX_RATING:
        return math.ceil(base_minutes * GUIDED_PACE)
    if rating >= HIGH_PROFICIENCY_MIN_RATING:
        return math.floor(base_minutes * ACCELERATED_PACE)
    return base_minutes


def should_reset_recent(used_count: int, catalog_size: int) -> bool:
    """Recently-used items recirculate once they cover more than half the catalog."""
    return used_count * 2 > catalog_size


def block_position(period_index: int) -> int:
    """1-based position of a period inside its 4-period block."""
    return ((period_index - 1) % BLOCK_LENGTH) + 1


def is_rotation_point(period_index: int) -> bool:
    return period_index > 1 and block_position(period_index) == 1


def theme_label(topic: Topic, period_index: int) -> str:
    return f"{topic.title}: Focus Rep {block_position(period_index)}"


class _FallbackSelector:
    """Walks the priority-ordered catalog once before repeating anything."""

    def __init__(self, order: Sequence[CatalogItem]) -> None:
        self._order = list(order)
        self._selected: Set[str] = set()

    def next_item(self, exclude: Set[str]) -> CatalogItem:
        candidate = self._first_unselected(exclude)
        if candidate is None and len(self._selected) >= len(self._order):
            self._selected.clear()
            candidate = self._first_unselected(exclude)
        if candidate is None:
            # Only items already placed in this period are left.
            candidate = next(
                (item for item in self._order if item.item_id not in exclude),
                self._order[0],
            )
        self._selected.add(candidate.item_id)
        return candidate

    def _first_unselected(self, exclude: Set[str]) -> Optional[CatalogItem]:
        for item in self._order:
            if item.item_id not in self._selected and item.item_id not in exclude:
                return item
        return None


@dataclass
class _GenerationState:
    rotation_cursor: int = -1
    recently_used: Set[str] = field(default_factory=set)


class PlanGenerator:
    """Turns an assessment into a fixed-length roadmap of topic blocks and catalog items."""

    def __init__(
        self,
        *,
        catalog: Sequence[CatalogItem] = CATALOG,
        topics: Sequence[Topic] = TOPICS,
        period_count: int = PERIOD_COUNT,
        items_per_period: int = ITEMS_PER_PERIOD,
    ) -> None:
        if not catalog:
            raise ValueError("Cannot generate roadmaps from an empty catalog.")
        self._catalog = tuple(catalog)
        self._topics = {topic.topic_id: topic for topic in topics}
        self._period_count = max(period_count, 1)
        self._items_per_period = max(items_per_period, 1)

    @property
    def catalog(self) -> Tuple[CatalogItem, ...]:
        return self._catalog

    def build_periods(self, assessment: Assessment) -> List[Period]:
        validate_assessment(assessment, topic_ids=list(self._topics))
        start_topic = starting_topic_for(assessment.experience_level)
        priority = topic_priority_order(assessment)
        pools = self._candidate_pools(assessment)
        fallback = _FallbackSelector(self._fallback_order(priority))
        state = _GenerationState()

        periods: List[Period] = []
        topic_id = start_topic
        for index in range(1, self._period_count + 1):
            if is_rotation_point(index):
                state.rotation_cursor = (state.rotation_cursor + 1) % len(priority)
                topic_id = priority[state.rotation_cursor]
            rating = assessment.rating_for(topic_id)
            items = self._select_items(pools[topic_id], rating, fallback, state)
            if should_reset_recent(len(state.recently_used), len(self._catalog)):
                state.recently_used.clear()
            periods.append(
                Period(
                    index=index,
                    topic_id=topic_id,
                    theme=theme_label(self._topics[topic_id], index),
                    items=items,
                )
            )
        return periods

    def generate(
        self,
        owner_id: str,
        assessment: Assessment,
        *,
        generated_at: Optional[datetime] = None,
    ) -> Roadmap:
        periods = self.build_periods(assessment)
        roadmap = Roadmap(
            owner_id=owner_id,
            assessment=assessment.model_copy(deep=True),
            periods=periods,
            current_period_index=1,
            last_updated=generated_at or assessment.created_at,
        )
        logger.debug(
            "Generated %d-period roadmap for %s (start topic %s)",
            len(periods),
            owner_id,
            periods[0].topic_id if periods else None,
        )
        return roadmap

    def _candidate_pools(self, assessment: Assessment) -> Dict[int, List[CatalogItem]]:
        pools: Dict[int, List[CatalogItem]] = {}
        for topic_id in self._topics:
            topic_items = [item for item in self._catalog if item.topic_id == topic_id]
            pools[topic_id] = filter_by_difficulty(
                topic_items,
                target_difficulties(assessment.rating_for(topic_id)),
            )
        return pools

    def _fallback_order(self, priority: Sequence[int]) -> List[CatalogItem]:
        ordered: List[CatalogItem] = []
        for topic_id in priority:
            ordered.extend(item for item in self._catalog if item.topic_id == topic_id)
        seen = {item.item_id for item in ordered}
        ordered.extend(item for item in self._catalog if item.item_id not in seen)
        return ordered

    def _select_items(
        self,
        pool: Sequence[CatalogItem],
        rating: int,
        fallback: _FallbackSelector,
        state: _GenerationState,
    ) -> List[PeriodItem]:
        chosen: List[PeriodItem] = []
        in_period: Set[str] = set()
        for slot in range(self._items_per_period):
            available = [item for item in pool if item.item_id not in state.recently_used]
            if available:
                item = available[slot % len(available)]
            else:
                item = fallback.next_item(exclude=in_period)
            state.recently_used.add(item.item_id)
            in_period.add(item.item_id)
            chosen.append(
                PeriodItem(
                    catalog_item_id=item.item_id,
                    adjusted_duration_minutes=adjust_duration(rating, item.duration_minutes),
                )
            )
        return chosen


generator = PlanGenerator()


def generate_roadmap(
    owner_id: str,
    assessment: Assessment,
    *,
    generated_at: Optional[datetime] = None,
) -> Roadmap:
    """Generate a roadmap with the static catalog; same inputs give the same roadmap."""
    return generator.generate(owner_id, assessment, generated_at=generated_at)


__all__ = [
    "PlanGenerator",
    "STARTING_TOPIC_BY_LEVEL",
    "adjust_duration",
    "block_position",
    "generate_roadmap",
    "generator",
    "is_rotation_point",
    "should_reset_recent",
    "starting_topic_for",
    "target_difficulties",
    "theme_label",
    "topic_priority_order",
]
