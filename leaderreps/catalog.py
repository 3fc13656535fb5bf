"""Static leadership topics and the learning content catalog."""

from __future__ import annotations

from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

Difficulty = Literal["Intro", "Core", "Mastery"]
ContentType = Literal["video", "reading", "template", "exercise", "case-study"]

DIFFICULTY_TIERS: Tuple[Difficulty, ...] = ("Intro", "Core", "Mastery")


class Topic(BaseModel):
    """Leadership competency area; ids follow typical career progression."""

    model_config = ConfigDict(frozen=True)

    topic_id: int = Field(..., ge=1)
    title: str
    description: str


class CatalogItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_id: str
    topic_id: int = Field(..., ge=1)
    skill: str
    title: str
    content_type: ContentType
    duration_minutes: int = Field(..., ge=1)
    difficulty: Difficulty
    url: str = "#"


TOPICS: Tuple[Topic, ...] = (
    Topic(
        topic_id=1,
        title="Self-Awareness & Management",
        description="Mastering your own strengths, motivations, and resilience.",
    ),
    Topic(
        topic_id=2,
        title="People & Coaching",
        description="Giving effective feedback and developing direct reports.",
    ),
    Topic(
        topic_id=3,
        title="Execution & Accountability",
        description="Delegating effectively and driving clear results.",
    ),
    Topic(
        topic_id=4,
        title="Communication & Vision",
        description="Translating strategy into inspiring, actionable goals.",
    ),
    Topic(
        topic_id=5,
        title="Talent & Culture",
        description="Building high-performing teams and shaping culture.",
    ),
)

TOPIC_IDS: Tuple[int, ...] = tuple(topic.topic_id for topic in TOPICS)


def _item(
    item_id: str,
    topic_id: int,
    skill: str,
    title: str,
    content_type: ContentType,
    duration: int,
    difficulty: Difficulty,
) -> CatalogItem:
    return CatalogItem(
        item_id=item_id,
        topic_id=topic_id,
        skill=skill,
        title=title,
        content_type=content_type,
        duration_minutes=duration,
        difficulty=difficulty,
    )


CATALOG: Tuple[CatalogItem, ...] = (
    # Self-Awareness & Management
    _item("c1", 1, "EQ", "Video: Mastering Your Focus Word", "video", 10, "Intro"),
    _item("c1-b", 1, "EQ", "Reading: The Three Levels of Listening", "reading", 15, "Core"),
    _item("c1-c", 1, "EQ", "Template: Leadership Identity Statement Draft", "template", 25, "Mastery"),
    _item("c2", 1, "Self-Management", "Template: The Time-Audit Rep", "template", 20, "Core"),
    _item("c2-b", 1, "Self-Management", "Micro-Challenge: Blocking the Distractions", "exercise", 5, "Intro"),
    _item("c2-c", 1, "Self-Management", "Case Study: The Proactive vs. Reactive Leader", "case-study", 30, "Mastery"),
    # People & Coaching
    _item("c3", 2, "Feedback", "Micro-Challenge: Practice the CLEAR Framework", "exercise", 15, "Core"),
    _item("c3-b", 2, "Feedback", "Reading: The 5:1 Magic Ratio Explained", "reading", 10, "Intro"),
    _item("c3-c", 2, "Feedback", "Video: Redirecting a Defender Persona", "video", 20, "Mastery"),
    _item("c4", 2, "Coaching", "Template: Effective 1:1 Agenda", "template", 20, "Core"),
    _item("c4-b", 2, "Coaching", "Video: Situational Leadership 101", "video", 15, "Intro"),
    _item("c4-c", 2, "Coaching", "Worksheet: Delegating Development Goals", "template", 35, "Mastery"),
    # Execution & Accountability
    _item("c6", 3, "Delegation", "Case Study: Delegating vs. Dumping", "case-study", 25, "Core"),
    _item("c6-b", 3, "Delegation", "Reading: The 5 Levels of Initiative", "reading", 10, "Intro"),
    _item("c6-c", 3, "Delegation", "Micro-Challenge: Reversing the Monkey", "exercise", 15, "Mastery"),
    _item("c7", 3, "Accountability", "Worksheet: Setting CLEAR KPIs", "template", 20, "Core"),
    _item("c7-b", 3, "Accountability", "Video: The Accountability Ladder", "video", 10, "Intro"),
    _item("c7-c", 3, "Accountability", "Template: 90-Day Performance Improvement Plan Draft", "template", 40, "Mastery"),
    # Communication & Vision
    _item("c8", 4, "Vision", "Micro-Challenge: Write Your Team's 6-Month Vision", "exercise", 45, "Mastery"),
    _item("c8-b", 4, "Vision", "Reading: Why Start with 'Why'", "reading", 10, "Intro"),
    _item("c8-c", 4, "Vision", "Template: Cascading Goals Framework", "template", 25, "Core"),
    _item("c9", 4, "Communication", "Video: Leading Change Management with Empathy", "video", 15, "Core"),
    _item("c9-b", 4, "Communication", "Reading: The Pyramid Principle Basics", "reading", 10, "Intro"),
    _item("c9-c", 4, "Communication", "Case Study: Crisis Communication", "case-study", 30, "Mastery"),
    # Talent & Culture
    _item("c10", 5, "Trust", "Reading: Lencioni's 5 Dysfunctions Summary", "reading", 10, "Intro"),
    _item("c10-b", 5, "Trust", "Micro-Challenge: Vulnerability Check-in", "exercise", 15, "Core"),
    _item("c10-c", 5, "Trust", "Video: Rebuilding Trust with a Team", "video", 25, "Mastery"),
    _item("c11", 5, "Culture", "Template: Talent Audit and Succession Planning", "template", 30, "Mastery"),
    _item("c11-b", 5, "Culture", "Video: Defining Team Operating Principles", "video", 20, "Core"),
    _item("c11-c", 5, "Culture", "Reading: Core Values vs. Aspirational Values", "reading", 10, "Intro"),
)

DEFAULT_REFLECTION_PROMPT = (
    "Reflect on your Leadership Identity Statement. What is your focus word, "
    "and how will it anchor your behavior this period?"
)

REFLECTION_PROMPTS: Dict[int, str] = {
    1: (
        "Which of the 5 Rules for Feedback do you struggle with the most, "
        "and what's your plan to hit the 5:1 Magic Ratio?"
    ),
    3: (
        "What's working well in your 1:1s, and what challenge are you facing "
        "with your direct's agenda?"
    ),
    4: (
        "Reflect on vulnerability. Where have you struggled to lead with vulnerability, "
        "and what action will you commit to next?"
    ),
    5: DEFAULT_REFLECTION_PROMPT,
}

_TOPICS_BY_ID: Dict[int, Topic] = {topic.topic_id: topic for topic in TOPICS}
_ITEMS_BY_ID: Dict[str, CatalogItem] = {item.item_id: item for item in CATALOG}


def get_topic(topic_id: int) -> Optional[Topic]:
    return _TOPICS_BY_ID.get(topic_id)


def topic_title(topic_id: int) -> str:
    topic = _TOPICS_BY_ID.get(topic_id)
    return topic.title if topic else f"Topic {topic_id}"


def get_item(item_id: str) -> Optional[CatalogItem]:
    return _ITEMS_BY_ID.get(item_id)


def items_for_topic(topic_id: int, catalog: Sequence[CatalogItem] = CATALOG) -> List[CatalogItem]:
    return [item for item in catalog if item.topic_id == topic_id]


def filter_by_difficulty(
    items: Iterable[CatalogItem],
    difficulties: Iterable[Difficulty],
) -> List[CatalogItem]:
    allowed = set(difficulties)
    return [item for item in items if item.difficulty in allowed]


def reflection_prompt_for(topic_id: int) -> str:
    return REFLECTION_PROMPTS.get(topic_id, DEFAULT_REFLECTION_PROMPT)


__all__ = [
    "CATALOG",
    "CatalogItem",
    "ContentType",
    "DEFAULT_REFLECTION_PROMPT",
    "DIFFICULTY_TIERS",
    "Difficulty",
    "REFLECTION_PROMPTS",
    "TOPICS",
    "TOPIC_IDS",
    "Topic",
    "filter_by_difficulty",
    "get_item",
    "get_topic",
    "items_for_topic",
    "reflection_prompt_for",
    "topic_title",
]
