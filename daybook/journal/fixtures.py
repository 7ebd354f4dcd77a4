"""
journal/fixtures.py — Seed Data
=================================
The journal starts with two templates (morning and evening reflection),
five rating categories, two example entries and a handful of tags, so a
fresh install has something on the dashboard.
"""

from datetime import datetime, timezone

from daybook.journal.state import (
    AppState, Template, Question, Category, Entry, Rating, Tag, TextAnswer, JournalType,
)


def _at(iso: str) -> datetime:
    return datetime.fromisoformat(iso).replace(tzinfo=timezone.utc)


def _questions(template_id: str, texts: list[str]) -> tuple[Question, ...]:
    return tuple(
        Question(id=f"{template_id}-{i + 1}", text=text, order=i)
        for i, text in enumerate(texts)
    )


MORNING_TEMPLATE = Template(
    id="1",
    name="Morning Reflection",
    type=JournalType.MORNING,
    questions=_questions("1", [
        "How did you sleep last night?",
        "What are you grateful for today?",
        "What are your top priorities for today?",
    ]),
)

EVENING_TEMPLATE = Template(
    id="2",
    name="Evening Reflection",
    type=JournalType.EVENING,
    questions=_questions("2", [
        "What went well today?",
        "What challenges did you face?",
        "What are you looking forward to tomorrow?",
    ]),
)

CATEGORIES = (
    Category(id="1", name="Energy", type=JournalType.MORNING),
    Category(id="2", name="Mood", type=JournalType.MORNING),
    Category(id="3", name="Productivity", type=JournalType.EVENING),
    Category(id="4", name="Stress", type=JournalType.EVENING),
    Category(id="5", name="Overall Satisfaction", type=JournalType.EVENING),
)


def _answers(template: Template, values: list[str]) -> dict:
    return {
        q.id: TextAnswer(text=q.text, value=value)
        for q, value in zip(template.questions, values)
    }


def _ratings(start_id: int, when: datetime, pairs: list[tuple[str, int]]) -> tuple[Rating, ...]:
    return tuple(
        Rating(id=str(start_id + i), category=category, value=value, timestamp=when)
        for i, (category, value) in enumerate(pairs)
    )


ENTRIES = (
    Entry(
        id="1",
        template_id="1",
        timestamp=_at("2025-05-06T08:00:00"),
        answers=_answers(MORNING_TEMPLATE, [
            "I slept really well!",
            "My family, health, and this beautiful day.",
            "Complete the project presentation and go for a run.",
        ]),
        ratings=_ratings(1, _at("2025-05-06T08:00:00"), [("1", 8), ("2", 9)]),
    ),
    Entry(
        id="2",
        template_id="2",
        timestamp=_at("2025-05-05T21:00:00"),
        answers=_answers(EVENING_TEMPLATE, [
            "I finished my presentation ahead of schedule.",
            "Had some technical issues with my computer.",
            "The team meeting and trying the new café for lunch.",
        ]),
        ratings=_ratings(3, _at("2025-05-05T21:00:00"), [("3", 7), ("4", 4), ("5", 8)]),
    ),
)

TAGS = (
    Tag(id="1", name="Work"),
    Tag(id="2", name="Health"),
    Tag(id="3", name="Personal"),
    Tag(id="4", name="Family"),
    Tag(id="5", name="Goals"),
)


def seed_state(dark_mode: bool = False) -> AppState:
    return AppState(
        templates=(MORNING_TEMPLATE, EVENING_TEMPLATE),
        entries=ENTRIES,
        categories=CATEGORIES,
        tags=TAGS,
        dark_mode=dark_mode,
    )
