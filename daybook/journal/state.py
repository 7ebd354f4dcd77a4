"""
journal/state.py — Journal Data Model & Pure Mutators
=======================================================
The journal lives in memory as one AppState snapshot: templates,
categories, entries, tags and the dark-mode flag.

Snapshots are immutable. Every mutator below takes a snapshot and returns
a NEW one (plus whatever it created), so the store can swap snapshots
atomically and keep old ones around for undo. Nothing here touches I/O.

Answers are a tagged union keyed by question type, so the API layer can
validate them and consumers can match on `kind` instead of guessing
what `value` holds.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Callable, Iterable, Literal, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# Enumerations
# ============================================================

class JournalType(str, Enum):
    MORNING = "morning"
    EVENING = "evening"


class QuestionType(str, Enum):
    TEXT = "text"
    YES_NO = "yesno"
    SLIDER = "slider"
    CHECKBOX_GROUP = "dynamic_checkbox_group"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ============================================================
# Templates & Categories
# ============================================================

class QuestionOption(_Frozen):
    id: str
    text: str


class Question(_Frozen):
    id: str
    text: str
    type: QuestionType = QuestionType.TEXT
    order: int
    options: Optional[tuple[QuestionOption, ...]] = None


class QuestionDraft(_Frozen):
    """A question as submitted by the template form: no id, order optional."""
    text: str
    type: QuestionType = QuestionType.TEXT
    order: Optional[int] = None
    options: Optional[tuple[QuestionOption, ...]] = None


class Template(_Frozen):
    id: str
    name: str
    type: JournalType
    questions: tuple[Question, ...] = ()


class TemplateDraft(_Frozen):
    name: str
    type: JournalType
    questions: tuple[QuestionDraft, ...] = ()


class Category(_Frozen):
    id: str
    name: str
    type: JournalType


class Tag(_Frozen):
    id: str
    name: str
    color: Optional[str] = None
    description: Optional[str] = None


# ============================================================
# Answers: one variant per question type
# ============================================================

class TextAnswer(_Frozen):
    kind: Literal["text"] = "text"
    text: str = ""
    value: str


class YesNoAnswer(_Frozen):
    kind: Literal["yesno"] = "yesno"
    text: str = ""
    value: bool


class SliderAnswer(_Frozen):
    kind: Literal["slider"] = "slider"
    text: str = ""
    value: int


class CheckboxGroupAnswer(_Frozen):
    kind: Literal["dynamic_checkbox_group"] = "dynamic_checkbox_group"
    text: str = ""
    value: tuple[str, ...] = ()


Answer = Annotated[
    Union[TextAnswer, YesNoAnswer, SliderAnswer, CheckboxGroupAnswer],
    Field(discriminator="kind"),
]


# ============================================================
# Entries & Ratings
# ============================================================

class RatingInput(_Frozen):
    """What the entry form sends: a category and a 1-10 value."""
    category: str
    value: int = Field(ge=1, le=10)


class Rating(_Frozen):
    id: str
    category: str
    value: int = Field(ge=1, le=10)
    timestamp: datetime


class Entry(_Frozen):
    id: str
    template_id: Optional[str] = Field(default=None, alias="templateId")
    timestamp: datetime
    answers: dict[str, Answer] = Field(default_factory=dict)
    ratings: tuple[Rating, ...] = ()


_answers_adapter = TypeAdapter(dict[str, Answer])


def coerce_answers(answers: dict) -> dict:
    """Validate raw answer dicts (or Answer models) into the tagged union."""
    return _answers_adapter.validate_python(answers)


class AppState(_Frozen):
    templates: tuple[Template, ...] = ()
    entries: tuple[Entry, ...] = ()
    categories: tuple[Category, ...] = ()
    tags: tuple[Tag, ...] = ()
    dark_mode: bool = Field(default=False, alias="darkMode")


# ============================================================
# Template / Category mutators
# ============================================================

def _normalize_orders(questions: Iterable[Question]) -> tuple[Question, ...]:
    """Sort by order (stable) and renumber 0..N-1 so orders stay contiguous."""
    ordered = sorted(questions, key=lambda q: q.order)
    return tuple(q.model_copy(update={"order": i}) for i, q in enumerate(ordered))


def add_template(
    state: AppState,
    draft: TemplateDraft,
    id_factory: Callable[[], str] = new_id,
) -> tuple[AppState, Template]:
    template_id = id_factory()
    questions = [
        Question(
            id=f"{template_id}-{i}",
            text=q.text,
            type=q.type,
            order=q.order if q.order is not None else i,
            options=q.options,
        )
        for i, q in enumerate(draft.questions)
    ]
    template = Template(
        id=template_id,
        name=draft.name,
        type=draft.type,
        questions=_normalize_orders(questions),
    )
    return state.model_copy(update={"templates": state.templates + (template,)}), template


def find_template(state: AppState, template_id: Optional[str]) -> Optional[Template]:
    return next((t for t in state.templates if t.id == template_id), None)


def update_template(state: AppState, template: Template) -> AppState:
    """Replace by identity. Entries referencing the template are left alone."""
    saved = template.model_copy(update={"questions": _normalize_orders(template.questions)})
    templates = tuple(saved if t.id == template.id else t for t in state.templates)
    return state.model_copy(update={"templates": templates})


def reorder_questions(state: AppState, template_id: str, question_ids: Sequence[str]) -> AppState:
    """
    Put the template's questions in the order given and recompute every
    `order`. Questions not named keep their relative order after the
    named ones; unknown ids are ignored.
    """
    template = find_template(state, template_id)
    if template is None:
        return state

    position = {qid: i for i, qid in enumerate(question_ids)}
    ordered = sorted(
        template.questions,
        key=lambda q: (position.get(q.id, len(position)), q.order),
    )
    questions = tuple(q.model_copy(update={"order": i}) for i, q in enumerate(ordered))
    return update_template(state, template.model_copy(update={"questions": questions}))


def delete_template(state: AppState, template_id: str) -> AppState:
    templates = tuple(t for t in state.templates if t.id != template_id)
    return state.model_copy(update={"templates": templates})


def add_category(
    state: AppState,
    name: str,
    journal_type: JournalType,
    id_factory: Callable[[], str] = new_id,
) -> tuple[AppState, Category]:
    category = Category(id=id_factory(), name=name, type=journal_type)
    return state.model_copy(update={"categories": state.categories + (category,)}), category


def delete_category(state: AppState, category_id: str) -> AppState:
    categories = tuple(c for c in state.categories if c.id != category_id)
    return state.model_copy(update={"categories": categories})


def add_tag(
    state: AppState,
    name: str,
    color: Optional[str] = None,
    description: Optional[str] = None,
    id_factory: Callable[[], str] = new_id,
) -> tuple[AppState, Tag]:
    tag = Tag(id=id_factory(), name=name, color=color, description=description)
    return state.model_copy(update={"tags": state.tags + (tag,)}), tag


def delete_tag(state: AppState, tag_id: str) -> AppState:
    return state.model_copy(update={"tags": tuple(t for t in state.tags if t.id != tag_id)})


def set_dark_mode(state: AppState, enabled: bool) -> AppState:
    return state.model_copy(update={"dark_mode": enabled})


def toggle_dark_mode(state: AppState) -> AppState:
    return set_dark_mode(state, not state.dark_mode)


# ============================================================
# Entry mutators
# ============================================================

def _fresh_ratings(
    ratings: Sequence[RatingInput],
    now: datetime,
    id_factory: Callable[[], str],
) -> tuple[Rating, ...]:
    # Identity and timestamp always come from here, never from the caller.
    return tuple(
        Rating(id=id_factory(), category=r.category, value=r.value, timestamp=now)
        for r in ratings
    )


def create_entry(
    state: AppState,
    template_id: Optional[str],
    answers: dict,
    ratings: Sequence[RatingInput],
    now: Optional[datetime] = None,
    id_factory: Callable[[], str] = new_id,
) -> tuple[AppState, Entry]:
    """Append a new entry. `template_id` is not checked against the templates."""
    now = now or utcnow()
    entry = Entry(
        id=id_factory(),
        template_id=template_id,
        timestamp=now,
        answers=coerce_answers(answers),
        ratings=_fresh_ratings(ratings, now, id_factory),
    )
    return state.model_copy(update={"entries": state.entries + (entry,)}), entry


def find_entry(state: AppState, entry_id: str) -> Optional[Entry]:
    return next((e for e in state.entries if e.id == entry_id), None)


def update_entry(
    state: AppState,
    entry_id: str,
    answers: dict,
    ratings: Sequence[RatingInput],
    now: Optional[datetime] = None,
    id_factory: Callable[[], str] = new_id,
) -> tuple[AppState, bool]:
    """
    Replace the answers wholesale and rebuild every rating. Rating ids and
    timestamps are NOT carried over, even when a category's value is
    unchanged. Returns (state, False) untouched when the entry is missing.
    """
    if find_entry(state, entry_id) is None:
        return state, False

    now = now or utcnow()
    entries = tuple(
        e.model_copy(update={
            "answers": coerce_answers(answers),
            "ratings": _fresh_ratings(ratings, now, id_factory),
        }) if e.id == entry_id else e
        for e in state.entries
    )
    return state.model_copy(update={"entries": entries}), True


def delete_entry(state: AppState, entry_id: str) -> AppState:
    return state.model_copy(update={"entries": tuple(e for e in state.entries if e.id != entry_id)})


def delete_multiple_entries(state: AppState, entry_ids: Iterable[str]) -> AppState:
    doomed = set(entry_ids)
    return state.model_copy(update={"entries": tuple(e for e in state.entries if e.id not in doomed)})
