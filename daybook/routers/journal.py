"""
routers/journal.py — Journal Endpoints
========================================
Templates, categories, tags, entries and the read-side views (timeline,
by-date, single day) over the in-memory journal store, plus preferences.

The store comes from `get_store`, which reads it off app.state. Tests
override that dependency with their own store.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from daybook.auth import get_current_user
from daybook.journal import views
from daybook.journal.state import (
    AppState, Category, Entry, JournalType, Tag, Template, TemplateDraft, find_entry, find_template,
)
from daybook.journal.store import JournalStore, NotificationPreferences
from daybook.models import Profile
from daybook.schemas import (
    BulkDelete, CategoryCreate, DarkModeResponse, EntryWrite, NotificationSettings,
    PreferencesResponse, PreferencesUpdate, QuestionReorder, TagCreate, TemplateUpdate, UndoResponse,
)

router = APIRouter(prefix="/api/v1", tags=["journal"])


def get_store(request: Request) -> JournalStore:
    return request.app.state.journal_store


# ─── State ─────────────────────────────────────────────────

@router.get("/journal/state", response_model=AppState)
def read_state(store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    return store.state


@router.post("/journal/undo", response_model=UndoResponse)
def undo(store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    return UndoResponse(undone=store.undo())


# ─── Templates ─────────────────────────────────────────────

@router.get("/journal/templates", response_model=list[Template])
def list_templates(
    type: Optional[JournalType] = None,
    store: JournalStore = Depends(get_store),
    user: Profile = Depends(get_current_user),
):
    return [t for t in store.state.templates if type is None or t.type == type]


@router.post("/journal/templates", response_model=Template, status_code=201)
def create_template(
    draft: TemplateDraft,
    store: JournalStore = Depends(get_store),
    user: Profile = Depends(get_current_user),
):
    return store.add_template(draft)


@router.get("/journal/templates/{template_id}", response_model=Template)
def get_template(template_id: str, store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    template = find_template(store.state, template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found.")
    return template


@router.put("/journal/templates/{template_id}", response_model=Template)
def replace_template(
    template_id: str,
    body: TemplateUpdate,
    store: JournalStore = Depends(get_store),
    user: Profile = Depends(get_current_user),
):
    template = Template(id=template_id, name=body.name, type=body.type, questions=tuple(body.questions))
    if not store.update_template(template):
        raise HTTPException(status_code=404, detail="Template not found.")
    return find_template(store.state, template_id)


@router.post("/journal/templates/{template_id}/reorder", response_model=Template)
def reorder_template(
    template_id: str,
    body: QuestionReorder,
    store: JournalStore = Depends(get_store),
    user: Profile = Depends(get_current_user),
):
    template = store.reorder_questions(template_id, body.question_ids)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found.")
    return template


@router.delete("/journal/templates/{template_id}", status_code=204)
def remove_template(template_id: str, store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    store.delete_template(template_id)
    return Response(status_code=204)


# ─── Categories & Tags ─────────────────────────────────────

@router.get("/journal/categories", response_model=list[Category])
def list_categories(
    type: Optional[JournalType] = None,
    store: JournalStore = Depends(get_store),
    user: Profile = Depends(get_current_user),
):
    return [c for c in store.state.categories if type is None or c.type == type]


@router.post("/journal/categories", response_model=Category, status_code=201)
def create_category(body: CategoryCreate, store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    return store.add_category(body.name, body.type)


@router.delete("/journal/categories/{category_id}", status_code=204)
def remove_category(category_id: str, store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    store.delete_category(category_id)
    return Response(status_code=204)


@router.get("/journal/tags", response_model=list[Tag])
def list_tags(store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    return list(store.state.tags)


@router.post("/journal/tags", response_model=Tag, status_code=201)
def create_tag(body: TagCreate, store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    return store.add_tag(body.name, body.color, body.description)


@router.delete("/journal/tags/{tag_id}", status_code=204)
def remove_tag(tag_id: str, store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    store.delete_tag(tag_id)
    return Response(status_code=204)


# ─── Entries ───────────────────────────────────────────────

@router.get("/journal/entries", response_model=list[Entry])
def list_entries(
    type: Optional[JournalType] = None,
    store: JournalStore = Depends(get_store),
    user: Profile = Depends(get_current_user),
):
    """Newest first. `type` filters by the entry's template type."""
    return views.filter_entries(store.state, type)


@router.post("/journal/entries", response_model=Entry, status_code=201)
def create_entry(body: EntryWrite, store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    return store.create_entry(body.template_id, body.answers, body.ratings)


@router.post("/journal/entries/delete", status_code=204)
def remove_entries(body: BulkDelete, store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    store.delete_multiple_entries(body.ids)
    return Response(status_code=204)


@router.get("/journal/entries/{entry_id}", response_model=Entry)
def get_entry(entry_id: str, store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    entry = find_entry(store.state, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Entry not found.")
    return entry


@router.put("/journal/entries/{entry_id}", response_model=Entry)
def replace_entry(
    entry_id: str,
    body: EntryWrite,
    store: JournalStore = Depends(get_store),
    user: Profile = Depends(get_current_user),
):
    if not store.update_entry(entry_id, body.answers, body.ratings):
        raise HTTPException(status_code=404, detail="Entry not found.")
    return find_entry(store.state, entry_id)


@router.delete("/journal/entries/{entry_id}", status_code=204)
def remove_entry(entry_id: str, store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    store.delete_entry(entry_id)
    return Response(status_code=204)


# ─── Views ─────────────────────────────────────────────────

@router.get("/journal/timeline", response_model=list[views.TimelineGroup])
def read_timeline(store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    return views.timeline(store.state)


@router.get("/journal/by-date", response_model=dict[str, list[Entry]])
def read_by_date(store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    return views.by_date(store.state)


@router.get("/journal/calendar/{day}", response_model=views.DayEntries)
def read_day(day: date, store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    return views.day(store.state, day)


# ─── Preferences ───────────────────────────────────────────

def _preferences_response(store: JournalStore) -> PreferencesResponse:
    prefs = store.preferences
    return PreferencesResponse(
        dark_mode=store.state.dark_mode,
        notifications=NotificationSettings(
            journal=prefs.notifications.journal,
            insights=prefs.notifications.insights,
        ),
    )


@router.get("/preferences", response_model=PreferencesResponse)
def read_preferences(store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    return _preferences_response(store)


@router.patch("/preferences", response_model=PreferencesResponse)
def patch_preferences(
    body: PreferencesUpdate,
    store: JournalStore = Depends(get_store),
    user: Profile = Depends(get_current_user),
):
    notifications = None
    if body.notifications is not None:
        notifications = NotificationPreferences(
            journal=body.notifications.journal,
            insights=body.notifications.insights,
        )
    store.update_preferences(dark_mode=body.dark_mode, notifications=notifications)
    return _preferences_response(store)


@router.post("/preferences/dark-mode/toggle", response_model=DarkModeResponse)
def toggle_dark_mode(store: JournalStore = Depends(get_store), user: Profile = Depends(get_current_user)):
    return DarkModeResponse(dark_mode=store.toggle_dark_mode())
