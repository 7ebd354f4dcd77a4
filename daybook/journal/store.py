"""
journal/store.py — The Journal Store
======================================
Holds the current AppState snapshot for the process and applies the pure
mutators from state.py to it. One store is created in the app lifespan
and handed to routers through the `get_store` dependency, so tests can
swap in their own.

Each mutation swaps in a new snapshot under a lock (FastAPI runs sync
handlers in a threadpool) and pushes the previous one onto a bounded
history for `undo`.

The dark-mode flag is also written to a small JSON preferences file,
along with the notification settings, so it survives restarts.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Sequence

from pydantic import BaseModel

from daybook.journal import state as journal
from daybook.journal.state import (
    AppState, Category, Entry, JournalType, RatingInput, Tag, Template, TemplateDraft,
)

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


class NotificationPreferences(BaseModel):
    journal: bool = True
    insights: bool = False


class Preferences(BaseModel):
    dark_mode: bool = False
    notifications: NotificationPreferences = NotificationPreferences()


class PreferencesFile:
    """Reads and writes preferences.json. An empty path disables persistence."""

    def __init__(self, path: str):
        self.path = Path(path) if path else None

    def load(self) -> Preferences:
        if not self.path or not self.path.exists():
            return Preferences()
        try:
            return Preferences.model_validate(json.loads(self.path.read_text()))
        except (ValueError, OSError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return Preferences()

    def save(self, preferences: Preferences) -> None:
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(preferences.model_dump_json(indent=2))


class JournalStore:
    def __init__(self, initial: AppState, preferences_file: Optional[PreferencesFile] = None):
        self._lock = threading.Lock()
        self._history: list[AppState] = []
        self._preferences_file = preferences_file or PreferencesFile("")
        self.preferences = self._preferences_file.load()
        self._state = initial.model_copy(update={"dark_mode": self.preferences.dark_mode})

    @property
    def state(self) -> AppState:
        return self._state

    def _commit(self, mutate: Callable[[AppState], AppState]) -> AppState:
        with self._lock:
            previous = self._state
            updated = mutate(previous)
            if updated != previous:
                self._history.append(previous)
                del self._history[:-HISTORY_LIMIT]
                self._state = updated
            return updated

    def _commit_returning(self, mutate):
        """Like _commit, for mutators that return (state, result)."""
        box = {}

        def apply(current: AppState) -> AppState:
            updated, box["result"] = mutate(current)
            return updated

        self._commit(apply)
        return box["result"]

    def undo(self) -> bool:
        """Restore the previous snapshot. A dark-mode change being undone is re-saved."""
        with self._lock:
            if not self._history:
                return False
            self._state = self._history.pop()
            restored_dark_mode = self._state.dark_mode
        if restored_dark_mode != self.preferences.dark_mode:
            self.preferences = self.preferences.model_copy(update={"dark_mode": restored_dark_mode})
            self._preferences_file.save(self.preferences)
        return True

    # --- Templates ---

    def add_template(self, draft: TemplateDraft) -> Template:
        template = self._commit_returning(lambda s: journal.add_template(s, draft))
        logger.info(f"Template added: {template.name} ({len(template.questions)} questions)")
        return template

    def update_template(self, template: Template) -> bool:
        if journal.find_template(self._state, template.id) is None:
            return False
        self._commit(lambda s: journal.update_template(s, template))
        return True

    def reorder_questions(self, template_id: str, question_ids: Sequence[str]) -> Optional[Template]:
        self._commit(lambda s: journal.reorder_questions(s, template_id, question_ids))
        return journal.find_template(self._state, template_id)

    def delete_template(self, template_id: str) -> None:
        self._commit(lambda s: journal.delete_template(s, template_id))

    # --- Categories & Tags ---

    def add_category(self, name: str, journal_type: JournalType) -> Category:
        return self._commit_returning(lambda s: journal.add_category(s, name, journal_type))

    def delete_category(self, category_id: str) -> None:
        self._commit(lambda s: journal.delete_category(s, category_id))

    def add_tag(self, name: str, color: Optional[str] = None, description: Optional[str] = None) -> Tag:
        return self._commit_returning(lambda s: journal.add_tag(s, name, color, description))

    def delete_tag(self, tag_id: str) -> None:
        self._commit(lambda s: journal.delete_tag(s, tag_id))

    # --- Entries ---

    def create_entry(self, template_id: Optional[str], answers: dict, ratings: Sequence[RatingInput]) -> Entry:
        entry = self._commit_returning(lambda s: journal.create_entry(s, template_id, answers, ratings))
        logger.info(f"Entry created: {entry.id} (template {template_id}, {len(entry.ratings)} ratings)")
        return entry

    def update_entry(self, entry_id: str, answers: dict, ratings: Sequence[RatingInput]) -> bool:
        return self._commit_returning(lambda s: journal.update_entry(s, entry_id, answers, ratings))

    def delete_entry(self, entry_id: str) -> None:
        self._commit(lambda s: journal.delete_entry(s, entry_id))

    def delete_multiple_entries(self, entry_ids: Sequence[str]) -> None:
        self._commit(lambda s: journal.delete_multiple_entries(s, entry_ids))

    # --- Preferences ---

    def set_dark_mode(self, enabled: bool) -> bool:
        self._commit(lambda s: journal.set_dark_mode(s, enabled))
        self.update_preferences(dark_mode=enabled)
        return enabled

    def toggle_dark_mode(self) -> bool:
        return self.set_dark_mode(not self._state.dark_mode)

    def update_preferences(
        self,
        dark_mode: Optional[bool] = None,
        notifications: Optional[NotificationPreferences] = None,
    ) -> Preferences:
        changes = {}
        if dark_mode is not None:
            changes["dark_mode"] = dark_mode
            if dark_mode != self._state.dark_mode:
                self._commit(lambda s: journal.set_dark_mode(s, dark_mode))
        if notifications is not None:
            changes["notifications"] = notifications
        self.preferences = self.preferences.model_copy(update=changes)
        self._preferences_file.save(self.preferences)
        return self.preferences
