"""
journal/views.py — Read-Side Views
====================================
What the dashboard, timeline and calendar pages show, computed from an
AppState snapshot:

- timeline: entries grouped by month ("May 2025"), newest month first,
  newest entry first within each month
- by_date: entries grouped by day (YYYY-MM-DD), newest day first
- day: one day's entries split into morning and evening

Morning/evening is decided by the entry's template type. Entries whose
template was deleted land in "other" rather than disappearing.
"""

from collections import defaultdict
from datetime import date
from typing import Optional

from pydantic import BaseModel

from daybook.journal.state import AppState, Entry, JournalType


class TimelineGroup(BaseModel):
    label: str
    entries: list[Entry]


class DayEntries(BaseModel):
    on: date
    morning: list[Entry] = []
    evening: list[Entry] = []
    other: list[Entry] = []


def _newest_first(entries) -> list[Entry]:
    return sorted(entries, key=lambda e: e.timestamp, reverse=True)


def entry_type(state: AppState, entry: Entry) -> Optional[JournalType]:
    for template in state.templates:
        if template.id == entry.template_id:
            return template.type
    return None


def filter_entries(state: AppState, journal_type: Optional[JournalType] = None) -> list[Entry]:
    if journal_type is None:
        return _newest_first(state.entries)
    return _newest_first(e for e in state.entries if entry_type(state, e) == journal_type)


def timeline(state: AppState) -> list[TimelineGroup]:
    groups = defaultdict(list)
    for entry in state.entries:
        groups[(entry.timestamp.year, entry.timestamp.month)].append(entry)

    result = []
    for key in sorted(groups, reverse=True):
        entries = _newest_first(groups[key])
        result.append(TimelineGroup(label=entries[0].timestamp.strftime("%B %Y"), entries=entries))
    return result


def by_date(state: AppState) -> dict[str, list[Entry]]:
    groups = defaultdict(list)
    for entry in state.entries:
        groups[entry.timestamp.date().isoformat()].append(entry)
    return {day: _newest_first(groups[day]) for day in sorted(groups, reverse=True)}


def day(state: AppState, on: date) -> DayEntries:
    result = DayEntries(on=on)
    for entry in _newest_first(e for e in state.entries if e.timestamp.date() == on):
        kind = entry_type(state, entry)
        if kind == JournalType.MORNING:
            result.morning.append(entry)
        elif kind == JournalType.EVENING:
            result.evening.append(entry)
        else:
            result.other.append(entry)
    return result
