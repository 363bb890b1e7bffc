"""Direct state mutations behind the front end's add/update/delete actions.

Every function takes an ``AppState`` and returns a new one; the input and its
lists are left untouched.
"""
from dataclasses import replace
from typing import Iterable

from jee_tracker.models import (
    PYQ_YEARS, AppState, Chapter, DailyLog, PlannerTask, Priority, RevisionTile,
    TestRecord, Theme,
)
from jee_tracker.normalize import clamp


def _upsert(items: list, item) -> list:
    for i, existing in enumerate(items):
        if existing.id == item.id:
            return [*items[:i], item, *items[i + 1:]]
    return [*items, item]


# Chapters

def add_chapter(state: AppState, chapter: Chapter) -> AppState:
    return replace(state, chapters=[*state.chapters, chapter])


def update_chapter(state: AppState, chapter: Chapter) -> AppState:
    return replace(state, chapters=[chapter if c.id == chapter.id else c for c in state.chapters])


def delete_chapter(state: AppState, chapter_id: str) -> AppState:
    """Remove a chapter and the revision tiles scheduled for it."""
    if not chapter_id:
        return state
    return replace(
        state,
        chapters=[c for c in state.chapters if c.id != chapter_id],
        revision_tiles=[t for t in state.revision_tiles if t.chapter_id != chapter_id],
    )


def reorder_chapters(state: AppState, ordered_ids: Iterable[str]) -> AppState:
    """Put the listed chapters first, in the given order; the rest keep theirs."""
    by_id = {c.id: c for c in state.chapters}
    head = [by_id[i] for i in dict.fromkeys(ordered_ids) if i in by_id]
    seen = {c.id for c in head}
    return replace(state, chapters=head + [c for c in state.chapters if c.id not in seen])


def set_chapter_confidence(state: AppState, chapter_id: str, confidence: int) -> AppState:
    chapter = state.chapter_by_id(chapter_id)
    if chapter is None:
        return state
    return update_chapter(state, replace(chapter, confidence=clamp(confidence, 0, 100)))


def cycle_priority(state: AppState, chapter_id: str) -> AppState:
    """A -> B -> C -> D -> A."""
    chapter = state.chapter_by_id(chapter_id)
    if chapter is None:
        return state
    order = list(Priority)
    following = order[(order.index(chapter.priority) + 1) % len(order)]
    return update_chapter(state, replace(chapter, priority=following))


def toggle_revision(state: AppState, chapter_id: str, which: int) -> AppState:
    chapter = state.chapter_by_id(chapter_id)
    if chapter is None or which not in (1, 2):
        return state
    field_name = f"rev{which}"
    return update_chapter(state, replace(chapter, **{field_name: not getattr(chapter, field_name)}))


def toggle_pyq_year(state: AppState, chapter_id: str, year: int) -> AppState:
    chapter = state.chapter_by_id(chapter_id)
    if chapter is None or year not in PYQ_YEARS:
        return state
    pyqs = [replace(p, completed=not p.completed) if p.year == year else p for p in chapter.pyqs]
    return update_chapter(state, replace(chapter, pyqs=pyqs))


# Revision tiles

def add_revision_tile(state: AppState, tile: RevisionTile) -> AppState:
    return replace(state, revision_tiles=[*state.revision_tiles, tile])


def update_revision_tile(state: AppState, tile: RevisionTile) -> AppState:
    return replace(state, revision_tiles=[tile if t.id == tile.id else t for t in state.revision_tiles])


def delete_revision_tile(state: AppState, tile_id: str) -> AppState:
    if not tile_id:
        return state
    return replace(state, revision_tiles=[t for t in state.revision_tiles if t.id != tile_id])


# Tests

def save_test(state: AppState, test: TestRecord) -> AppState:
    return replace(state, tests=_upsert(state.tests, test))


def delete_test(state: AppState, test_id: str) -> AppState:
    return replace(state, tests=[t for t in state.tests if t.id != test_id])


# Planner

def save_planner_task(state: AppState, task: PlannerTask) -> AppState:
    return replace(state, planner_tasks=_upsert(state.planner_tasks, task))


def delete_planner_task(state: AppState, task_id: str) -> AppState:
    return replace(state, planner_tasks=[t for t in state.planner_tasks if t.id != task_id])


def toggle_planner_task(state: AppState, task_id: str) -> AppState:
    return replace(
        state,
        planner_tasks=[replace(t, completed=not t.completed) if t.id == task_id else t for t in state.planner_tasks],
    )


# Daily logs

def upsert_daily_log(state: AppState, log: DailyLog) -> AppState:
    """Save ``log`` for its date, keeping the id of an existing entry.

    Logs stay sorted newest first.
    """
    logs = list(state.logs)
    for i, existing in enumerate(logs):
        if existing.date == log.date:
            logs[i] = replace(log, id=existing.id)
            break
    else:
        logs.append(log)
    logs.sort(key=lambda l: l.date, reverse=True)
    return replace(state, logs=logs)


def merge_logs(state: AppState, imported: Iterable[DailyLog]) -> AppState:
    """Upsert imported logs by date; existing entries keep their ids."""
    logs = list(state.logs)
    for log in imported:
        for i, existing in enumerate(logs):
            if existing.date == log.date:
                logs[i] = replace(log, id=existing.id)
                break
        else:
            logs.append(log)
    return replace(state, logs=logs)


def toggle_theme(state: AppState) -> AppState:
    return replace(state, theme=Theme.LIGHT if state.theme == Theme.DARK else Theme.DARK)
