"""Apply assistant tool calls to the application state.

Each tool is a pure handler registered with ``@handler("toolName")``. A
handler receives the current ``AppState`` plus the raw argument bag and
returns an ``Applied`` value: the next state, the log lines to show the user
and any export requests. ``execute_tool_calls`` threads the state through a
batch in order, so later calls see the effects of earlier ones.

Handlers never mutate the state they are given and never raise on malformed
arguments; a lookup that finds nothing is a silent no-op without a log line.
"""
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, NamedTuple, Optional, Sequence

from jee_tracker.dates import today_iso
from jee_tracker.models import (
    AppState, Chapter, DailyLog, RevisionTile, TestRecord, default_pyqs, new_id,
)
from jee_tracker.normalize import (
    as_text, clamp, normalize_priority, normalize_subject, normalize_test_type,
)
from jee_tracker.tool_args import (
    AddChapterArgs, AddRevisionPlanArgs, AddTestArgs, BulkUpdateChaptersArgs,
    DeleteItemArgs, LogDailyProgressArgs, UpdateChapterArgs, UpdatePYQArgs,
)

logger = logging.getLogger(__name__)

DEFAULT_CHAPTER_NAME = "New Chapter"
DEFAULT_UNIT = "General"
DEFAULT_TEST_NAME = "Test"
DEFAULT_REVISION_TARGET = 50


class ExportKind(str, Enum):
    DATA = "data"
    LOGS = "logs"


@dataclass(frozen=True)
class ToolCall:
    name: str
    args: Mapping = field(default_factory=dict)

    @classmethod
    def coerce(cls, call) -> "ToolCall":
        """Accept a ToolCall or a ``{"name", "args"}`` mapping."""
        if isinstance(call, ToolCall):
            return call
        if isinstance(call, Mapping):
            args = call.get("args")
            return cls(name=as_text(call.get("name"), ""), args=args if isinstance(args, Mapping) else {})
        return cls(name="")


class Applied(NamedTuple):
    state: AppState
    logs: Sequence[str] = ()
    exports: Sequence["ExportKind"] = ()


@dataclass
class ExecutionResult:
    state: AppState
    logs: list[str] = field(default_factory=list)
    exports: list[ExportKind] = field(default_factory=list)


HANDLERS: dict[str, Callable[[AppState, Mapping], Applied]] = {}


def handler(name: str):
    """Decorator to register a tool handler."""
    def decorator(fn: Callable) -> Callable:
        HANDLERS[name] = fn
        return fn
    return decorator


def execute_tool_calls(state: AppState, calls: Iterable) -> ExecutionResult:
    """Apply ``calls`` in order to ``state`` and collect the action log."""
    logs: list[str] = []
    exports: list[ExportKind] = []
    for raw in calls or []:
        call = ToolCall.coerce(raw)
        fn = HANDLERS.get(call.name)
        if fn is None:
            logger.debug("Ignoring unknown tool call %r", call.name)
            continue
        applied = fn(state, call.args)
        state = applied.state
        logs.extend(applied.logs)
        exports.extend(applied.exports)
    logger.info("Applied tool batch: %d action(s), %d export(s)", len(logs), len(exports))
    return ExecutionResult(state=state, logs=logs, exports=exports)


def find_by_name(items: Sequence, fragment: Optional[str]) -> Optional[int]:
    """Index of the first item whose name contains ``fragment`` (case-insensitive).

    An empty fragment matches nothing.
    """
    needle = (fragment or "").strip().lower()
    if not needle:
        return None
    for i, item in enumerate(items):
        if needle in item.name.lower():
            return i
    return None


def _replace_at(items: list, index: int, item) -> list:
    return [*items[:index], item, *items[index + 1:]]


# ---------------------------------------------------------------------------
# Chapters
# ---------------------------------------------------------------------------

@handler("addChapter")
def handle_add_chapter(state: AppState, args: Mapping) -> Applied:
    a = AddChapterArgs.from_args(args)
    chapter = Chapter(
        id=new_id(),
        name=a.name or DEFAULT_CHAPTER_NAME,
        subject=normalize_subject(a.subject),
        unit=a.unit or DEFAULT_UNIT,
        priority=normalize_priority(a.priority),
        pyqs=default_pyqs(),
    )
    return Applied(replace(state, chapters=[*state.chapters, chapter]), [f"Added chapter: {chapter.name}"])


@handler("updateChapter")
def handle_update_chapter(state: AppState, args: Mapping) -> Applied:
    a = UpdateChapterArgs.from_args(args)
    index = find_by_name(state.chapters, a.chapter_name)
    if index is None:
        return Applied(state)
    chapter = state.chapters[index]
    changes = {}
    if a.priority:
        changes["priority"] = normalize_priority(a.priority)
    if a.confidence is not None:
        changes["confidence"] = clamp(a.confidence, 0, 100)
    if a.rev1 is not None:
        changes["rev1"] = a.rev1
    if a.rev2 is not None:
        changes["rev2"] = a.rev2
    if a.remarks is not None:
        changes["remarks"] = a.remarks
    if a.unit is not None:
        changes["unit"] = a.unit
    updated = replace(chapter, **changes)
    return Applied(
        replace(state, chapters=_replace_at(state.chapters, index, updated)),
        [f"Updated chapter: {chapter.name}"],
    )


@handler("bulkUpdateChapters")
def handle_bulk_update_chapters(state: AppState, args: Mapping) -> Applied:
    a = BulkUpdateChaptersArgs.from_args(args)
    new_unit = a.update_unit if a.update_unit is not None else ""
    wanted = (a.filter_unit or "").lower()
    count = 0
    chapters = []
    for chapter in state.chapters:
        if wanted and chapter.unit and chapter.unit.lower() == wanted:
            chapter = replace(chapter, unit=new_unit)
            count += 1
        chapters.append(chapter)
    if new_unit == "":
        message = f'Removed tag "{a.filter_unit or ""}" from {count} chapters.'
    else:
        message = f'Updated tag to "{new_unit}" for {count} chapters.'
    return Applied(replace(state, chapters=chapters), [message])


@handler("updatePYQ")
def handle_update_pyq(state: AppState, args: Mapping) -> Applied:
    a = UpdatePYQArgs.from_args(args)
    index = find_by_name(state.chapters, a.chapter_name)
    if index is None or a.year is None:
        return Applied(state)
    chapter = state.chapters[index]
    position = next((i for i, p in enumerate(chapter.pyqs) if p.year == a.year), None)
    if position is None:
        return Applied(state)
    pyq = chapter.pyqs[position]
    changes = {}
    if a.completed is not None:
        changes["completed"] = a.completed
    if a.done is not None:
        changes["done"] = a.done
    updated = replace(chapter, pyqs=_replace_at(chapter.pyqs, position, replace(pyq, **changes)))
    return Applied(
        replace(state, chapters=_replace_at(state.chapters, index, updated)),
        [f"Updated PYQ {a.year} for {chapter.name}"],
    )


# ---------------------------------------------------------------------------
# Tests, revisions and daily logs
# ---------------------------------------------------------------------------

@handler("addTest")
def handle_add_test(state: AppState, args: Mapping) -> Applied:
    a = AddTestArgs.from_args(args)
    test = TestRecord(
        id=new_id(),
        name=a.name or DEFAULT_TEST_NAME,
        date=a.date or today_iso(),
        type=normalize_test_type(a.type),
        notes=a.notes or "",
        scores=a.scores,
    )
    return Applied(replace(state, tests=[*state.tests, test]), [f"Added test: {test.name}"])


@handler("addRevisionPlan")
def handle_add_revision_plan(state: AppState, args: Mapping) -> Applied:
    a = AddRevisionPlanArgs.from_args(args)
    index = find_by_name(state.chapters, a.chapter_name)
    if index is None:
        return Applied(state)
    chapter = state.chapters[index]
    today = today_iso()
    tile = RevisionTile(
        id=new_id(),
        chapter_id=chapter.id,
        subject=chapter.subject,
        start_date=a.start_date or today,
        end_date=a.end_date or today,
        target_q=a.target_q if a.target_q and a.target_q > 0 else DEFAULT_REVISION_TARGET,
        attempted_q=0,
        notes=a.notes or "",
    )
    return Applied(
        replace(state, revision_tiles=[*state.revision_tiles, tile]),
        [f"Planned revision for {chapter.name}"],
    )


@handler("logDailyProgress")
def handle_log_daily_progress(state: AppState, args: Mapping) -> Applied:
    a = LogDailyProgressArgs.from_args(args)
    day = a.date or today_iso()
    index = next((i for i, log in enumerate(state.logs) if log.date == day), None)
    previous = state.logs[index] if index is not None else DailyLog(id=new_id(), date=day)

    def pick(value, fallback):
        return value if value is not None else fallback

    entry = DailyLog(
        id=previous.id,
        date=day,
        physics_q=pick(a.physics_q, previous.physics_q),
        chemistry_q=pick(a.chemistry_q, previous.chemistry_q),
        math_q=pick(a.math_q, previous.math_q),
        study_time=pick(a.study_time, previous.study_time),
        remarks=pick(a.remarks, previous.remarks),
    )
    if index is not None:
        logs = _replace_at(state.logs, index, entry)
    else:
        logs = [*state.logs, entry]
    return Applied(replace(state, logs=logs), [f"Logged progress for {day}"])


# ---------------------------------------------------------------------------
# Deletion and export
# ---------------------------------------------------------------------------

def _delete_chapters(state: AppState, needle: str) -> Applied:
    removed = {c.id for c in state.chapters if needle in c.name.lower()}
    if not removed:
        return Applied(state)
    return Applied(
        replace(
            state,
            chapters=[c for c in state.chapters if c.id not in removed],
            revision_tiles=[t for t in state.revision_tiles if t.chapter_id not in removed],
        ),
        [f"Deleted chapter matching '{needle}'"],
    )


def _delete_tests(state: AppState, needle: str) -> Applied:
    tests = [t for t in state.tests if needle not in t.name.lower()]
    if len(tests) == len(state.tests):
        return Applied(state)
    return Applied(replace(state, tests=tests), [f"Deleted test matching '{needle}'"])


def _delete_revisions(state: AppState, needle: str) -> Applied:
    index = find_by_name(state.chapters, needle)
    if index is None:
        return Applied(state)
    chapter = state.chapters[index]
    tiles = [t for t in state.revision_tiles if t.chapter_id != chapter.id]
    if len(tiles) == len(state.revision_tiles):
        return Applied(state)
    return Applied(replace(state, revision_tiles=tiles), [f"Deleted revision plans for {chapter.name}"])


_DELETERS = {
    "chapter": _delete_chapters,
    "test": _delete_tests,
    "revision": _delete_revisions,
}


@handler("deleteItem")
def handle_delete_item(state: AppState, args: Mapping) -> Applied:
    a = DeleteItemArgs.from_args(args)
    needle = (a.identifier or "").strip().lower()
    deleter = _DELETERS.get((a.type or "").strip().lower())
    if deleter is None or not needle:
        return Applied(state)
    return deleter(state, needle)


@handler("exportData")
def handle_export_data(state: AppState, args: Mapping) -> Applied:
    return Applied(state, ["Triggered data export."], [ExportKind.DATA])


@handler("exportLogs")
def handle_export_logs(state: AppState, args: Mapping) -> Applied:
    return Applied(state, ["Triggered logs export."], [ExportKind.LOGS])
