import copy
import logging

from jee_tracker.executor import (
    HANDLERS, ExportKind, ToolCall, execute_tool_calls, find_by_name,
)
from jee_tracker.dates import today_iso
from jee_tracker.models import AppState, PlannerTask, Priority, Subject, TestType
from conftest import make_chapter


def run(state, *calls):
    return execute_tool_calls(state, [ToolCall(name, args) for name, args in calls])


def test_all_ten_tools_registered():
    assert set(HANDLERS) == {
        "addChapter", "updateChapter", "bulkUpdateChapters", "updatePYQ", "addTest",
        "addRevisionPlan", "logDailyProgress", "deleteItem", "exportData", "exportLogs",
    }


def test_add_chapter_defaults():
    result = run(AppState(), ("addChapter", {"name": "Waves", "subject": "physics"}))
    assert len(result.state.chapters) == 1
    ch = result.state.chapters[0]
    assert ch.name == "Waves"
    assert ch.subject == Subject.PHYSICS
    assert ch.priority == Priority.C
    assert ch.unit == "General"
    assert ch.confidence == 0
    assert ch.rev1 is False and ch.rev2 is False
    assert [p.year for p in ch.pyqs] == [2025, 2024, 2023, 2022, 2021]
    assert all(p.done == 0 and p.total == 30 and p.completed is False and p.link == "" for p in ch.pyqs)
    assert result.logs == ["Added chapter: Waves"]


def test_add_chapter_without_name_uses_placeholder():
    result = run(AppState(), ("addChapter", {"subject": "MATHS", "priority": "priority a"}))
    ch = result.state.chapters[0]
    assert ch.name == "New Chapter"
    assert ch.subject == Subject.MATHEMATICS
    assert ch.priority == Priority.A


def test_update_chapter_fuzzy_and_only_present_fields(state):
    result = run(state, ("updateChapter", {"chapterName": "ROTATION", "confidence": 150, "rev1": True}))
    ch = result.state.chapters[1]
    assert ch.confidence == 100
    assert ch.rev1 is True
    assert ch.rev2 is False
    assert ch.priority == Priority.B
    assert ch.unit == "Mechanics"
    assert result.logs == ["Updated chapter: Rotational Motion"]


def test_update_chapter_first_match_wins(state):
    # "o" appears in all three names; the first in list order is updated
    result = run(state, ("updateChapter", {"chapterName": "o", "priority": "d"}))
    assert result.state.chapters[0].priority == Priority.D
    assert result.state.chapters[1].priority == Priority.B


def test_update_chapter_no_match_is_silent(state):
    result = run(state, ("updateChapter", {"chapterName": "Thermodynamics", "confidence": 90}))
    assert result.state == state
    assert result.logs == []


def test_update_chapter_empty_name_matches_nothing(state):
    result = run(state, ("updateChapter", {"chapterName": "", "confidence": 90}))
    assert result.state == state
    assert result.logs == []


def test_update_chapter_can_clear_remarks_and_unit(state):
    state.chapters[0].remarks = "old"
    result = run(state, ("updateChapter", {"chapterName": "electro", "remarks": "", "unit": ""}))
    assert result.state.chapters[0].remarks == ""
    assert result.state.chapters[0].unit == ""


def test_bulk_update_clears_tag_case_insensitively(state):
    result = run(state, ("bulkUpdateChapters", {"filterUnit": "mechanics", "updateUnit": ""}))
    assert result.state.chapters[1].unit == ""
    assert result.state.chapters[0].unit == "Electricity"
    assert result.logs == ['Removed tag "mechanics" from 1 chapters.']


def test_bulk_update_renames_tag(state):
    result = run(state, ("bulkUpdateChapters", {"filterUnit": "Physical", "updateUnit": "Physical Chem"}))
    assert result.state.chapters[2].unit == "Physical Chem"
    assert result.logs == ['Updated tag to "Physical Chem" for 1 chapters.']


def test_bulk_update_without_filter_matches_nothing(state):
    result = run(state, ("bulkUpdateChapters", {"updateUnit": "X"}))
    assert result.state.chapters == state.chapters
    assert result.logs == ['Updated tag to "X" for 0 chapters.']


def test_update_pyq(state):
    result = run(state, ("updatePYQ", {"chapterName": "bonding", "year": "2023", "completed": True, "done": 12}))
    pyq = next(p for p in result.state.chapters[2].pyqs if p.year == 2023)
    assert pyq.completed is True
    assert pyq.done == 12
    assert result.logs == ["Updated PYQ 2023 for Chemical Bonding"]


def test_update_pyq_unknown_year_is_noop(state):
    result = run(state, ("updatePYQ", {"chapterName": "bonding", "year": 2019, "completed": True}))
    assert result.state == state
    assert result.logs == []


def test_add_test_scores_and_defaults():
    result = run(AppState(), ("addTest", {
        "name": "Mock 9", "type": "part test", "physics_correct": 20, "physics_incorrect": "4",
        "maths_unattempted": -3,
    }))
    test = result.state.tests[0]
    assert test.type == TestType.PART_TEST
    assert test.date == today_iso()
    assert test.scores.physics.correct == 20
    assert test.scores.physics.incorrect == 4
    assert test.scores.maths.unattempted == 0
    assert test.scores.chemistry.correct == 0
    assert result.logs == ["Added test: Mock 9"]


def test_add_test_unknown_type_defaults_to_full_syllabus():
    result = run(AppState(), ("addTest", {"name": "X", "date": "2025-12-01", "type": "weird"}))
    assert result.state.tests[0].type == TestType.FULL_SYLLABUS
    assert result.state.tests[0].date == "2025-12-01"


def test_add_revision_plan_uses_chapter_subject(state):
    result = run(state, ("addRevisionPlan", {"chapterName": "bonding", "startDate": "2025-12-01", "subject": "Physics"}))
    tile = result.state.revision_tiles[-1]
    assert tile.chapter_id == "c1"
    assert tile.subject == Subject.CHEMISTRY
    assert tile.start_date == "2025-12-01"
    assert tile.end_date == today_iso()
    assert tile.target_q == 50
    assert tile.attempted_q == 0
    assert result.logs == ["Planned revision for Chemical Bonding"]


def test_add_revision_plan_no_match_creates_nothing(state):
    result = run(state, ("addRevisionPlan", {"chapterName": "Optics"}))
    assert result.state.revision_tiles == state.revision_tiles
    assert result.logs == []


def test_log_daily_progress_upsert_keeps_first_id(state):
    first = run(state, ("logDailyProgress", {"date": "2025-11-05", "physicsQ": 30}))
    second = run(first.state, ("logDailyProgress", {"date": "2025-11-05", "mathQ": 15, "remarks": "ok"}))
    logs = [l for l in second.state.logs if l.date == "2025-11-05"]
    assert len(logs) == 1
    assert logs[0].id == next(l for l in first.state.logs if l.date == "2025-11-05").id
    assert logs[0].physics_q == 30
    assert logs[0].math_q == 15
    assert logs[0].remarks == "ok"
    assert second.logs == ["Logged progress for 2025-11-05"]


def test_log_daily_progress_merges_existing(state):
    result = run(state, ("logDailyProgress", {"date": "2025-11-02", "chemistryQ": 40}))
    log = result.state.logs[0]
    assert log.id == "l1"
    assert (log.physics_q, log.chemistry_q, log.math_q, log.study_time) == (20, 40, 5, 120)


def test_log_daily_progress_defaults_to_today():
    result = run(AppState(), ("logDailyProgress", {"physicsQ": 5}))
    assert result.state.logs[0].date == today_iso()


def test_delete_chapter_cascades_tiles_not_planner_tasks(state):
    state.planner_tasks.append(PlannerTask(id="k1", date="2025-11-01", chapter_id="p1"))
    result = run(state, ("deleteItem", {"type": "chapter", "identifier": "Electro"}))
    assert [c.id for c in result.state.chapters] == ["p2", "c1"]
    assert result.state.revision_tiles == []
    assert [t.id for t in result.state.planner_tasks] == ["k1"]
    assert result.logs == ["Deleted chapter matching 'electro'"]


def test_delete_chapter_removes_every_match():
    state = AppState(chapters=[make_chapter("a", "Waves I"), make_chapter("b", "Waves II"), make_chapter("c", "Optics")])
    result = run(state, ("deleteItem", {"type": "Chapter", "identifier": "waves"}))
    assert [c.id for c in result.state.chapters] == ["c"]


def test_delete_test(state):
    result = run(state, ("deleteItem", {"type": "test", "identifier": "mock"}))
    assert result.state.tests == []
    assert result.logs == ["Deleted test matching 'mock'"]


def test_delete_revision(state):
    result = run(state, ("deleteItem", {"type": "revision", "identifier": "electro"}))
    assert result.state.revision_tiles == []
    assert result.state.chapters == state.chapters
    assert result.logs == ["Deleted revision plans for Electrostatics"]


def test_delete_nothing_matched_or_unknown_type(state):
    for args in (
        {"type": "chapter", "identifier": "Optics"},
        {"type": "planner", "identifier": "Electro"},
        {"type": "chapter", "identifier": ""},
        {"type": "revision", "identifier": "bonding"},
    ):
        result = run(state, ("deleteItem", args))
        assert result.state == state
        assert result.logs == []


def test_exports_are_deferred(state):
    result = run(state, ("exportData", {}), ("exportLogs", None))
    assert result.state == state
    assert result.exports == [ExportKind.DATA, ExportKind.LOGS]
    assert result.logs == ["Triggered data export.", "Triggered logs export."]


def test_unknown_tool_ignored_with_one_log_line(caplog):
    with caplog.at_level(logging.DEBUG, logger="jee_tracker.executor"):
        result = run(AppState(), ("launchRocket", {"x": 1}), ("addTest", {"name": "T"}))
    assert len(result.logs) == 1
    assert len(result.state.tests) == 1
    assert "launchRocket" in caplog.text


def test_calls_see_earlier_effects():
    result = run(
        AppState(),
        ("addChapter", {"name": "Thermodynamics", "subject": "chemistry"}),
        ("updateChapter", {"chapterName": "thermo", "confidence": 70}),
        ("addRevisionPlan", {"chapterName": "thermo", "targetQ": 20}),
    )
    ch = result.state.chapters[0]
    assert ch.confidence == 70
    assert result.state.revision_tiles[0].chapter_id == ch.id
    assert result.state.revision_tiles[0].target_q == 20
    assert len(result.logs) == 3


def test_input_state_is_never_mutated(state):
    before = copy.deepcopy(state)
    run(
        state,
        ("updateChapter", {"chapterName": "electro", "confidence": 99}),
        ("updatePYQ", {"chapterName": "electro", "year": 2025, "completed": True}),
        ("logDailyProgress", {"date": "2025-11-02", "physicsQ": 1}),
        ("deleteItem", {"type": "test", "identifier": "mock"}),
    )
    assert state == before


def test_malformed_arguments_never_raise(state):
    calls = [
        ToolCall("addChapter", None),
        ToolCall("updateChapter", {"chapterName": 42, "confidence": "lots", "rev1": [1]}),
        ToolCall("updatePYQ", {"chapterName": "electro", "year": None}),
        ToolCall("addTest", {"physics_correct": "NaN", "date": "not a date"}),
        ToolCall("logDailyProgress", {"physicsQ": {"a": 1}}),
        ToolCall("deleteItem", "chapter"),
        {"name": "addTest"},
        "garbage",
    ]
    result = execute_tool_calls(state, calls)
    assert len(result.state.tests) == 3


def test_tool_call_coerce_from_mapping():
    call = ToolCall.coerce({"name": "exportData", "args": None})
    assert call == ToolCall("exportData", {})


def test_find_by_name():
    chapters = [make_chapter("a", "Optics"), make_chapter("b", "Wave Optics")]
    assert find_by_name(chapters, "OPTICS") == 0
    assert find_by_name(chapters, "wave") == 1
    assert find_by_name(chapters, "") is None
    assert find_by_name(chapters, None) is None
    assert find_by_name(chapters, "Kinematics") is None
