from jee_tracker.models import (
    AppState, Chapter, DailyLog, PlannerTask, Priority, Subject, TestRecord, TestType, Theme,
    default_pyqs, new_id,
)


def test_state_round_trip(state):
    state.planner_tasks.append(PlannerTask(id="k1", date="2025-11-03", chapter_id="p2", remark="ex 2"))
    assert AppState.from_dict(state.to_dict()) == state


def test_to_dict_uses_camel_case_keys(state):
    doc = state.to_dict()
    assert set(doc) == {"chapters", "revisionTiles", "tests", "logs", "plannerTasks", "theme"}
    assert doc["revisionTiles"][0]["chapterId"] == "p1"
    assert doc["logs"][0]["physicsQ"] == 20
    assert doc["tests"][0]["subject"] is None
    assert doc["chapters"][0]["studyLinks"] == ""


def test_unknown_enum_values_fall_back():
    ch = Chapter.from_dict({"id": "x", "name": "X", "subject": "Biology", "priority": "Z", "confidence": 300})
    assert ch.subject == Subject.PHYSICS
    assert ch.priority == Priority.C
    assert ch.confidence == 100
    assert len(ch.pyqs) == 5
    test = TestRecord.from_dict({"id": "t", "type": "Quiz"})
    assert test.type == TestType.FULL_SYLLABUS
    assert test.scores.physics.correct == 0
    assert AppState.from_dict({"theme": "sepia"}).theme == Theme.DARK


def test_default_pyqs_share_link():
    pyqs = default_pyqs("https://example.org/ch")
    assert {p.link for p in pyqs} == {"https://example.org/ch"}
    assert pyqs[0] is not pyqs[1]


def test_test_type_single_subject():
    assert TestType.PART_TEST.single_subject
    assert TestType.CHAPTER_WISE.single_subject
    assert not TestType.FULL_SYLLABUS.single_subject


def test_daily_log_total():
    log = DailyLog(id="a", date="2025-01-01", physics_q=3, chemistry_q=4, math_q=5)
    assert log.total_questions == 12


def test_new_id_unique():
    assert len({new_id() for _ in range(100)}) == 100


def test_chapter_by_id(state):
    assert state.chapter_by_id("c1").name == "Chemical Bonding"
    assert state.chapter_by_id("nope") is None


def test_loaded_pyqs_cover_each_year_once():
    ch = Chapter.from_dict({"id": "x", "name": "X", "pyqs": [
        {"year": 2024, "done": 3, "link": "https://example.org/x"},
        {"year": 2024, "done": 9},
        {"year": 2019, "done": 1},
    ]})
    assert [p.year for p in ch.pyqs] == [2025, 2024, 2023, 2022, 2021]
    assert ch.pyqs[1].done == 3
    assert {p.link for p in ch.pyqs} == {"https://example.org/x"}
    assert all(p.done == 0 for i, p in enumerate(ch.pyqs) if i != 1)


def test_text_fields_coerced_to_str():
    ch = Chapter.from_dict({"id": 5, "name": 123, "unit": None, "remarks": 4.5})
    assert (ch.id, ch.name, ch.unit, ch.remarks) == ("5", "123", "", "4.5")
    log = DailyLog.from_dict({"id": "l", "date": "2025-01-01", "remarks": 0})
    assert log.remarks == "0"
