import pytest

from jee_tracker.models import (
    AppState, Chapter, DailyLog, Priority, RevisionTile, Subject, SubjectScore, TestRecord,
    TestScores, TestType,
)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tracker.db")
    return db_path


def make_chapter(id, name, subject=Subject.PHYSICS, unit="Mechanics", priority=Priority.A, confidence=0):
    return Chapter(id=id, name=name, subject=subject, unit=unit, priority=priority, confidence=confidence)


def make_test(id, name, date="2025-10-01", correct=(10, 10, 10), incorrect=(0, 0, 0), type=TestType.FULL_SYLLABUS):
    scores = TestScores(
        physics=SubjectScore(correct[0], incorrect[0], 0),
        chemistry=SubjectScore(correct[1], incorrect[1], 0),
        maths=SubjectScore(correct[2], incorrect[2], 0),
    )
    return TestRecord(id=id, name=name, date=date, type=type, scores=scores)


@pytest.fixture
def state():
    """A small state: three chapters, one revision tile, one test, one log."""
    return AppState(
        chapters=[
            make_chapter("p1", "Electrostatics", unit="Electricity"),
            make_chapter("p2", "Rotational Motion", unit="Mechanics", priority=Priority.B, confidence=40),
            make_chapter("c1", "Chemical Bonding", subject=Subject.CHEMISTRY, unit="Physical", priority=Priority.C),
        ],
        revision_tiles=[
            RevisionTile(id="r1", chapter_id="p1", subject=Subject.PHYSICS,
                         start_date="2025-11-01", end_date="2025-11-03", target_q=40),
        ],
        tests=[make_test("t1", "Full Mock 1")],
        logs=[DailyLog(id="l1", date="2025-11-02", physics_q=20, chemistry_q=10, math_q=5, study_time=120)],
    )
