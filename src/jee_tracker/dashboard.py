"""Dashboard figures: test KPIs, syllabus progress, focus list and score trends."""
from datetime import date
from typing import Iterable, Optional

from jee_tracker.config import EXAM_DATE
from jee_tracker.dates import days_between, parse_date
from jee_tracker.models import PYQ_YEARS, AppState, Chapter, Priority, Subject, TestRecord, TestType
from jee_tracker.normalize import round_half_up
from jee_tracker.stats import overall_stats, smooth_rows, subject_stats

FOCUS_THRESHOLDS = {Priority.A: 60, Priority.B: 50}


def get_confidence_label(confidence: int) -> str:
    if confidence >= 80:
        return "STRONG"
    elif confidence >= 60:
        return "OKAY"
    elif confidence >= 40:
        return "SHAKY"
    return "WEAK"


def get_confidence_color(confidence: int) -> str:
    if confidence >= 80:
        return "green"
    elif confidence >= 60:
        return "yellow"
    elif confidence >= 40:
        return "dark_orange"
    return "red"


def days_until_exam(today: Optional[date] = None) -> int:
    return days_between(today or date.today(), parse_date(EXAM_DATE))


def get_test_kpis(tests: list[TestRecord]) -> dict:
    if not tests:
        return {"count": 0, "avg_score": 0, "best_score": 0, "last5_avg": 0}
    marks = [overall_stats(t.scores).total_marks for t in tests]
    recent = sorted(tests, key=lambda t: t.date, reverse=True)[:5]
    recent_marks = [overall_stats(t.scores).total_marks for t in recent]
    return {
        "count": len(tests),
        "avg_score": round_half_up(sum(marks) / len(marks)),
        "best_score": max([0, *marks]),
        "last5_avg": round_half_up(sum(recent_marks) / len(recent_marks)),
    }


def _pyq_completion(chapter: Chapter) -> float:
    done = sum(1 for p in chapter.pyqs if p.completed)
    return done / len(PYQ_YEARS) * 100


def get_subject_progress(state: AppState, subject: Subject) -> dict:
    chapters = [c for c in state.chapters if c.subject == subject]
    if not chapters:
        return {"subject": subject, "total_chapters": 0, "avg_completion": 0, "avg_confidence": 0}
    return {
        "subject": subject,
        "total_chapters": len(chapters),
        "avg_completion": round_half_up(sum(_pyq_completion(c) for c in chapters) / len(chapters)),
        "avg_confidence": round_half_up(sum(c.confidence for c in chapters) / len(chapters)),
    }


def get_focus_chapters(state: AppState, limit: int = 6) -> list[Chapter]:
    """High-priority chapters the student is not yet confident in."""
    weak = [
        c for c in state.chapters
        if c.priority in FOCUS_THRESHOLDS and c.confidence < FOCUS_THRESHOLDS[c.priority]
    ]
    weak.sort(key=lambda c: (c.priority.rank, c.confidence))
    return weak[:limit]


def filter_tests(
    tests: list[TestRecord],
    chapters: list[Chapter] = (),
    subjects: Iterable[Subject] = (),
    types: Iterable[TestType] = (),
    start: str = "",
    end: str = "",
    search: str = "",
) -> list[TestRecord]:
    subjects, types = set(subjects), set(types)
    names = {c.id: c.name for c in chapters}
    term = search.lower()
    result = []
    for test in tests:
        if start and test.date < start:
            continue
        if end and test.date > end:
            continue
        if types and test.type not in types:
            continue
        # subject filter only keeps single-subject tests
        if subjects and (test.subject is None or test.subject not in subjects):
            continue
        if term:
            linked = " ".join(names.get(i, "") for i in test.linked_chapters).lower()
            if term not in test.name.lower() and term not in test.notes.lower() and term not in linked:
                continue
        result.append(test)
    return result


def sort_tests(tests: list[TestRecord], key: str = "date", descending: bool = True) -> list[TestRecord]:
    if key == "score":
        return sorted(tests, key=lambda t: overall_stats(t.scores).total_marks, reverse=descending)
    return sorted(tests, key=lambda t: t.date, reverse=descending)


def score_trend(tests: list[TestRecord], smooth: bool = True, window: int = 3) -> list[dict]:
    """Chronological marks per subject plus the overall total."""
    rows = []
    for test in sorted(tests, key=lambda t: t.date):
        row = {"date": test.date, "name": test.name, "Overall": overall_stats(test.scores).total_marks}
        for subject in Subject:
            row[subject.value] = subject_stats(test.scores.for_subject(subject)).marks
        rows.append(row)
    if smooth:
        return smooth_rows(rows, ["Overall", *(s.value for s in Subject)], window)
    return rows
