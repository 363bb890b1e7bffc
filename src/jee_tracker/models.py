"""Data classes for the study tracker domain model.

Every record serializes to the camelCase layout of the persisted state
document (``to_dict``) and loads back from it (``from_dict``). Loading is
tolerant of missing keys; unknown enum strings fall back to the field default.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

PYQ_YEARS = (2025, 2024, 2023, 2022, 2021)
DEFAULT_PYQ_TOTAL = 30


class Subject(str, Enum):
    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    MATHEMATICS = "Mathematics"

    @property
    def score_key(self) -> str:
        """Key of this subject inside a test's ``scores`` mapping."""
        return {"Physics": "physics", "Chemistry": "chemistry", "Mathematics": "maths"}[self.value]


class Priority(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"

    @property
    def rank(self) -> int:
        return "ABCD".index(self.value) + 1


class TestType(str, Enum):
    __test__ = False  # not a pytest test class

    FULL_SYLLABUS = "Full Syllabus"
    PART_TEST = "Part Test"
    CHAPTER_WISE = "Chapter Wise"
    PYQ_MOCK = "PYQ Mock"

    @property
    def single_subject(self) -> bool:
        return self in (TestType.PART_TEST, TestType.CHAPTER_WISE)


class Theme(str, Enum):
    DARK = "dark"
    LIGHT = "light"


def new_id() -> str:
    """Return a fresh opaque identifier for a new record."""
    return uuid.uuid4().hex[:16]


def _member(enum_cls, value, default):
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _count(value) -> int:
    return int(value or 0)


def _text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass
class PYQYearData:
    year: int
    done: int = 0
    total: int = DEFAULT_PYQ_TOTAL
    link: str = ""
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "done": self.done,
            "total": self.total,
            "link": self.link,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PYQYearData":
        return cls(
            year=int(data["year"]),
            done=_count(data.get("done")),
            total=_count(data.get("total", DEFAULT_PYQ_TOTAL)),
            link=_text(data.get("link")),
            completed=bool(data.get("completed", False)),
        )


def default_pyqs(link: str = "") -> list[PYQYearData]:
    """One untouched PYQ entry per tracked year, newest first."""
    return [PYQYearData(year=year, link=link) for year in PYQ_YEARS]


def _pyqs_by_year(loaded: list[PYQYearData]) -> list[PYQYearData]:
    """Exactly one entry per tracked year; the first loaded entry for a year wins."""
    by_year = {}
    for pyq in loaded:
        by_year.setdefault(pyq.year, pyq)
    link = loaded[0].link if loaded else ""
    return [by_year.get(year) or PYQYearData(year=year, link=link) for year in PYQ_YEARS]


@dataclass
class Chapter:
    id: str
    name: str
    subject: Subject
    unit: str
    priority: Priority
    confidence: int = 0
    rev1: bool = False
    rev2: bool = False
    pyqs: list[PYQYearData] = field(default_factory=default_pyqs)
    remarks: str = ""
    study_links: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "subject": self.subject.value,
            "unit": self.unit,
            "priority": self.priority.value,
            "confidence": self.confidence,
            "rev1": self.rev1,
            "rev2": self.rev2,
            "pyqs": [p.to_dict() for p in self.pyqs],
            "remarks": self.remarks,
            "studyLinks": self.study_links,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Chapter":
        pyqs = data.get("pyqs")
        return cls(
            id=str(data["id"]),
            name=_text(data.get("name")),
            subject=_member(Subject, data.get("subject"), Subject.PHYSICS),
            unit=_text(data.get("unit")),
            priority=_member(Priority, data.get("priority"), Priority.C),
            confidence=max(0, min(100, _count(data.get("confidence")))),
            rev1=bool(data.get("rev1", False)),
            rev2=bool(data.get("rev2", False)),
            pyqs=_pyqs_by_year([PYQYearData.from_dict(p) for p in pyqs]) if pyqs is not None else default_pyqs(),
            remarks=_text(data.get("remarks")),
            study_links=_text(data.get("studyLinks")),
        )


@dataclass
class SubjectScore:
    correct: int = 0
    incorrect: int = 0
    unattempted: int = 0

    def to_dict(self) -> dict:
        return {"correct": self.correct, "incorrect": self.incorrect, "unattempted": self.unattempted}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "SubjectScore":
        data = data or {}
        return cls(
            correct=_count(data.get("correct")),
            incorrect=_count(data.get("incorrect")),
            unattempted=_count(data.get("unattempted")),
        )


@dataclass
class TestScores:
    __test__ = False

    physics: SubjectScore = field(default_factory=SubjectScore)
    chemistry: SubjectScore = field(default_factory=SubjectScore)
    maths: SubjectScore = field(default_factory=SubjectScore)

    def for_subject(self, subject: Subject) -> SubjectScore:
        return getattr(self, subject.score_key)

    def to_dict(self) -> dict:
        return {
            "physics": self.physics.to_dict(),
            "chemistry": self.chemistry.to_dict(),
            "maths": self.maths.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "TestScores":
        data = data or {}
        return cls(
            physics=SubjectScore.from_dict(data.get("physics")),
            chemistry=SubjectScore.from_dict(data.get("chemistry")),
            maths=SubjectScore.from_dict(data.get("maths")),
        )


@dataclass
class TestRecord:
    __test__ = False

    id: str
    name: str
    date: str
    type: TestType
    scores: TestScores = field(default_factory=TestScores)
    subject: Optional[Subject] = None
    linked_chapters: list[str] = field(default_factory=list)
    time_taken: str = ""
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "type": self.type.value,
            "subject": self.subject.value if self.subject else None,
            "linkedChapters": list(self.linked_chapters),
            "timeTaken": self.time_taken,
            "notes": self.notes,
            "scores": self.scores.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TestRecord":
        subject = data.get("subject")
        return cls(
            id=str(data["id"]),
            name=_text(data.get("name")),
            date=_text(data.get("date")),
            type=_member(TestType, data.get("type"), TestType.FULL_SYLLABUS),
            scores=TestScores.from_dict(data.get("scores")),
            subject=_member(Subject, subject, None) if subject else None,
            linked_chapters=[str(c) for c in data.get("linkedChapters") or []],
            time_taken=_text(data.get("timeTaken")),
            notes=_text(data.get("notes")),
        )


@dataclass
class RevisionTile:
    id: str
    chapter_id: str
    subject: Subject
    start_date: str
    end_date: str
    target_q: int
    attempted_q: int = 0
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "chapterId": self.chapter_id,
            "subject": self.subject.value,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "targetQ": self.target_q,
            "attemptedQ": self.attempted_q,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RevisionTile":
        return cls(
            id=str(data["id"]),
            chapter_id=str(data.get("chapterId", "")),
            subject=_member(Subject, data.get("subject"), Subject.PHYSICS),
            start_date=_text(data.get("startDate")),
            end_date=_text(data.get("endDate")),
            target_q=_count(data.get("targetQ")),
            attempted_q=_count(data.get("attemptedQ")),
            notes=_text(data.get("notes")),
        )


@dataclass
class DailyLog:
    id: str
    date: str
    physics_q: int = 0
    chemistry_q: int = 0
    math_q: int = 0
    study_time: int = 0  # minutes
    remarks: str = ""

    @property
    def total_questions(self) -> int:
        return self.physics_q + self.chemistry_q + self.math_q

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "physicsQ": self.physics_q,
            "chemistryQ": self.chemistry_q,
            "mathQ": self.math_q,
            "studyTime": self.study_time,
            "remarks": self.remarks,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DailyLog":
        return cls(
            id=str(data["id"]),
            date=_text(data.get("date")),
            physics_q=_count(data.get("physicsQ")),
            chemistry_q=_count(data.get("chemistryQ")),
            math_q=_count(data.get("mathQ")),
            study_time=_count(data.get("studyTime")),
            remarks=_text(data.get("remarks")),
        )


@dataclass
class PlannerTask:
    id: str
    date: str
    chapter_id: str
    remark: str = ""
    completed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "chapterId": self.chapter_id,
            "remark": self.remark,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlannerTask":
        return cls(
            id=str(data["id"]),
            date=_text(data.get("date")),
            chapter_id=str(data.get("chapterId", "")),
            remark=_text(data.get("remark")),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class AppState:
    chapters: list[Chapter] = field(default_factory=list)
    revision_tiles: list[RevisionTile] = field(default_factory=list)
    tests: list[TestRecord] = field(default_factory=list)
    logs: list[DailyLog] = field(default_factory=list)
    planner_tasks: list[PlannerTask] = field(default_factory=list)
    theme: Theme = Theme.DARK

    def to_dict(self) -> dict:
        return {
            "chapters": [c.to_dict() for c in self.chapters],
            "revisionTiles": [t.to_dict() for t in self.revision_tiles],
            "tests": [t.to_dict() for t in self.tests],
            "logs": [l.to_dict() for l in self.logs],
            "plannerTasks": [t.to_dict() for t in self.planner_tasks],
            "theme": self.theme.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AppState":
        return cls(
            chapters=[Chapter.from_dict(c) for c in data.get("chapters") or []],
            revision_tiles=[RevisionTile.from_dict(t) for t in data.get("revisionTiles") or []],
            tests=[TestRecord.from_dict(t) for t in data.get("tests") or []],
            logs=[DailyLog.from_dict(l) for l in data.get("logs") or []],
            planner_tasks=[PlannerTask.from_dict(t) for t in data.get("plannerTasks") or []],
            theme=_member(Theme, data.get("theme"), Theme.DARK),
        )

    def chapter_by_id(self, chapter_id: str) -> Optional[Chapter]:
        for chapter in self.chapters:
            if chapter.id == chapter_id:
                return chapter
        return None
