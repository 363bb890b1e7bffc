"""Seed the tracker with the JEE chapter list and a few sample tests."""
import json
from pathlib import Path

from jee_tracker.db import read_document, write_document
from jee_tracker.models import (
    AppState, Chapter, Priority, Subject, SubjectScore, TestRecord, TestScores, TestType,
    default_pyqs,
)

CONTENT_DIR = Path(__file__).parent / "content"


def load_chapters() -> list[Chapter]:
    """Build the chapter list from chapters.json; PYQ links point at each chapter's source page."""
    data = json.loads((CONTENT_DIR / "chapters.json").read_text())
    base = data["pyq_link_base"]
    return [
        Chapter(
            id=ch["id"],
            name=ch["name"],
            subject=Subject(ch["subject"]),
            unit=ch["unit"],
            priority=Priority(ch["priority"]),
            pyqs=default_pyqs(base + ch["sourceId"]),
        )
        for ch in data["chapters"]
    ]


def _scores(raw: dict) -> TestScores:
    # [correct, incorrect, unattempted]; a missing subject scores zero
    parts = {key: SubjectScore(*raw[key]) for key in ("physics", "chemistry", "maths") if key in raw}
    return TestScores(**parts)


def load_seed_tests() -> list[TestRecord]:
    data = json.loads((CONTENT_DIR / "seed_tests.json").read_text())
    return [
        TestRecord(
            id=t["id"],
            name=t["name"],
            date=t["date"],
            type=TestType(t["type"]),
            scores=_scores(t.get("scores", {})),
            subject=Subject(t["subject"]) if t.get("subject") else None,
            linked_chapters=list(t.get("linkedChapters", [])),
            time_taken=t.get("timeTaken", ""),
            notes=t.get("notes", ""),
        )
        for t in data["tests"]
    ]


def default_state() -> AppState:
    """Fresh state: seeded chapters and tests, nothing else."""
    return AppState(chapters=load_chapters(), tests=load_seed_tests())


def is_seeded(db_path: str) -> bool:
    """Check whether a state document has already been stored."""
    return read_document(db_path) is not None


def seed_all(db_path: str) -> None:
    if is_seeded(db_path):
        return
    write_document(db_path, json.dumps(default_state().to_dict()))
