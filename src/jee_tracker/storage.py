"""Load and save the application state document."""
import json
import logging
from typing import Optional

from jee_tracker.db import STATE_KEY, init_db, read_document, write_document
from jee_tracker.models import AppState, TestType, Theme, new_id
from jee_tracker.seed import default_state, load_chapters, load_seed_tests

logger = logging.getLogger(__name__)

LEGACY_NOTE = "Migrated from old format. Original score: {score}"

_ARRAY_KEYS = ("chapters", "tests", "logs", "revisionTiles", "plannerTasks")


def _migrate_test(test: dict) -> dict:
    """Map a legacy ``{"score": "..."}`` record onto the detailed score layout."""
    if not isinstance(test.get("score"), str):
        return test
    return {
        "id": test.get("id") or new_id(),
        "name": test.get("name") or "",
        "date": test.get("date") or "",
        "type": TestType.FULL_SYLLABUS.value,
        "notes": LEGACY_NOTE.format(score=test["score"]),
        "scores": {},
    }


def migrate_document(doc: dict, seed_missing: bool = True) -> dict:
    """Bring an older or partial state document up to the current layout.

    Absent ``chapters`` and ``tests`` fall back to the seeded defaults when
    ``seed_missing`` is set (loading), and to empty lists otherwise (import).
    The input mapping is not modified.
    """
    doc = dict(doc)
    for key in _ARRAY_KEYS:
        if not isinstance(doc.get(key), list):
            doc[key] = None
    if doc["chapters"] is None:
        doc["chapters"] = [c.to_dict() for c in load_chapters()] if seed_missing else []
    if doc["tests"] is None:
        doc["tests"] = [t.to_dict() for t in load_seed_tests()] if seed_missing else []
    for key in ("logs", "revisionTiles", "plannerTasks"):
        if doc[key] is None:
            doc[key] = []

    doc["logs"] = [{**log, "id": log.get("id") or new_id()} for log in doc["logs"]]
    doc["tests"] = [_migrate_test(t) for t in doc["tests"]]
    if not doc.get("theme"):
        doc["theme"] = Theme.DARK.value
    return doc


def parse_state(text: str, seed_missing: bool = True) -> AppState:
    """Decode a JSON state document. Raises ValueError on anything unusable."""
    doc = json.loads(text)
    if not isinstance(doc, dict):
        raise ValueError("state document is not a JSON object")
    try:
        return AppState.from_dict(migrate_document(doc, seed_missing=seed_missing))
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"malformed state document: {e}") from e


def load_state(db_path: str, key: str = STATE_KEY) -> AppState:
    """Return the stored state, or the seeded defaults when none is usable."""
    init_db(db_path)
    text: Optional[str] = read_document(db_path, key)
    if text is None:
        return default_state()
    try:
        return parse_state(text)
    except ValueError as e:
        logger.warning("Failed to load state, starting from defaults: %s", e)
        return default_state()


def save_state(db_path: str, state: AppState, key: str = STATE_KEY) -> None:
    init_db(db_path)
    write_document(db_path, json.dumps(state.to_dict()), key)
