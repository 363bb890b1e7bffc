"""Import a JSON backup or a daily-log CSV file."""
import csv
import json
import io
import logging
from pathlib import Path
from typing import Union

from jee_tracker.dates import coerce_iso_date
from jee_tracker.models import AppState, DailyLog, new_id
from jee_tracker.normalize import as_int
from jee_tracker.storage import parse_state

logger = logging.getLogger(__name__)


class BackupFormatError(Exception):
    """Raised when an imported file cannot be turned into tracker data."""


def read_backup(text: str) -> AppState:
    """Parse backup JSON text. A document without ``chapters`` is rejected."""
    try:
        doc = json.loads(text)
    except ValueError as e:
        raise BackupFormatError(f"Invalid JSON: {e}") from e
    if not isinstance(doc, dict) or not isinstance(doc.get("chapters"), list):
        raise BackupFormatError("Backup has no chapter list")
    try:
        return parse_state(text, seed_missing=False)
    except ValueError as e:
        raise BackupFormatError(str(e)) from e


def import_backup(path: Union[str, Path]) -> AppState:
    """Load a full-state backup written by ``exporter.export_backup``."""
    try:
        text = Path(path).read_text()
    except (OSError, UnicodeDecodeError) as e:
        raise BackupFormatError(f"Cannot read {path}: {e}") from e
    state = read_backup(text)
    logger.info("Imported backup from %s: %d chapters, %d tests", path, len(state.chapters), len(state.tests))
    return state


def parse_logs_csv(text: str) -> list[DailyLog]:
    """Parse the CSV layout produced by ``exporter.logs_to_csv``.

    The header row and blank lines are skipped, unreadable numbers become 0
    and rows whose date cannot be read are dropped.
    """
    logs = []
    reader = csv.reader(io.StringIO(text))
    for i, row in enumerate(reader):
        if not row or not any(cell.strip() for cell in row):
            continue
        if row[0].strip().lower() == "date":
            continue
        day = coerce_iso_date(row[0].strip())
        if day is None:
            logger.debug("Skipping CSV row %d with unreadable date %r", i + 1, row[0])
            continue
        cells = row + [""] * (6 - len(row))
        logs.append(DailyLog(
            id=new_id(),
            date=day,
            physics_q=max(0, as_int(cells[1], 0)),
            chemistry_q=max(0, as_int(cells[2], 0)),
            math_q=max(0, as_int(cells[3], 0)),
            study_time=max(0, as_int(cells[4], 0)),
            remarks=cells[5],
        ))
    return logs


def import_logs_csv(path: Union[str, Path]) -> list[DailyLog]:
    try:
        text = Path(path).read_text()
    except (OSError, UnicodeDecodeError) as e:
        raise BackupFormatError(f"Cannot read {path}: {e}") from e
    logs = parse_logs_csv(text)
    logger.info("Read %d daily logs from %s", len(logs), path)
    return logs
