"""Write the full-state JSON backup and the daily-log CSV."""
import json
from pathlib import Path
from typing import Iterable, Union

from jee_tracker.models import AppState, DailyLog

BACKUP_FILENAME = "magma_jee_backup.json"
LOGS_FILENAME = "study_logs.csv"
CSV_HEADER = "Date,Physics,Chemistry,Mathematics,StudyTime,Remarks"


def _target(path: Union[str, Path], default_name: str) -> Path:
    path = Path(path)
    if path.is_dir():
        path = path / default_name
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def export_backup(state: AppState, path: Union[str, Path] = ".") -> Path:
    """Write the whole state as JSON. A directory gets the default file name."""
    target = _target(path, BACKUP_FILENAME)
    target.write_text(json.dumps(state.to_dict(), indent=2))
    return target


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def logs_to_csv(logs: Iterable[DailyLog]) -> str:
    rows = [
        f"{log.date},{log.physics_q},{log.chemistry_q},{log.math_q},{log.study_time},{_quote(log.remarks)}"
        for log in logs
    ]
    return CSV_HEADER + "\n" + "\n".join(rows)


def export_logs_csv(logs: Iterable[DailyLog], path: Union[str, Path] = ".") -> Path:
    target = _target(path, LOGS_FILENAME)
    target.write_text(logs_to_csv(logs))
    return target
