"""Score arithmetic for JEE marking (+4 correct, -1 incorrect, 0 unattempted)."""
from dataclasses import dataclass
from typing import Optional, Sequence

from jee_tracker.models import SubjectScore, TestScores
from jee_tracker.normalize import round_half_up

MARKS_CORRECT = 4
MARKS_INCORRECT = -1


@dataclass(frozen=True)
class SubjectStats:
    marks: int
    accuracy: int


@dataclass(frozen=True)
class OverallStats:
    total_marks: int
    overall_accuracy: int
    total_correct: int
    total_incorrect: int
    total_unattempted: int


def marks_for(correct: int, incorrect: int) -> int:
    return correct * MARKS_CORRECT + incorrect * MARKS_INCORRECT


def accuracy_for(correct: int, incorrect: int) -> int:
    attempted = correct + incorrect
    if attempted <= 0:
        return 0
    return round_half_up(correct / attempted * 100)


def subject_stats(score: Optional[SubjectScore]) -> SubjectStats:
    if score is None:
        return SubjectStats(marks=0, accuracy=0)
    return SubjectStats(
        marks=marks_for(score.correct, score.incorrect),
        accuracy=accuracy_for(score.correct, score.incorrect),
    )


def overall_stats(scores: Optional[TestScores]) -> OverallStats:
    if scores is None:
        return OverallStats(0, 0, 0, 0, 0)
    parts = (scores.physics, scores.chemistry, scores.maths)
    correct = sum(p.correct for p in parts)
    incorrect = sum(p.incorrect for p in parts)
    unattempted = sum(p.unattempted for p in parts)
    return OverallStats(
        total_marks=marks_for(correct, incorrect),
        overall_accuracy=accuracy_for(correct, incorrect),
        total_correct=correct,
        total_incorrect=incorrect,
        total_unattempted=unattempted,
    )


def moving_average(values: Sequence[float], window: int = 3) -> list:
    """Centred moving average with truncated edge windows.

    Point ``i`` averages ``values[i - window // 2 : i + ceil(window / 2)]``
    clipped to the series. A window below 2, or a series shorter than the
    window, comes back unchanged.
    """
    n = len(values)
    if window < 2 or n < window:
        return list(values)
    back = window // 2
    ahead = window - back
    smoothed = []
    for i in range(n):
        chunk = values[max(0, i - back):min(n, i + ahead)]
        smoothed.append(round_half_up(sum(chunk) / len(chunk)))
    return smoothed


def smooth_rows(rows: list[dict], keys: Sequence[str], window: int = 3) -> list[dict]:
    """Apply ``moving_average`` to the given keys of a list of chart rows."""
    if window < 2 or len(rows) < window:
        return [dict(r) for r in rows]
    smoothed = [dict(r) for r in rows]
    for key in keys:
        series = moving_average([r.get(key) or 0 for r in rows], window)
        for row, value in zip(smoothed, series):
            row[key] = value
    return smoothed
