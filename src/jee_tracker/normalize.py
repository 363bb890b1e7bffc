"""Normalization of loosely typed values coming from the assistant.

Nothing here raises: unusable input falls back to a documented default.
"""
import math
from typing import Optional

from jee_tracker.models import Priority, Subject, TestType

_TRUE_WORDS = {"true", "yes", "y", "1", "done", "completed", "on"}
_FALSE_WORDS = {"false", "no", "n", "0", "pending", "off", ""}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def as_text(value, default: Optional[str] = None) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return default


def as_int(value, default: Optional[int] = None) -> Optional[int]:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if isinstance(value, float):
        if not math.isfinite(value):
            return default
        return round_half_up(value)
    return default


def as_bool(value, default: Optional[bool] = None) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return default


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def normalize_priority(value) -> Priority:
    """'a', 'Priority B', ' c ' -> enum; anything unrecognised -> C."""
    text = (as_text(value) or "").upper().replace("PRIORITY", "").strip()
    try:
        return Priority(text)
    except ValueError:
        return Priority.C


def normalize_subject(value) -> Subject:
    text = (as_text(value) or "").lower()
    if "physics" in text:
        return Subject.PHYSICS
    if "chemistry" in text:
        return Subject.CHEMISTRY
    if "math" in text:
        return Subject.MATHEMATICS
    return Subject.PHYSICS


def normalize_test_type(value) -> TestType:
    text = (as_text(value) or "").strip().lower()
    for test_type in TestType:
        if test_type.value.lower() == text:
            return test_type
    return TestType.FULL_SYLLABUS
