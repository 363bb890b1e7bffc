"""Calendar helpers working on ISO ``YYYY-MM-DD`` strings."""
from datetime import date, datetime, timedelta
from typing import Optional

_LOOSE_FORMATS = ("%Y/%m/%d", "%d/%m/%Y", "%d-%m-%Y")


def today_iso() -> str:
    return date.today().isoformat()


def to_iso(day: date) -> str:
    return day.isoformat()


def parse_date(text: Optional[str]) -> date:
    """Parse an ISO date; an empty value means today."""
    if not text:
        return date.today()
    return date.fromisoformat(text)


def coerce_iso_date(value) -> Optional[str]:
    """Best-effort conversion of a loosely formatted date to ISO, or None."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        pass
    for fmt in _LOOSE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def format_ddmmyy(text: str) -> str:
    return parse_date(text).strftime("%d/%m/%y")


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end`` (negative when end is earlier)."""
    return (end - start).days


def days_ago_iso(days: int) -> str:
    return (date.today() - timedelta(days=days)).isoformat()


def week_start(day: date) -> date:
    """The Sunday that opens the week containing ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_days(day: date) -> list[str]:
    start = week_start(day)
    return [(start + timedelta(days=i)).isoformat() for i in range(7)]
