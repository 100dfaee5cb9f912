from __future__ import annotations

from datetime import date, datetime, time

from ..core.constants import WEEKDAY_TAGS
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def parse_hhmm(value: str) -> time:
    try:
        return datetime.strptime((value or "").strip()[:5], "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time: {value!r} (expected HH:MM)")


def parse_optional_hhmm(value) -> time | None:
    if value is None or not str(value).strip():
        return None
    return parse_hhmm(str(value))


def format_hhmm(value: time | datetime) -> str:
    return value.strftime("%H:%M")


def weekday_tag(day: date) -> str:
    return WEEKDAY_TAGS[day.weekday()]


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
