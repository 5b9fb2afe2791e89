"""UTC timestamp helpers shared by the ledger, search and CLI."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Union

from .errors import ValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Union[str, date, datetime], end_of_day: bool = False) -> datetime:
    """Parse an ISO date or datetime into an aware UTC datetime.

    A bare date maps to the start of that day, or to its last microsecond when
    ``end_of_day`` is set so that inclusive ranges cover the whole day.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min, tzinfo=timezone.utc)

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) == 10:
            return parse_timestamp(date.fromisoformat(text), end_of_day=end_of_day)
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value!r}", context={"value": value}) from e


def hours_between(earlier: datetime, later: datetime) -> float:
    return (ensure_utc(later) - ensure_utc(earlier)).total_seconds() / 3600.0


def days_between(earlier: datetime, later: datetime) -> float:
    return hours_between(earlier, later) / 24.0
