# backend/utils/dates.py
"""Service-date keys shared by the API and the storefront cart.

Every place that groups or compares by service date goes through
``to_date_key`` so "2025-10-14", "2025-10-14T04:00:00Z" and a ``date``
object all land in the same bucket.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

UNSCHEDULED = "unscheduled"

DAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

DateLike = Union[date, datetime, str, None]


def to_date_key(value: DateLike) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    raw = str(value).strip()
    if not raw:
        return None
    if len(raw) == 10:
        return date.fromisoformat(raw).isoformat()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return to_date_key(datetime.fromisoformat(raw))


def parse_date_key(value: DateLike) -> date:
    key = to_date_key(value)
    if key is None:
        raise ValueError("Missing date")
    return date.fromisoformat(key)


def start_of_week(value: DateLike) -> date:
    """Monday of the week containing ``value``."""
    d = parse_date_key(value)
    return d - timedelta(days=d.weekday())


def weekday_index(value: DateLike) -> int:
    """0=Sunday ... 6=Saturday, the numbering menus use for service days."""
    return (parse_date_key(value).weekday() + 1) % 7


def label_for_date_key(key: Optional[str]) -> str:
    if not key or key == UNSCHEDULED:
        return ""
    d = parse_date_key(key)
    return f"{d.strftime('%A')}, {d.strftime('%b')} {d.day}"
