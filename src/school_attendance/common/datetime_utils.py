from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (expected YYYY-MM-DD): {value!r}")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if value is None or not str(value).strip():
        return None
    return parse_iso_date(str(value))


def now_local() -> datetime:
    """Current local (naive) time; services take an explicit ``now`` for tests."""
    return datetime.now()


def today_local() -> date:
    return now_local().date()


def week_start(day: date) -> date:
    """Sunday on or before ``day`` (weeks run Sunday to Saturday)."""
    return day - timedelta(days=(day.weekday() + 1) % 7)
