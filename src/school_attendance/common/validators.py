from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    return v or None


def require_date_range(start: Optional[date], end: Optional[date]) -> None:
    if start is not None and end is not None and start > end:
        raise ValidationError(f"Invalid date range: {start.isoformat()} is after {end.isoformat()}")


def require_positive(value: int, field_name: str) -> int:
    if int(value) < 1:
        raise ValidationError(f"{field_name} must be at least 1")
    return int(value)
