from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class ParentAbsenceNotification:
    """An absence declared in advance by a parent (unique per student/date)."""

    id: str
    student_id: str
    class_id: str
    absence_date: date
    reason: str
    created_at: datetime
    notes: Optional[str] = None
    created_by_parent: bool = True
    is_processed: bool = False


@dataclass(frozen=True)
class ParentAccessToken:
    id: str
    student_id: str
    token: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    is_active: bool = True
    last_accessed_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now
