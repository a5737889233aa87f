from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One student's status for one class day (unique per student/class/date)."""

    id: str
    student_id: str
    class_id: str
    attendance_date: date
    status: AttendanceStatus
    marked_at: datetime
    absence_reason: Optional[str] = None
    comments: Optional[str] = None
    marked_by: Optional[str] = None


@dataclass(frozen=True)
class AttendanceMark:
    """Input for marking a single student."""

    student_id: str
    status: AttendanceStatus
    absence_reason: Optional[str] = None
    comments: Optional[str] = None


@dataclass(frozen=True)
class SheetRow:
    """Read-model for the marking sheet of a class day."""

    student_id: str
    student_name: str
    status: AttendanceStatus
    absence_reason: Optional[str] = None
    comments: Optional[str] = None
    already_marked: bool = False
    pre_notified: bool = False


@dataclass(frozen=True)
class AttendanceDiff:
    """Student ids grouped by how the replace changed them."""

    class_id: str
    attendance_date: date
    added: list[str] = field(default_factory=list)
    changed: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    notifications_processed: int = 0

    @property
    def marked_count(self) -> int:
        return len(self.added) + len(self.changed) + len(self.unchanged)
