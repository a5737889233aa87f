from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class ClassTally:
    """Present/absent counts of one class over a date range.

    ``total`` is present + absent; excused days are kept in their own bucket.
    """

    class_id: str
    class_name: str
    present_count: int
    absent_count: int
    excused_count: int
    total: int
    attendance_percentage: int

    @property
    def is_active(self) -> bool:
        return self.total > 0


@dataclass(frozen=True)
class ReportSummary:
    class_count: int
    average_percentage: int
    total_present: int
    total_absent: int


@dataclass(frozen=True)
class WeeklyStats:
    class_id: str
    class_name: str
    week_start: date
    total_students: int
    present_count: int
    absent_count: int
    excused_count: int
    attendance_percentage: int
