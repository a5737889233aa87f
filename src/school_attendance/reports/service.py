from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import today_local, week_start
from ..common.validators import require_date_range
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..students.model import SchoolClass
from ..students.repository import ClassRepository, StudentRepository
from .model import ClassTally, ReportSummary, WeeklyStats


def attendance_percentage(present: int, total: int) -> int:
    """round(present / total * 100) with halves rounded up; 0 when total is 0."""
    if total <= 0:
        return 0
    return (200 * present + total) // (2 * total)


def tally(cls: SchoolClass, records: Iterable[AttendanceRecord]) -> ClassTally:
    present = absent = excused = 0
    for r in records:
        if r.status == AttendanceStatus.PRESENT:
            present += 1
        elif r.status == AttendanceStatus.ABSENT:
            absent += 1
        else:
            excused += 1
    total = present + absent
    return ClassTally(
        class_id=cls.id,
        class_name=cls.name,
        present_count=present,
        absent_count=absent,
        excused_count=excused,
        total=total,
        attendance_percentage=attendance_percentage(present, total),
    )


class AttendanceReportService:
    def __init__(self, attendance: AttendanceRepository, classes: ClassRepository, students: StudentRepository):
        self._attendance = attendance
        self._classes = classes
        self._students = students

    def class_tallies(self, *, start: date, end: date, class_id: Optional[str] = None) -> list[ClassTally]:
        """Per-class tallies for [start, end]; classes without marked days are left out."""
        require_date_range(start, end)

        if class_id is not None:
            cls = self._classes.get_by_id(class_id)
            if not cls:
                raise ValidationError(f"Unknown class: {class_id}")
            classes: Sequence[SchoolClass] = [cls]
        else:
            classes = self._classes.list_all()

        by_class: dict[str, list[AttendanceRecord]] = {c.id: [] for c in classes}
        for r in self._attendance.read_range(start=start, end=end, class_id=class_id):
            bucket = by_class.get(r.class_id)
            if bucket is not None:
                bucket.append(r)

        out = [tally(c, by_class[c.id]) for c in classes]
        out = [t for t in out if t.is_active]
        out.sort(key=lambda t: (t.class_name, t.class_id))
        return out

    @staticmethod
    def summary(tallies: Sequence[ClassTally]) -> ReportSummary:
        count = len(tallies)
        avg = 0
        if count:
            avg = attendance_percentage(sum(t.attendance_percentage for t in tallies), count * 100)
        return ReportSummary(
            class_count=count,
            average_percentage=avg,
            total_present=sum(t.present_count for t in tallies),
            total_absent=sum(t.absent_count for t in tallies),
        )

    def weekly_stats(self, class_id: str, *, today: Optional[date] = None) -> WeeklyStats:
        today = today or today_local()
        cls = self._classes.get_by_id(class_id)
        if not cls:
            raise ValidationError(f"Unknown class: {class_id}")

        start = week_start(today)
        t = tally(cls, self._attendance.read_range(start=start, end=today, class_id=class_id))
        return WeeklyStats(
            class_id=cls.id,
            class_name=cls.name,
            week_start=start,
            total_students=len(self._students.list_active_in_class(class_id)),
            present_count=t.present_count,
            absent_count=t.absent_count,
            excused_count=t.excused_count,
            attendance_percentage=t.attendance_percentage,
        )
