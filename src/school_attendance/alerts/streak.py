from __future__ import annotations

from typing import Iterable, Sequence

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus


def absence_streak(records: Iterable[AttendanceRecord]) -> list[AttendanceRecord]:
    """Absences of the most recent run, newest first.

    Only marked days exist here: a present day ends the run, an excused day
    is stepped over without counting.
    """
    ordered = sorted(records, key=lambda r: (r.attendance_date, r.marked_at))
    run: list[AttendanceRecord] = []
    for r in reversed(ordered):
        if r.status == AttendanceStatus.PRESENT:
            break
        if r.status == AttendanceStatus.ABSENT:
            run.append(r)
    return run


def weeks_spanned(streak: Sequence[AttendanceRecord]) -> int:
    """Distinct ISO weeks touched by the given absences."""
    return len({tuple(r.attendance_date.isocalendar())[:2] for r in streak})


def consecutive_absences(records: Iterable[AttendanceRecord]) -> int:
    return len(absence_streak(records))


def weeks_absent(records: Iterable[AttendanceRecord]) -> int:
    return weeks_spanned(absence_streak(records))
