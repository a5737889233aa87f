from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def read_range(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        class_id: Optional[str] = None,
        student_id: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records ordered by date, then marking time. Missing bounds are open."""

        raise NotImplementedError

    def replace_for_class_date(
        self,
        *,
        class_id: str,
        attendance_date: date,
        records: Sequence[AttendanceRecord],
    ) -> None:
        """Swap the whole record set of one class day in a single transaction."""

        raise NotImplementedError
