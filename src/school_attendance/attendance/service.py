from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text
from ..core.constants import DEFAULT_MAX_BACKDATE_DAYS
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..notifications.repository import NotificationRepository
from ..students.model import SchoolClass
from ..students.repository import ClassRepository, StudentRepository
from .model import AttendanceDiff, AttendanceMark, AttendanceRecord, SheetRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        classes: ClassRepository,
        notifications: NotificationRepository,
        *,
        max_backdate_days: int = DEFAULT_MAX_BACKDATE_DAYS,
    ):
        self._attendance = attendance
        self._students = students
        self._classes = classes
        self._notifications = notifications
        self._max_backdate_days = int(max_backdate_days)

    def _require_class(self, class_id: str) -> SchoolClass:
        cls = self._classes.get_by_id(class_id)
        if not cls:
            raise ValidationError(f"Unknown class: {class_id}")
        return cls

    def prepare_sheet(self, class_id: str, attendance_date: date) -> list[SheetRow]:
        """Marking sheet for a class day.

        Everyone defaults to present, saved records win, and students whose
        parents notified an absence (with nothing saved yet) start as absent.
        """
        self._require_class(class_id)

        students = self._students.list_active_in_class(class_id)
        existing = {
            r.student_id: r
            for r in self._attendance.read_range(start=attendance_date, end=attendance_date, class_id=class_id)
        }
        notified = {
            n.student_id: n
            for n in self._notifications.list_for_class_date(class_id, attendance_date, processed=False)
        }

        rows: list[SheetRow] = []
        for s in students:
            rec = existing.get(s.id)
            note = notified.get(s.id)
            if rec:
                rows.append(
                    SheetRow(
                        student_id=s.id,
                        student_name=s.full_name,
                        status=rec.status,
                        absence_reason=rec.absence_reason,
                        comments=rec.comments,
                        already_marked=True,
                        pre_notified=note is not None,
                    )
                )
            elif note:
                rows.append(
                    SheetRow(
                        student_id=s.id,
                        student_name=s.full_name,
                        status=AttendanceStatus.ABSENT,
                        absence_reason=note.reason or "Parent notified",
                        comments=note.notes,
                        pre_notified=True,
                    )
                )
            else:
                rows.append(SheetRow(student_id=s.id, student_name=s.full_name, status=AttendanceStatus.PRESENT))
        return rows

    def _check_date(self, attendance_date: date, today: date) -> None:
        if attendance_date > today:
            raise ValidationError("Cannot mark attendance for a future date")
        if attendance_date < today - timedelta(days=self._max_backdate_days):
            raise ValidationError(f"Cannot mark attendance more than {self._max_backdate_days} days back")

    def mark_class(
        self,
        *,
        class_id: str,
        attendance_date: date,
        marks: Sequence[AttendanceMark],
        marked_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceDiff:
        now = now or now_local()
        self._require_class(class_id)
        self._check_date(attendance_date, now.date())

        members = {s.id for s in self._students.list_active_in_class(class_id)}
        seen: set[str] = set()
        for m in marks:
            if m.student_id in seen:
                raise ValidationError(f"Student marked twice: {m.student_id}")
            if m.student_id not in members:
                raise ValidationError(f"Unknown student for this class: {m.student_id}")
            seen.add(m.student_id)

        before = {
            r.student_id: r
            for r in self._attendance.read_range(start=attendance_date, end=attendance_date, class_id=class_id)
        }
        records = [
            AttendanceRecord(
                id=str(uuid.uuid4()),
                student_id=m.student_id,
                class_id=class_id,
                attendance_date=attendance_date,
                status=AttendanceStatus(m.status),
                marked_at=now,
                absence_reason=optional_text(m.absence_reason),
                comments=optional_text(m.comments),
                marked_by=marked_by,
            )
            for m in marks
        ]

        self._attendance.replace_for_class_date(class_id=class_id, attendance_date=attendance_date, records=records)

        processed = 0
        if self._notifications.list_for_class_date(class_id, attendance_date, processed=False):
            processed = self._notifications.mark_processed(class_id, attendance_date)

        diff = AttendanceDiff(class_id=class_id, attendance_date=attendance_date, notifications_processed=processed)
        for r in records:
            old = before.pop(r.student_id, None)
            if old is None:
                diff.added.append(r.student_id)
            elif (old.status, old.absence_reason, old.comments) != (r.status, r.absence_reason, r.comments):
                diff.changed.append(r.student_id)
            else:
                diff.unchanged.append(r.student_id)
        diff.removed.extend(sorted(before))

        logger.info(
            "Attendance saved class=%s date=%s marked=%s added=%s changed=%s removed=%s notifications_processed=%s",
            class_id,
            attendance_date.isoformat(),
            diff.marked_count,
            len(diff.added),
            len(diff.changed),
            len(diff.removed),
            processed,
        )
        return diff
