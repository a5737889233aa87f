from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.validators import require_date_range, require_non_empty
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..students.repository import ClassRepository, StudentRepository
from .model import AssignmentDiff, ClassAbsenceGroup, CommissionReport, StudentAbsenceSummary
from .repository import AssignmentRepository

logger = logging.getLogger(__name__)


class TeacherAssignmentService:
    def __init__(self, assignments: AssignmentRepository, classes: ClassRepository):
        self._assignments = assignments
        self._classes = classes

    def list_class_ids(self, teacher_id: str) -> Sequence[str]:
        return list(self._assignments.class_ids_for_teacher(teacher_id))

    def set_assignments(self, teacher_id: str, class_ids: Sequence[str]) -> AssignmentDiff:
        """Replace the teacher's classes with ``class_ids`` (order kept, duplicates dropped)."""
        teacher_id = require_non_empty(teacher_id, "Teacher")
        wanted = list(dict.fromkeys(class_ids))

        known = {c.id for c in self._classes.get_many(wanted)}
        unknown = [cid for cid in wanted if cid not in known]
        if unknown:
            raise ValidationError(f"Unknown class: {', '.join(unknown)}")

        current = list(self._assignments.class_ids_for_teacher(teacher_id))
        self._assignments.replace_for_teacher(teacher_id, wanted)

        diff = AssignmentDiff(
            teacher_id=teacher_id,
            added=[cid for cid in wanted if cid not in current],
            removed=[cid for cid in current if cid not in wanted],
            kept=[cid for cid in wanted if cid in current],
        )
        logger.info(
            "Teacher assignments replaced teacher=%s added=%s removed=%s kept=%s",
            teacher_id,
            len(diff.added),
            len(diff.removed),
            len(diff.kept),
        )
        return diff


class CommissionService:
    def __init__(
        self,
        assignments: AssignmentRepository,
        attendance: AttendanceRepository,
        classes: ClassRepository,
        students: StudentRepository,
    ):
        self._assignments = assignments
        self._attendance = attendance
        self._classes = classes
        self._students = students

    def report(self, teacher_id: str, *, start: Optional[date] = None, end: Optional[date] = None) -> CommissionReport:
        """Absences of every student in the teacher's classes, counted inside [start, end].

        Counts are recomputed for the requested range on every call.
        """
        require_date_range(start, end)

        class_ids = list(dict.fromkeys(self._assignments.class_ids_for_teacher(teacher_id)))
        classes = {c.id: c for c in self._classes.get_many(class_ids)}

        per_class: dict[str, dict[str, list[AttendanceRecord]]] = {}
        for class_id in class_ids:
            if class_id not in classes:
                continue
            absences = self._attendance.read_range(
                start=start,
                end=end,
                class_id=class_id,
                status=AttendanceStatus.ABSENT,
            )
            by_student: dict[str, list[AttendanceRecord]] = {}
            for r in absences:
                if r.status == AttendanceStatus.ABSENT:
                    by_student.setdefault(r.student_id, []).append(r)
            per_class[class_id] = by_student

        student_ids = {sid for by_student in per_class.values() for sid in by_student}
        names = {s.id: s.full_name for s in self._students.get_many(sorted(student_ids))}

        groups: list[ClassAbsenceGroup] = []
        for class_id, by_student in per_class.items():
            rows = []
            for student_id, records in by_student.items():
                dates = [r.attendance_date for r in records]
                rows.append(
                    StudentAbsenceSummary(
                        student_id=student_id,
                        student_name=names.get(student_id, "Unknown"),
                        total_absences=len(records),
                        first_absence_date=min(dates),
                        last_absence_date=max(dates),
                    )
                )
            if not rows:
                continue
            rows.sort(key=lambda s: (s.student_name, s.student_id))
            groups.append(ClassAbsenceGroup(class_id=class_id, class_name=classes[class_id].name, students=rows))

        groups.sort(key=lambda g: (g.class_name, g.class_id))
        return CommissionReport(teacher_id=teacher_id, start=start, end=end, classes=groups)
