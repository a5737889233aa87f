from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class AssignmentDiff:
    teacher_id: str
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StudentAbsenceSummary:
    student_id: str
    student_name: str
    total_absences: int
    first_absence_date: date
    last_absence_date: date


@dataclass(frozen=True)
class ClassAbsenceGroup:
    class_id: str
    class_name: str
    students: list[StudentAbsenceSummary] = field(default_factory=list)

    @property
    def total_absences(self) -> int:
        return sum(s.total_absences for s in self.students)


@dataclass(frozen=True)
class CommissionReport:
    """Absences per student, grouped by the teacher's classes."""

    teacher_id: str
    start: Optional[date]
    end: Optional[date]
    classes: list[ClassAbsenceGroup] = field(default_factory=list)

    @property
    def total_absences(self) -> int:
        return sum(c.total_absences for c in self.classes)
