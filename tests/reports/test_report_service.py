from __future__ import annotations

from datetime import date, timedelta

import pytest

from school_attendance.core.enums import AttendanceStatus
from school_attendance.core.exceptions import ValidationError
from school_attendance.reports.model import ClassTally
from school_attendance.reports.service import AttendanceReportService, attendance_percentage

A = AttendanceStatus.ABSENT
P = AttendanceStatus.PRESENT
E = AttendanceStatus.EXCUSED

START = date(2024, 1, 1)
END = date(2024, 1, 31)


@pytest.fixture
def service(attendance, classes, students):
    return AttendanceReportService(attendance, classes, students)


@pytest.mark.parametrize(
    "present,total,expected",
    [(0, 0, 0), (0, 4, 0), (4, 4, 100), (1, 3, 33), (2, 3, 67), (1, 8, 13), (1, 200, 1)],
)
def test_attendance_percentage(present, total, expected):
    assert attendance_percentage(present, total) == expected


def test_class_tallies(service, attendance, make_record):
    for status in (P, P, A, E):
        attendance.add(make_record("stu-1", "class-a", date(2024, 1, 8), status))

    [t] = service.class_tallies(start=START, end=END)

    assert (t.present_count, t.absent_count, t.excused_count) == (2, 1, 1)
    assert t.total == t.present_count + t.absent_count == 3
    assert t.attendance_percentage == 67


def test_classes_without_marked_days_are_left_out(service, attendance, make_record):
    attendance.add(make_record("stu-1", "class-a", date(2024, 1, 8), P))
    attendance.add(make_record("stu-3", "class-b", date(2024, 1, 8), E))

    tallies = service.class_tallies(start=START, end=END)

    assert [t.class_id for t in tallies] == ["class-a"]


def test_range_is_inclusive(service, attendance, make_record):
    attendance.add(make_record("stu-1", "class-a", START, P))
    attendance.add(make_record("stu-1", "class-a", END, A))
    attendance.add(make_record("stu-1", "class-a", END + timedelta(days=1), A))

    [t] = service.class_tallies(start=START, end=END)

    assert t.total == 2


def test_single_class_filter(service, attendance, make_record):
    attendance.add(make_record("stu-1", "class-a", date(2024, 1, 8), P))
    attendance.add(make_record("stu-3", "class-b", date(2024, 1, 8), A))

    [t] = service.class_tallies(start=START, end=END, class_id="class-b")

    assert t.class_name == "Grade 4B"
    assert t.attendance_percentage == 0


def test_unknown_class_filter(service):
    with pytest.raises(ValidationError):
        service.class_tallies(start=START, end=END, class_id="nope")


def test_start_after_end(service):
    with pytest.raises(ValidationError):
        service.class_tallies(start=END, end=START)


def test_summary():
    tallies = [
        ClassTally("a", "A", 3, 1, 0, 4, 75),
        ClassTally("b", "B", 1, 1, 2, 2, 50),
    ]

    summary = AttendanceReportService.summary(tallies)

    assert summary.class_count == 2
    assert summary.average_percentage == 63
    assert summary.total_present == 4
    assert summary.total_absent == 2


def test_summary_of_nothing():
    assert AttendanceReportService.summary([]).average_percentage == 0


def test_weekly_stats_start_on_sunday(service, attendance, make_record):
    wednesday = date(2024, 1, 10)
    attendance.add(make_record("stu-1", "class-a", date(2024, 1, 6), A))  # previous Saturday
    attendance.add(make_record("stu-1", "class-a", date(2024, 1, 8), P))
    attendance.add(make_record("stu-2", "class-a", date(2024, 1, 9), A))

    stats = service.weekly_stats("class-a", today=wednesday)

    assert stats.week_start == date(2024, 1, 7)
    assert stats.total_students == 2
    assert (stats.present_count, stats.absent_count) == (1, 1)
    assert stats.attendance_percentage == 50
