from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

import pytest

from school_attendance.accounts.model import PaymentRecord, StudentAccount
from school_attendance.alerts.model import AttendanceAlert
from school_attendance.attendance.model import AttendanceRecord
from school_attendance.core.enums import AttendanceStatus, PaymentStatus
from school_attendance.core.exceptions import ConflictError
from school_attendance.students.model import SchoolClass, Student


class InMemoryStudents:
    def __init__(self, students):
        self._by_id = {s.id: s for s in students}

    def add(self, student: Student) -> None:
        self._by_id[student.id] = student

    def get_by_id(self, student_id):
        return self._by_id.get(student_id)

    def get_many(self, student_ids):
        return [self._by_id[i] for i in student_ids if i in self._by_id]

    def list_active_enrolled(self):
        items = [s for s in self._by_id.values() if s.is_active and s.class_id]
        return sorted(items, key=lambda s: (s.last_name, s.first_name))

    def list_active_in_class(self, class_id):
        return [s for s in self.list_active_enrolled() if s.class_id == class_id]


class InMemoryClasses:
    def __init__(self, classes):
        self._by_id = {c.id: c for c in classes}

    def get_by_id(self, class_id):
        return self._by_id.get(class_id)

    def get_many(self, class_ids):
        return [self._by_id[i] for i in class_ids if i in self._by_id]

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda c: c.name)


class InMemoryAttendance:
    def __init__(self):
        self.records: list[AttendanceRecord] = []
        self.replace_calls = 0

    def add(self, record: AttendanceRecord) -> None:
        self.records.append(record)

    def read_range(self, *, start=None, end=None, class_id=None, student_id=None, status=None):
        out = [
            r
            for r in self.records
            if (start is None or r.attendance_date >= start)
            and (end is None or r.attendance_date <= end)
            and (class_id is None or r.class_id == class_id)
            and (student_id is None or r.student_id == student_id)
            and (status is None or r.status == status)
        ]
        return sorted(out, key=lambda r: (r.attendance_date, r.marked_at))

    def replace_for_class_date(self, *, class_id, attendance_date, records):
        self.replace_calls += 1
        kept = [r for r in self.records if not (r.class_id == class_id and r.attendance_date == attendance_date)]
        self.records = kept + list(records)


class InMemoryNotifications:
    def __init__(self):
        self.items = {}

    def get_by_id(self, notification_id):
        return self.items.get(notification_id)

    def find_for_student_date(self, student_id, absence_date):
        for n in self.items.values():
            if n.student_id == student_id and n.absence_date == absence_date:
                return n
        return None

    def create(self, notification):
        if self.find_for_student_date(notification.student_id, notification.absence_date):
            raise ConflictError("duplicate")
        self.items[notification.id] = notification

    def delete(self, notification_id):
        return self.items.pop(notification_id, None) is not None

    def list_for_class_date(self, class_id, absence_date, *, processed=False):
        return [
            n
            for n in self.items.values()
            if n.class_id == class_id
            and n.absence_date == absence_date
            and (processed is None or n.is_processed == processed)
        ]

    def mark_processed(self, class_id, absence_date):
        count = 0
        for n in self.list_for_class_date(class_id, absence_date, processed=False):
            self.items[n.id] = replace(n, is_processed=True)
            count += 1
        return count

    def list_for_student(self, student_id, *, from_date=None, processed=None):
        out = [
            n
            for n in self.items.values()
            if n.student_id == student_id
            and (from_date is None or n.absence_date >= from_date)
            and (processed is None or n.is_processed == processed)
        ]
        return sorted(out, key=lambda n: (n.absence_date, n.created_at))


class InMemoryTokens:
    def __init__(self):
        self.items = {}
        self.touched = []

    def get_by_token(self, token):
        return self.items.get(token)

    def get_active_for_student(self, student_id):
        for t in self.items.values():
            if t.student_id == student_id and t.is_active:
                return t
        return None

    def create(self, token):
        self.items[token.token] = token

    def deactivate_for_student(self, student_id):
        count = 0
        for key, t in list(self.items.items()):
            if t.student_id == student_id and t.is_active:
                self.items[key] = replace(t, is_active=False)
                count += 1
        return count

    def touch(self, token, accessed_at):
        self.touched.append((token, accessed_at))


class InMemoryAlerts:
    def __init__(self):
        self.items: dict[str, AttendanceAlert] = {}

    def get_by_id(self, alert_id):
        return self.items.get(alert_id)

    def get_unresolved(self, student_id, alert_type):
        for a in self.items.values():
            if a.student_id == student_id and a.alert_type == alert_type and not a.is_resolved:
                return a
        return None

    def insert(self, alert):
        self.items[alert.id] = alert

    def update_streak(self, alert_id, *, alert_date, consecutive_absences, weeks_absent):
        a = self.items.get(alert_id)
        if not a or a.is_resolved:
            return False
        self.items[alert_id] = replace(
            a, alert_date=alert_date, consecutive_absences=consecutive_absences, weeks_absent=weeks_absent
        )
        return True

    def update_notes(self, alert_id, *, alert_date, notes):
        a = self.items.get(alert_id)
        if not a or a.is_resolved:
            return False
        self.items[alert_id] = replace(a, alert_date=alert_date, notes=notes)
        return True

    def resolve(self, alert_id, *, resolved_at, resolved_by=None, notes=None):
        a = self.items.get(alert_id)
        if not a or a.is_resolved:
            return False
        self.items[alert_id] = replace(
            a, is_resolved=True, resolved_at=resolved_at, resolved_by=resolved_by, notes=notes or a.notes
        )
        return True

    def delete_unresolved(self, student_id, alert_type):
        ids = [
            a.id
            for a in self.items.values()
            if a.student_id == student_id and a.alert_type == alert_type and not a.is_resolved
        ]
        for i in ids:
            del self.items[i]
        return len(ids)

    def list_filtered(self, *, resolved=None, alert_type=None):
        out = [
            a
            for a in self.items.values()
            if (resolved is None or a.is_resolved == resolved) and (alert_type is None or a.alert_type == alert_type)
        ]
        return sorted(out, key=lambda a: (a.alert_date, a.created_at), reverse=True)

    def for_student(self, student_id):
        return [a for a in self.items.values() if a.student_id == student_id]


class InMemoryEmails:
    def __init__(self):
        self.sent = []

    def record(self, email):
        self.sent.append(email)


class InMemoryAccounts:
    def __init__(self):
        self.by_student: dict[str, StudentAccount] = {}
        self.payments: list[PaymentRecord] = []

    def set_status(self, student_id, status: PaymentStatus, *, balance="100.00", days_overdue=0):
        self.by_student[student_id] = StudentAccount(
            id=f"acct-{student_id}",
            student_id=student_id,
            current_balance=Decimal(balance),
            days_overdue=days_overdue,
            payment_status=status,
        )

    def get_for_student(self, student_id):
        return self.by_student.get(student_id)

    def record_payment(self, *, payment):
        self.payments.append(payment)
        acct = self.by_student[payment.student_id]
        new_balance = max(Decimal("0"), acct.current_balance - payment.amount)
        self.by_student[payment.student_id] = replace(
            acct,
            current_balance=new_balance,
            last_payment_date=payment.payment_date,
            last_payment_amount=payment.amount,
        )
        return new_balance

    def list_overdue(self):
        items = [a for a in self.by_student.values() if a.payment_status != PaymentStatus.CURRENT]
        return sorted(items, key=lambda a: a.days_overdue, reverse=True)

    def update_overdue(self, *, account_id, days_overdue, payment_status):
        for sid, acct in self.by_student.items():
            if acct.id == account_id:
                self.by_student[sid] = replace(acct, days_overdue=days_overdue, payment_status=payment_status)
                return True
        return False


class InMemoryAssignments:
    def __init__(self, assignments: Optional[dict] = None):
        self.by_teacher = {k: list(v) for k, v in (assignments or {}).items()}

    def class_ids_for_teacher(self, teacher_id):
        return list(self.by_teacher.get(teacher_id, []))

    def replace_for_teacher(self, teacher_id, class_ids):
        self.by_teacher[teacher_id] = list(class_ids)


CLASS_A = SchoolClass(id="class-a", school_id="school-1", name="Grade 3A", grade="3")
CLASS_B = SchoolClass(id="class-b", school_id="school-1", name="Grade 4B", grade="4")


def _student(sid, first, last, class_id, **kwargs) -> Student:
    return Student(id=sid, school_id="school-1", class_id=class_id, first_name=first, last_name=last, grade="3", **kwargs)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 10, 9, 0, 0)


@pytest.fixture
def today(fixed_now) -> date:
    return fixed_now.date()


@pytest.fixture
def classes():
    return InMemoryClasses([CLASS_A, CLASS_B])


@pytest.fixture
def students():
    return InMemoryStudents(
        [
            _student("stu-1", "Sam", "Adams", CLASS_A.id, parent_name="Pat Adams", parent_email="pat@example.com"),
            _student("stu-2", "Bea", "Brown", CLASS_A.id),
            _student("stu-3", "Cal", "Cole", CLASS_B.id),
            _student("stu-4", "Dee", "Dunn", None),
            _student("stu-5", "Eli", "Evans", CLASS_A.id, is_active=False),
        ]
    )


@pytest.fixture
def attendance():
    return InMemoryAttendance()


@pytest.fixture
def notifications():
    return InMemoryNotifications()


@pytest.fixture
def tokens():
    return InMemoryTokens()


@pytest.fixture
def alerts():
    return InMemoryAlerts()


@pytest.fixture
def emails():
    return InMemoryEmails()


@pytest.fixture
def accounts():
    return InMemoryAccounts()


@pytest.fixture
def make_record():
    """Factory for attendance records: make_record(student_id, class_id, day, status)."""

    def _make(student_id: str, class_id: str, day: date, status: AttendanceStatus, **kwargs) -> AttendanceRecord:
        return AttendanceRecord(
            id=str(uuid.uuid4()),
            student_id=student_id,
            class_id=class_id,
            attendance_date=day,
            status=status,
            marked_at=datetime.combine(day, time(8, 30)),
            **kwargs,
        )

    return _make


@pytest.fixture
def assignments():
    return InMemoryAssignments({"teacher-1": ["class-a", "class-b"]})
