from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from school_attendance.alerts.model import AlertPolicy, AttendanceAlert
from school_attendance.alerts.service import AlertService
from school_attendance.core.enums import AlertType, AttendanceStatus, PaymentStatus
from school_attendance.core.exceptions import NotFoundError, StoreError, ValidationError
from school_attendance.notifications.model import ParentAbsenceNotification
from school_attendance.notifications.service import ParentPortalService

A = AttendanceStatus.ABSENT
P = AttendanceStatus.PRESENT


@pytest.fixture
def service(alerts, attendance, students, classes, accounts, notifications, emails):
    return AlertService(
        alerts,
        attendance,
        students,
        classes,
        accounts,
        notifications,
        emails,
        policy=AlertPolicy(absence_threshold=3, lookback_days=14),
    )


def _absent_days(attendance, make_record, student_id, class_id, days):
    for d in days:
        attendance.add(make_record(student_id, class_id, d, A))


def test_scan_creates_low_attendance_alert(service, alerts, attendance, make_record, fixed_now, today):
    _absent_days(attendance, make_record, "stu-1", "class-a", [today - timedelta(days=i) for i in range(3)])

    report = service.scan(now=fixed_now)

    assert report.created == 1
    assert report.failed == 0
    [alert] = alerts.for_student("stu-1")
    assert alert.alert_type == AlertType.LOW_ATTENDANCE
    assert alert.consecutive_absences == 3
    assert alert.is_debtor is False
    assert alert.alert_date == today


def test_scan_below_threshold_creates_nothing(service, alerts, attendance, make_record, fixed_now, today):
    _absent_days(attendance, make_record, "stu-1", "class-a", [today, today - timedelta(days=1)])

    report = service.scan(now=fixed_now)

    assert report.created == 0
    assert alerts.for_student("stu-1") == []


def test_scan_ignores_absences_outside_lookback(service, alerts, attendance, make_record, fixed_now, today):
    _absent_days(attendance, make_record, "stu-1", "class-a", [today - timedelta(days=20 + i) for i in range(5)])
    attendance.add(make_record("stu-1", "class-a", today, A))

    service.scan(now=fixed_now)

    assert alerts.for_student("stu-1") == []


def test_scan_is_idempotent(service, alerts, attendance, make_record, fixed_now, today):
    _absent_days(attendance, make_record, "stu-1", "class-a", [today - timedelta(days=i) for i in range(3)])

    first = service.scan(now=fixed_now)
    second = service.scan(now=fixed_now)

    assert first.created == 1
    assert second.created == 0
    assert second.updated == 1
    assert len(alerts.for_student("stu-1")) == 1


def test_rescan_refreshes_the_count(service, alerts, attendance, make_record, fixed_now, today):
    _absent_days(attendance, make_record, "stu-1", "class-a", [today - timedelta(days=i) for i in range(1, 4)])
    service.scan(as_of=today - timedelta(days=1), now=fixed_now)

    attendance.add(make_record("stu-1", "class-a", today, A))
    service.scan(now=fixed_now)

    [alert] = alerts.for_student("stu-1")
    assert alert.consecutive_absences == 4
    assert alert.alert_date == today


def test_overdue_student_gets_debtor_alert(service, alerts, accounts, attendance, make_record, fixed_now, today):
    accounts.set_status("stu-1", PaymentStatus.OVERDUE_30, days_overdue=35)
    _absent_days(attendance, make_record, "stu-1", "class-a", [today - timedelta(days=i) for i in range(3)])

    service.scan(now=fixed_now)

    [alert] = alerts.for_student("stu-1")
    assert alert.alert_type == AlertType.DEBTOR_LOW_ATTENDANCE
    assert alert.is_debtor is True


def test_current_account_is_not_a_debtor(service, alerts, accounts, attendance, make_record, fixed_now, today):
    accounts.set_status("stu-1", PaymentStatus.CURRENT)
    _absent_days(attendance, make_record, "stu-1", "class-a", [today - timedelta(days=i) for i in range(3)])

    service.scan(now=fixed_now)

    [alert] = alerts.for_student("stu-1")
    assert alert.alert_type == AlertType.LOW_ATTENDANCE


def test_inactive_and_unenrolled_students_are_skipped(service, alerts, attendance, make_record, fixed_now, today):
    _absent_days(attendance, make_record, "stu-5", "class-a", [today - timedelta(days=i) for i in range(3)])

    report = service.scan(now=fixed_now)

    assert report.scanned == 3
    assert alerts.for_student("stu-5") == []


class _FlakyAccounts:
    def __init__(self, inner, failing_student):
        self._inner = inner
        self._failing = failing_student

    def get_for_student(self, student_id):
        if student_id == self._failing:
            raise RuntimeError("account lookup failed")
        return self._inner.get_for_student(student_id)


def test_one_failing_student_does_not_stop_the_scan(
    alerts, attendance, students, classes, accounts, notifications, emails, make_record, fixed_now, today
):
    service = AlertService(
        alerts, attendance, students, classes, _FlakyAccounts(accounts, "stu-1"), notifications, emails
    )
    days = [today - timedelta(days=i) for i in range(3)]
    _absent_days(attendance, make_record, "stu-1", "class-a", days)
    _absent_days(attendance, make_record, "stu-2", "class-a", days)

    report = service.scan(now=fixed_now)

    assert report.failed == 1
    assert report.failures[0].student_id == "stu-1"
    assert "account lookup failed" in report.failures[0].error
    assert report.created == 1
    assert report.success_count == report.scanned - 1
    assert len(alerts.for_student("stu-2")) == 1


def _pre_notified_alert(student_id, created_at):
    return AttendanceAlert(
        id=f"pre-{student_id}",
        student_id=student_id,
        alert_type=AlertType.PRE_NOTIFIED_ABSENCE,
        alert_date=created_at.date(),
        consecutive_absences=0,
        weeks_absent=0,
        is_debtor=False,
        created_at=created_at,
        notes="Parent notified: dentist.",
    )


def _notification(student_id, day, created_at, **kwargs):
    return ParentAbsenceNotification(
        id=f"n-{student_id}-{day.isoformat()}",
        student_id=student_id,
        class_id="class-a",
        absence_date=day,
        reason="dentist",
        created_at=created_at,
        **kwargs,
    )


def test_scan_resolves_stale_pre_notified_alert(service, alerts, fixed_now):
    alerts.insert(_pre_notified_alert("stu-1", fixed_now - timedelta(days=3)))

    report = service.scan(now=fixed_now)

    assert report.reconciled == 1
    assert alerts.get_by_id("pre-stu-1").is_resolved is True


def test_scan_keeps_pre_notified_alert_with_pending_notification(service, alerts, notifications, fixed_now, today):
    alerts.insert(_pre_notified_alert("stu-1", fixed_now))
    notifications.create(_notification("stu-1", today + timedelta(days=2), fixed_now))

    report = service.scan(now=fixed_now)

    assert report.reconciled == 0
    assert alerts.get_by_id("pre-stu-1").is_resolved is False


def test_record_pre_notification_keeps_one_alert(service, alerts, fixed_now, today):
    first = _notification("stu-1", today + timedelta(days=1), fixed_now)
    second = _notification("stu-1", today + timedelta(days=5), fixed_now, notes="bring a note")

    service.record_pre_notification(first, today=today, now=fixed_now)
    refreshed = service.record_pre_notification(second, today=today, now=fixed_now)

    pre = [a for a in alerts.for_student("stu-1") if a.alert_type == AlertType.PRE_NOTIFIED_ABSENCE]
    assert len(pre) == 1
    assert refreshed.notes == "Parent notified: dentist. bring a note"


def test_withdraw_keeps_alert_while_notifications_pending(service, alerts, notifications, fixed_now, today):
    n = _notification("stu-1", today + timedelta(days=1), fixed_now)
    notifications.create(n)
    service.record_pre_notification(n, today=today, now=fixed_now)

    assert service.withdraw_pre_notification("stu-1", today=today) is False
    assert alerts.get_unresolved("stu-1", AlertType.PRE_NOTIFIED_ABSENCE) is not None

    notifications.delete(n.id)
    assert service.withdraw_pre_notification("stu-1", today=today) is True
    assert alerts.get_unresolved("stu-1", AlertType.PRE_NOTIFIED_ABSENCE) is None


def test_list_alerts_filters(service, alerts, attendance, make_record, fixed_now, today):
    _absent_days(attendance, make_record, "stu-1", "class-a", [today - timedelta(days=i) for i in range(3)])
    alerts.insert(_pre_notified_alert("stu-2", fixed_now))
    service.scan(now=fixed_now)

    low = service.list_alerts(alert_type=AlertType.LOW_ATTENDANCE)
    assert [a.student_id for a in low] == ["stu-1"]
    resolved = service.list_alerts(resolved=True)
    assert [a.student_id for a in resolved] == ["stu-2"]


def test_resolve_alert(service, alerts, fixed_now):
    alerts.insert(_pre_notified_alert("stu-1", fixed_now))

    resolved = service.resolve("pre-stu-1", resolved_by="admin-1", notes="called parent", now=fixed_now)

    assert resolved.is_resolved is True
    assert resolved.resolved_by == "admin-1"
    assert resolved.resolved_at == fixed_now
    again = service.resolve("pre-stu-1", resolved_by="admin-2", now=fixed_now + timedelta(hours=1))
    assert again.resolved_by == "admin-1"


def test_resolve_unknown_alert(service):
    with pytest.raises(NotFoundError):
        service.resolve("missing")


def test_notify_parent_records_email(service, alerts, attendance, emails, make_record, fixed_now, today):
    _absent_days(attendance, make_record, "stu-1", "class-a", [today - timedelta(days=i) for i in range(3)])
    service.scan(now=fixed_now)
    [alert] = alerts.for_student("stu-1")

    email = service.notify_parent(alert.id, sent_by="admin-1", now=fixed_now)

    assert emails.sent == [email]
    assert email.recipient_email == "pat@example.com"
    assert email.subject == "Low Attendance Alert - Sam Adams"
    assert "absent from Grade 3A for 3 sessions in the last 14 days" in email.body


def test_notify_parent_without_email(service, alerts, fixed_now):
    alerts.insert(_pre_notified_alert("stu-2", fixed_now))

    with pytest.raises(ValidationError):
        service.notify_parent("pre-stu-2", now=fixed_now)


def test_policy_rejects_non_positive_values():
    with pytest.raises(ValidationError):
        AlertPolicy(absence_threshold=0)
    with pytest.raises(ValidationError):
        AlertPolicy(lookback_days=-1)


def test_scan_as_of_a_past_date(service, alerts, attendance, make_record, fixed_now):
    as_of = date(2024, 1, 3)
    _absent_days(attendance, make_record, "stu-3", "class-b", [as_of - timedelta(days=i) for i in range(4)])
    attendance.add(make_record("stu-3", "class-b", date(2024, 1, 4), P))

    service.scan(as_of=as_of, now=datetime(2024, 1, 10, 7, 0))

    [alert] = alerts.for_student("stu-3")
    assert alert.consecutive_absences == 4
    assert alert.alert_date == as_of


def test_scan_restores_missing_pre_notified_alert(service, alerts, notifications, fixed_now, today):
    notifications.create(_notification("stu-1", today + timedelta(days=1), fixed_now))

    report = service.scan(now=fixed_now)

    assert report.reconciled == 1
    alert = alerts.get_unresolved("stu-1", AlertType.PRE_NOTIFIED_ABSENCE)
    assert alert is not None
    assert alert.notes == "Parent notified: dentist."


class _FailingInsertAlerts:
    def __init__(self, inner):
        self._inner = inner
        self.fail = True

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def insert(self, alert):
        if self.fail:
            raise StoreError("alert write failed")
        self._inner.insert(alert)


def test_scan_repairs_notification_whose_alert_write_failed(
    alerts, attendance, students, classes, accounts, notifications, emails, tokens, fixed_now, today
):
    flaky = _FailingInsertAlerts(alerts)
    service = AlertService(flaky, attendance, students, classes, accounts, notifications, emails)
    portal = ParentPortalService(tokens, notifications, students, service)
    token = portal.issue_token("stu-1").token

    with pytest.raises(StoreError):
        portal.notify_absence(
            token, class_id="class-a", absence_date=today + timedelta(days=1), reason="Trip", now=fixed_now
        )
    assert len(notifications.list_for_student("stu-1", processed=False)) == 1
    assert alerts.get_unresolved("stu-1", AlertType.PRE_NOTIFIED_ABSENCE) is None

    flaky.fail = False
    service.scan(now=fixed_now)

    assert alerts.get_unresolved("stu-1", AlertType.PRE_NOTIFIED_ABSENCE) is not None
