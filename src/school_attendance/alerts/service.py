from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..accounts.repository import AccountRepository
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..core.constants import PRE_NOTIFIED_NOTE_PREFIX
from ..core.enums import AlertType
from ..core.exceptions import NotFoundError, ValidationError
from ..notifications.model import ParentAbsenceNotification
from ..notifications.repository import NotificationRepository
from ..students.model import Student
from ..students.repository import ClassRepository, StudentRepository
from .model import AlertPolicy, AttendanceAlert, EmailNotification, ScanFailure, ScanReport
from .repository import AlertRepository, EmailNotificationRepository
from .streak import absence_streak, weeks_spanned

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StudentOutcome:
    action: Optional[str] = None
    reconciled: bool = False


def pre_notified_note(notification: ParentAbsenceNotification) -> str:
    return f"{PRE_NOTIFIED_NOTE_PREFIX}: {notification.reason}. {notification.notes or ''}".strip()


class AlertService:
    """Derives alerts from attendance, payment and parent notification records."""

    def __init__(
        self,
        alerts: AlertRepository,
        attendance: AttendanceRepository,
        students: StudentRepository,
        classes: ClassRepository,
        accounts: AccountRepository,
        notifications: NotificationRepository,
        emails: EmailNotificationRepository,
        *,
        policy: Optional[AlertPolicy] = None,
    ):
        self._alerts = alerts
        self._attendance = attendance
        self._students = students
        self._classes = classes
        self._accounts = accounts
        self._notifications = notifications
        self._emails = emails
        self._policy = policy or AlertPolicy()

    @property
    def policy(self) -> AlertPolicy:
        return self._policy

    # -- detection -----------------------------------------------------------

    def scan(self, *, as_of: Optional[date] = None, now: Optional[datetime] = None) -> ScanReport:
        """Run detection for every active enrolled student.

        Safe to re-run: an open alert of the same type is refreshed instead of
        duplicated. A failure for one student is recorded and the run goes on.
        """
        now = now or now_local()
        as_of = as_of or now.date()
        report = ScanReport(as_of=as_of)

        for student in self._students.list_active_enrolled():
            report.scanned += 1
            try:
                outcome = self._scan_student(student, as_of=as_of, now=now)
            except Exception as exc:
                logger.exception("Alert scan failed for student=%s", student.id)
                report.failures.append(ScanFailure(student_id=student.id, error=str(exc) or type(exc).__name__))
                continue

            if outcome.action == "created":
                report.created += 1
            elif outcome.action == "updated":
                report.updated += 1
            if outcome.reconciled:
                report.reconciled += 1

        logger.info(
            "Alert scan as_of=%s scanned=%s created=%s updated=%s reconciled=%s failed=%s",
            as_of.isoformat(),
            report.scanned,
            report.created,
            report.updated,
            report.reconciled,
            report.failed,
        )
        return report

    def _scan_student(self, student: Student, *, as_of: date, now: datetime) -> _StudentOutcome:
        start = as_of - timedelta(days=self._policy.lookback_days - 1)
        records = self._attendance.read_range(start=start, end=as_of, student_id=student.id)

        action = None
        streak = absence_streak(records)
        if len(streak) >= self._policy.absence_threshold:
            weeks = weeks_spanned(streak)
            action = self._upsert_streak_alert(student.id, len(streak), weeks, as_of=as_of, now=now)

        reconciled = self._reconcile_pre_notified(student.id, as_of=as_of, now=now)
        return _StudentOutcome(action=action, reconciled=reconciled)

    def _upsert_streak_alert(self, student_id: str, count: int, weeks: int, *, as_of: date, now: datetime) -> str:
        account = self._accounts.get_for_student(student_id)
        is_debtor = bool(account and account.is_debtor)
        alert_type = AlertType.DEBTOR_LOW_ATTENDANCE if is_debtor else AlertType.LOW_ATTENDANCE

        existing = self._alerts.get_unresolved(student_id, alert_type)
        if existing:
            self._alerts.update_streak(existing.id, alert_date=as_of, consecutive_absences=count, weeks_absent=weeks)
            logger.debug("Alert updated student=%s type=%s absences=%s", student_id, alert_type.value, count)
            return "updated"

        self._alerts.insert(
            AttendanceAlert(
                id=str(uuid.uuid4()),
                student_id=student_id,
                alert_type=alert_type,
                alert_date=as_of,
                consecutive_absences=count,
                weeks_absent=weeks,
                is_debtor=is_debtor,
                created_at=now,
            )
        )
        logger.info("Alert created student=%s type=%s absences=%s", student_id, alert_type.value, count)
        return "created"

    def _reconcile_pre_notified(self, student_id: str, *, as_of: date, now: datetime) -> bool:
        alert = self._alerts.get_unresolved(student_id, AlertType.PRE_NOTIFIED_ABSENCE)
        pending = self._notifications.list_for_student(student_id, from_date=as_of, processed=False)
        if pending:
            if alert:
                return False
            # The notification was saved but its alert write failed.
            self.record_pre_notification(pending[0], today=as_of, now=now)
            return True
        if not alert:
            return False
        self._alerts.resolve(alert.id, resolved_at=now)
        logger.info("Pre-notified alert resolved student=%s (no pending notifications)", student_id)
        return True

    # -- parent notifications --------------------------------------------------

    def record_pre_notification(
        self,
        notification: ParentAbsenceNotification,
        *,
        today: date,
        now: Optional[datetime] = None,
    ) -> AttendanceAlert:
        """Open (or refresh) the single pre-notified alert of the student."""
        now = now or now_local()
        notes = pre_notified_note(notification)

        existing = self._alerts.get_unresolved(notification.student_id, AlertType.PRE_NOTIFIED_ABSENCE)
        if existing:
            self._alerts.update_notes(existing.id, alert_date=today, notes=notes)
            return replace(existing, alert_date=today, notes=notes)

        alert = AttendanceAlert(
            id=str(uuid.uuid4()),
            student_id=notification.student_id,
            alert_type=AlertType.PRE_NOTIFIED_ABSENCE,
            alert_date=today,
            consecutive_absences=0,
            weeks_absent=0,
            is_debtor=False,
            created_at=now,
            notes=notes,
        )
        self._alerts.insert(alert)
        logger.info("Pre-notified alert created student=%s date=%s", notification.student_id, notification.absence_date)
        return alert

    def withdraw_pre_notification(self, student_id: str, *, today: date) -> bool:
        """Delete the pre-notified alert once no pending notification backs it."""
        pending = self._notifications.list_for_student(student_id, from_date=today, processed=False)
        if pending:
            existing = self._alerts.get_unresolved(student_id, AlertType.PRE_NOTIFIED_ABSENCE)
            if existing:
                self._alerts.update_notes(existing.id, alert_date=existing.alert_date, notes=pre_notified_note(pending[0]))
            return False

        deleted = self._alerts.delete_unresolved(student_id, AlertType.PRE_NOTIFIED_ABSENCE)
        if deleted:
            logger.info("Pre-notified alert deleted student=%s", student_id)
        return deleted > 0

    # -- admin actions ---------------------------------------------------------

    def list_alerts(
        self,
        *,
        resolved: Optional[bool] = False,
        alert_type: Optional[AlertType] = None,
    ) -> Sequence[AttendanceAlert]:
        return list(self._alerts.list_filtered(resolved=resolved, alert_type=alert_type))

    def _require_alert(self, alert_id: str) -> AttendanceAlert:
        alert = self._alerts.get_by_id(alert_id)
        if not alert:
            raise NotFoundError(f"Alert not found: {alert_id}")
        return alert

    def resolve(
        self,
        alert_id: str,
        *,
        resolved_by: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceAlert:
        alert = self._require_alert(alert_id)
        if alert.is_resolved:
            return alert

        self._alerts.resolve(alert_id, resolved_at=now or now_local(), resolved_by=resolved_by, notes=notes)
        logger.info("Alert resolved id=%s student=%s by=%s", alert_id, alert.student_id, resolved_by)
        return self._require_alert(alert_id)

    def notify_parent(
        self,
        alert_id: str,
        *,
        sent_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> EmailNotification:
        alert = self._require_alert(alert_id)
        student = self._students.get_by_id(alert.student_id)
        if not student:
            raise NotFoundError(f"Student not found: {alert.student_id}")
        if not student.parent_email:
            raise ValidationError("No parent email available")

        cls = self._classes.get_by_id(student.class_id) if student.class_id else None
        class_name = cls.name if cls else "class"
        greeting = student.parent_name or "Parent/Guardian"
        body = (
            f"Dear {greeting},\n\n"
            f"We are writing to inform you that your child, {student.full_name}, has been absent from "
            f"{class_name} for {alert.consecutive_absences} sessions in the last "
            f"{self._policy.lookback_days} days.\n\n"
            "Please contact the school to discuss this matter.\n\n"
            "Best regards,\nSchool Administration"
        )
        email = EmailNotification(
            id=str(uuid.uuid4()),
            alert_id=alert.id,
            recipient_email=student.parent_email,
            recipient_type="parent",
            subject=f"Low Attendance Alert - {student.full_name}",
            body=body,
            sent_at=now or now_local(),
            sent_by=sent_by,
        )
        self._emails.record(email)
        logger.info("Parent email recorded alert=%s to=%s", alert.id, email.recipient_email)
        return email
