from __future__ import annotations

import logging
import secrets
import uuid
from datetime import date, datetime
from typing import Optional, Sequence

from ..alerts.service import AlertService
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import ParentAbsenceNotification, ParentAccessToken
from .repository import AccessTokenRepository, NotificationRepository

logger = logging.getLogger(__name__)


class ParentPortalService:
    """Parent self-service: access links and absence pre-notifications."""

    def __init__(
        self,
        tokens: AccessTokenRepository,
        notifications: NotificationRepository,
        students: StudentRepository,
        alerts: AlertService,
    ):
        self._tokens = tokens
        self._notifications = notifications
        self._students = students
        self._alerts = alerts

    def issue_token(self, student_id: str, *, expires_at: Optional[datetime] = None) -> ParentAccessToken:
        """Return the student's active access token, creating one if needed."""
        if not self._students.get_by_id(student_id):
            raise ValidationError(f"Unknown student: {student_id}")

        existing = self._tokens.get_active_for_student(student_id)
        if existing:
            return existing

        token = ParentAccessToken(
            id=str(uuid.uuid4()),
            student_id=student_id,
            token=secrets.token_urlsafe(32),
            created_at=now_local(),
            expires_at=expires_at,
        )
        self._tokens.create(token)
        logger.info("Parent access token issued student=%s", student_id)
        return token

    def revoke_tokens(self, student_id: str) -> int:
        count = self._tokens.deactivate_for_student(student_id)
        logger.info("Parent access tokens revoked student=%s count=%s", student_id, count)
        return count

    def resolve_token(self, token: str, *, now: Optional[datetime] = None) -> Student:
        now = now or now_local()
        row = self._tokens.get_by_token(token)
        if not row:
            raise NotFoundError("Invalid access link")
        if not row.is_active:
            raise AuthorizationError("This access link has been deactivated")
        if row.is_expired(now):
            raise AuthorizationError("This access link has expired")

        student = self._students.get_by_id(row.student_id)
        if not student:
            raise NotFoundError("Student not found")

        self._tokens.touch(token, now)
        return student

    def notify_absence(
        self,
        token: str,
        *,
        class_id: str,
        absence_date: date,
        reason: str,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ParentAbsenceNotification:
        now = now or now_local()
        today = now.date()
        student = self.resolve_token(token, now=now)

        if absence_date < today:
            raise ValidationError("Can only notify for today or future dates")
        reason = require_non_empty(reason, "Reason")
        if student.class_id != class_id:
            raise ValidationError(f"Student is not enrolled in class {class_id}")
        if self._notifications.find_for_student_date(student.id, absence_date):
            raise ConflictError("You have already notified absence for this date")

        notification = ParentAbsenceNotification(
            id=str(uuid.uuid4()),
            student_id=student.id,
            class_id=class_id,
            absence_date=absence_date,
            reason=reason,
            notes=optional_text(notes),
            created_at=now,
        )
        self._notifications.create(notification)
        logger.info("Absence notification created student=%s date=%s", student.id, absence_date.isoformat())

        self._alerts.record_pre_notification(notification, today=today, now=now)
        return notification

    def upcoming_absences(self, token: str, *, now: Optional[datetime] = None) -> Sequence[ParentAbsenceNotification]:
        now = now or now_local()
        student = self.resolve_token(token, now=now)
        return list(self._notifications.list_for_student(student.id, from_date=now.date()))

    def cancel_absence(self, token: str, notification_id: str, *, now: Optional[datetime] = None) -> None:
        now = now or now_local()
        student = self.resolve_token(token, now=now)

        notification = self._notifications.get_by_id(notification_id)
        if not notification:
            raise NotFoundError("Notification not found")
        if notification.student_id != student.id:
            raise AuthorizationError("Notification belongs to another student")

        self._notifications.delete(notification_id)
        logger.info(
            "Absence notification cancelled student=%s date=%s",
            student.id,
            notification.absence_date.isoformat(),
        )
        self._alerts.withdraw_pre_notification(student.id, today=now.date())
