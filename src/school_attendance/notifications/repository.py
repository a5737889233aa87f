from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import ParentAbsenceNotification, ParentAccessToken


class NotificationRepository(Protocol):
    def get_by_id(self, notification_id: str) -> Optional[ParentAbsenceNotification]:
        raise NotImplementedError

    def find_for_student_date(self, student_id: str, absence_date: date) -> Optional[ParentAbsenceNotification]:
        raise NotImplementedError

    def create(self, notification: ParentAbsenceNotification) -> None:
        """Raises ConflictError when the student already notified for that date."""

        raise NotImplementedError

    def delete(self, notification_id: str) -> bool:
        raise NotImplementedError

    def list_for_class_date(
        self,
        class_id: str,
        absence_date: date,
        *,
        processed: Optional[bool] = False,
    ) -> Sequence[ParentAbsenceNotification]:
        raise NotImplementedError

    def mark_processed(self, class_id: str, absence_date: date) -> int:
        raise NotImplementedError

    def list_for_student(
        self,
        student_id: str,
        *,
        from_date: Optional[date] = None,
        processed: Optional[bool] = None,
    ) -> Sequence[ParentAbsenceNotification]:
        """Notifications ordered by absence date."""

        raise NotImplementedError


class AccessTokenRepository(Protocol):
    def get_by_token(self, token: str) -> Optional[ParentAccessToken]:
        raise NotImplementedError

    def get_active_for_student(self, student_id: str) -> Optional[ParentAccessToken]:
        raise NotImplementedError

    def create(self, token: ParentAccessToken) -> None:
        raise NotImplementedError

    def deactivate_for_student(self, student_id: str) -> int:
        raise NotImplementedError

    def touch(self, token: str, accessed_at: datetime) -> None:
        raise NotImplementedError
