from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AlertType
from .model import AttendanceAlert, EmailNotification


class AlertRepository(Protocol):
    def get_by_id(self, alert_id: str) -> Optional[AttendanceAlert]:
        raise NotImplementedError

    def get_unresolved(self, student_id: str, alert_type: AlertType) -> Optional[AttendanceAlert]:
        raise NotImplementedError

    def insert(self, alert: AttendanceAlert) -> None:
        raise NotImplementedError

    def update_streak(
        self,
        alert_id: str,
        *,
        alert_date: date,
        consecutive_absences: int,
        weeks_absent: int,
    ) -> bool:
        raise NotImplementedError

    def update_notes(self, alert_id: str, *, alert_date: date, notes: Optional[str]) -> bool:
        raise NotImplementedError

    def resolve(
        self,
        alert_id: str,
        *,
        resolved_at: datetime,
        resolved_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def delete_unresolved(self, student_id: str, alert_type: AlertType) -> int:
        raise NotImplementedError

    def list_filtered(
        self,
        *,
        resolved: Optional[bool] = None,
        alert_type: Optional[AlertType] = None,
    ) -> Sequence[AttendanceAlert]:
        """Alerts ordered by alert_date, newest first."""

        raise NotImplementedError


class EmailNotificationRepository(Protocol):
    def record(self, email: EmailNotification) -> None:
        raise NotImplementedError
