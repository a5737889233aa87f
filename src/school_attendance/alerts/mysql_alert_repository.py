from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AlertType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_enum
from .model import AttendanceAlert, EmailNotification
from .repository import AlertRepository, EmailNotificationRepository

_ALERT_COLUMNS = (
    "id, student_id, alert_type, alert_date, consecutive_absences, weeks_absent, is_debtor, "
    "is_resolved, resolved_at, resolved_by, notes, created_at"
)


def _to_alert(r) -> AttendanceAlert:
    return AttendanceAlert(
        id=str(r["id"]),
        student_id=str(r["student_id"]),
        alert_type=to_enum(AlertType, r["alert_type"]),
        alert_date=r["alert_date"],
        consecutive_absences=int(r["consecutive_absences"] or 0),
        weeks_absent=int(r["weeks_absent"] or 0),
        is_debtor=bool(r["is_debtor"]),
        is_resolved=bool(r["is_resolved"]),
        resolved_at=r.get("resolved_at"),
        resolved_by=r.get("resolved_by"),
        notes=r.get("notes"),
        created_at=r["created_at"],
    )


class MySQLAlertRepository(AlertRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, alert_id: str) -> Optional[AttendanceAlert]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ALERT_COLUMNS} FROM attendance_alerts WHERE id=%s", (alert_id,))
            r = fetchone(cur)
            return _to_alert(r) if r else None

    def get_unresolved(self, student_id: str, alert_type: AlertType) -> Optional[AttendanceAlert]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ALERT_COLUMNS}
                FROM attendance_alerts
                WHERE student_id=%s AND alert_type=%s AND is_resolved=0
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (student_id, alert_type.value),
            )
            r = fetchone(cur)
            return _to_alert(r) if r else None

    def insert(self, alert: AttendanceAlert) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_alerts(
                    id, student_id, alert_type, alert_date, consecutive_absences, weeks_absent,
                    is_debtor, is_resolved, notes, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    alert.id,
                    alert.student_id,
                    alert.alert_type.value,
                    alert.alert_date,
                    int(alert.consecutive_absences),
                    int(alert.weeks_absent),
                    int(alert.is_debtor),
                    int(alert.is_resolved),
                    alert.notes,
                    alert.created_at,
                ),
            )

    def update_streak(
        self,
        alert_id: str,
        *,
        alert_date: date,
        consecutive_absences: int,
        weeks_absent: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_alerts
                SET alert_date=%s, consecutive_absences=%s, weeks_absent=%s
                WHERE id=%s AND is_resolved=0
                """,
                (alert_date, int(consecutive_absences), int(weeks_absent), alert_id),
            )
            return cur.rowcount > 0

    def update_notes(self, alert_id: str, *, alert_date: date, notes: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_alerts SET alert_date=%s, notes=%s WHERE id=%s AND is_resolved=0",
                (alert_date, notes, alert_id),
            )
            return cur.rowcount > 0

    def resolve(
        self,
        alert_id: str,
        *,
        resolved_at: datetime,
        resolved_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_alerts
                SET is_resolved=1, resolved_at=%s, resolved_by=%s, notes=COALESCE(%s, notes)
                WHERE id=%s AND is_resolved=0
                """,
                (resolved_at, resolved_by, notes, alert_id),
            )
            return cur.rowcount > 0

    def delete_unresolved(self, student_id: str, alert_type: AlertType) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_alerts WHERE student_id=%s AND alert_type=%s AND is_resolved=0",
                (student_id, alert_type.value),
            )
            return int(cur.rowcount)

    def list_filtered(
        self,
        *,
        resolved: Optional[bool] = None,
        alert_type: Optional[AlertType] = None,
    ) -> Sequence[AttendanceAlert]:
        clauses: list[str] = []
        params: list[object] = []
        if resolved is not None:
            clauses.append("is_resolved=%s")
            params.append(int(resolved))
        if alert_type is not None:
            clauses.append("alert_type=%s")
            params.append(alert_type.value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ALERT_COLUMNS}
                FROM attendance_alerts
                {where}
                ORDER BY alert_date DESC, created_at DESC
                """,
                tuple(params),
            )
            return [_to_alert(r) for r in fetchall(cur)]


class MySQLEmailNotificationRepository(EmailNotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record(self, email: EmailNotification) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO email_notifications(
                    id, alert_id, recipient_email, recipient_type, subject, body, sent_at, sent_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    email.id,
                    email.alert_id,
                    email.recipient_email,
                    email.recipient_type,
                    email.subject,
                    email.body,
                    email.sent_at,
                    email.sent_by,
                ),
            )
