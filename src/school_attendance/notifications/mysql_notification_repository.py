from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ParentAbsenceNotification, ParentAccessToken
from .repository import AccessTokenRepository, NotificationRepository

_NOTIFICATION_COLUMNS = (
    "id, student_id, class_id, absence_date, reason, notes, created_at, created_by_parent, is_processed"
)
_TOKEN_COLUMNS = "id, student_id, token, created_at, expires_at, is_active, last_accessed_at"


def _to_notification(r) -> ParentAbsenceNotification:
    return ParentAbsenceNotification(
        id=str(r["id"]),
        student_id=str(r["student_id"]),
        class_id=str(r["class_id"]),
        absence_date=r["absence_date"],
        reason=r["reason"],
        notes=r.get("notes"),
        created_at=r["created_at"],
        created_by_parent=bool(r["created_by_parent"]),
        is_processed=bool(r["is_processed"]),
    )


def _to_token(r) -> ParentAccessToken:
    return ParentAccessToken(
        id=str(r["id"]),
        student_id=str(r["student_id"]),
        token=r["token"],
        created_at=r["created_at"],
        expires_at=r.get("expires_at"),
        is_active=bool(r["is_active"]),
        last_accessed_at=r.get("last_accessed_at"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, notification_id: str) -> Optional[ParentAbsenceNotification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_NOTIFICATION_COLUMNS} FROM parent_absence_notifications WHERE id=%s",
                (notification_id,),
            )
            r = fetchone(cur)
            return _to_notification(r) if r else None

    def find_for_student_date(self, student_id: str, absence_date: date) -> Optional[ParentAbsenceNotification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_NOTIFICATION_COLUMNS}
                FROM parent_absence_notifications
                WHERE student_id=%s AND absence_date=%s
                """,
                (student_id, absence_date),
            )
            r = fetchone(cur)
            return _to_notification(r) if r else None

    def create(self, notification: ParentAbsenceNotification) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO parent_absence_notifications(
                        id, student_id, class_id, absence_date, reason, notes,
                        created_at, created_by_parent, is_processed
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        notification.id,
                        notification.student_id,
                        notification.class_id,
                        notification.absence_date,
                        notification.reason,
                        notification.notes,
                        notification.created_at,
                        int(notification.created_by_parent),
                        int(notification.is_processed),
                    ),
                )
            except mysql.connector.IntegrityError as exc:
                raise ConflictError("You have already notified absence for this date") from exc

    def delete(self, notification_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM parent_absence_notifications WHERE id=%s", (notification_id,))
            return cur.rowcount > 0

    def list_for_class_date(
        self,
        class_id: str,
        absence_date: date,
        *,
        processed: Optional[bool] = False,
    ) -> Sequence[ParentAbsenceNotification]:
        clauses = ["class_id=%s", "absence_date=%s"]
        params: list[object] = [class_id, absence_date]
        if processed is not None:
            clauses.append("is_processed=%s")
            params.append(int(processed))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_NOTIFICATION_COLUMNS}
                FROM parent_absence_notifications
                WHERE {' AND '.join(clauses)}
                ORDER BY created_at
                """,
                tuple(params),
            )
            return [_to_notification(r) for r in fetchall(cur)]

    def mark_processed(self, class_id: str, absence_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE parent_absence_notifications
                SET is_processed=1
                WHERE class_id=%s AND absence_date=%s AND is_processed=0
                """,
                (class_id, absence_date),
            )
            return int(cur.rowcount)

    def list_for_student(
        self,
        student_id: str,
        *,
        from_date: Optional[date] = None,
        processed: Optional[bool] = None,
    ) -> Sequence[ParentAbsenceNotification]:
        clauses = ["student_id=%s"]
        params: list[object] = [student_id]
        if from_date is not None:
            clauses.append("absence_date >= %s")
            params.append(from_date)
        if processed is not None:
            clauses.append("is_processed=%s")
            params.append(int(processed))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_NOTIFICATION_COLUMNS}
                FROM parent_absence_notifications
                WHERE {' AND '.join(clauses)}
                ORDER BY absence_date ASC, created_at ASC
                """,
                tuple(params),
            )
            return [_to_notification(r) for r in fetchall(cur)]


class MySQLAccessTokenRepository(AccessTokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_token(self, token: str) -> Optional[ParentAccessToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TOKEN_COLUMNS} FROM parent_access_tokens WHERE token=%s", (token,))
            r = fetchone(cur)
            return _to_token(r) if r else None

    def get_active_for_student(self, student_id: str) -> Optional[ParentAccessToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TOKEN_COLUMNS}
                FROM parent_access_tokens
                WHERE student_id=%s AND is_active=1
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (student_id,),
            )
            r = fetchone(cur)
            return _to_token(r) if r else None

    def create(self, token: ParentAccessToken) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO parent_access_tokens(id, student_id, token, created_at, expires_at, is_active)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (token.id, token.student_id, token.token, token.created_at, token.expires_at, int(token.is_active)),
            )

    def deactivate_for_student(self, student_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE parent_access_tokens SET is_active=0 WHERE student_id=%s AND is_active=1",
                (student_id,),
            )
            return int(cur.rowcount)

    def touch(self, token: str, accessed_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE parent_access_tokens SET last_accessed_at=%s WHERE token=%s",
                (accessed_at, token),
            )
