from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, to_enum
from .model import AttendanceRecord
from .repository import AttendanceRepository


def _to_record(r) -> AttendanceRecord:
    return AttendanceRecord(
        id=str(r["id"]),
        student_id=str(r["student_id"]),
        class_id=str(r["class_id"]),
        attendance_date=r["attendance_date"],
        status=to_enum(AttendanceStatus, r["status"]),
        marked_at=r["marked_at"],
        absence_reason=r.get("absence_reason"),
        comments=r.get("comments"),
        marked_by=r.get("marked_by"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def read_range(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        class_id: Optional[str] = None,
        student_id: Optional[str] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if start is not None:
            clauses.append("attendance_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("attendance_date <= %s")
            params.append(end)
        if class_id is not None:
            clauses.append("class_id=%s")
            params.append(class_id)
        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(student_id)
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, student_id, class_id, attendance_date, status,
                       absence_reason, comments, marked_by, marked_at
                FROM attendance_records
                {where}
                ORDER BY attendance_date ASC, marked_at ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def replace_for_class_date(
        self,
        *,
        class_id: str,
        attendance_date: date,
        records: Sequence[AttendanceRecord],
    ) -> None:
        # Delete and insert share one connection; db_cursor commits only after both.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE class_id=%s AND attendance_date=%s",
                (class_id, attendance_date),
            )
            if records:
                cur.executemany(
                    """
                    INSERT INTO attendance_records(
                        id, student_id, class_id, attendance_date, status,
                        absence_reason, comments, marked_by, marked_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    [
                        (
                            r.id,
                            r.student_id,
                            r.class_id,
                            r.attendance_date,
                            r.status.value,
                            r.absence_reason,
                            r.comments,
                            r.marked_by,
                            r.marked_at,
                        )
                        for r in records
                    ],
                )
