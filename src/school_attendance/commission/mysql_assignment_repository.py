from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .repository import AssignmentRepository


class MySQLAssignmentRepository(AssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def class_ids_for_teacher(self, teacher_id: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT class_id FROM teacher_classes WHERE teacher_id=%s ORDER BY assigned_at, class_id",
                (teacher_id,),
            )
            return [str(r["class_id"]) for r in fetchall(cur)]

    def replace_for_teacher(self, teacher_id: str, class_ids: Sequence[str]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teacher_classes WHERE teacher_id=%s", (teacher_id,))
            if class_ids:
                cur.executemany(
                    "INSERT INTO teacher_classes(teacher_id, class_id, assigned_at) VALUES(%s,%s,NOW())",
                    [(teacher_id, class_id) for class_id in class_ids],
                )
