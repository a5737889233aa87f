from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import SchoolClass, Student
from .repository import ClassRepository, StudentRepository

_STUDENT_COLUMNS = "id, school_id, class_id, first_name, last_name, grade, parent_name, parent_email, is_active"
_CLASS_COLUMNS = "id, school_id, name, grade, is_active"


def _to_student(r) -> Student:
    return Student(
        id=str(r["id"]),
        school_id=str(r["school_id"]),
        class_id=r.get("class_id"),
        first_name=r["first_name"],
        last_name=r["last_name"],
        grade=r["grade"],
        parent_name=r.get("parent_name"),
        parent_email=r.get("parent_email"),
        is_active=bool(r["is_active"]),
    )


def _to_class(r) -> SchoolClass:
    return SchoolClass(
        id=str(r["id"]),
        school_id=str(r["school_id"]),
        name=r["name"],
        grade=r["grade"],
        is_active=bool(r["is_active"]),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE id=%s", (student_id,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_many(self, student_ids: Iterable[str]) -> Sequence[Student]:
        ids = list(dict.fromkeys(student_ids))
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE id IN ({in_clause(ids)})", tuple(ids))
            return [_to_student(r) for r in fetchall(cur)]

    def list_active_enrolled(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM students
                WHERE is_active=1 AND class_id IS NOT NULL
                ORDER BY last_name, first_name
                """
            )
            return [_to_student(r) for r in fetchall(cur)]

    def list_active_in_class(self, class_id: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM students
                WHERE is_active=1 AND class_id=%s
                ORDER BY last_name, first_name
                """,
                (class_id,),
            )
            return [_to_student(r) for r in fetchall(cur)]


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: str) -> Optional[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_CLASS_COLUMNS} FROM classes WHERE id=%s", (class_id,))
            r = fetchone(cur)
            return _to_class(r) if r else None

    def get_many(self, class_ids: Iterable[str]) -> Sequence[SchoolClass]:
        ids = list(dict.fromkeys(class_ids))
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_CLASS_COLUMNS} FROM classes WHERE id IN ({in_clause(ids)})", tuple(ids))
            return [_to_class(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[SchoolClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_CLASS_COLUMNS} FROM classes ORDER BY name")
            return [_to_class(r) for r in fetchall(cur)]
