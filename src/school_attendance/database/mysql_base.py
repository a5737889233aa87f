from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

import mysql.connector

from ..core.exceptions import StoreError

E = TypeVar("E", bound=Enum)


@contextmanager
def db_cursor(conn_factory, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` inside one transaction.

    Everything executed in the block is committed together when the block
    exits normally and rolled back when it raises.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise StoreError(f"Database connection failed: {exc}") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        raise StoreError(str(exc)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_enum(enum_cls: Type[E], value: Any) -> E:
    """Convert a stored column value, rejecting unknown values."""
    try:
        return enum_cls(value)
    except ValueError:
        raise StoreError(f"Unexpected {enum_cls.__name__} value in store: {value!r}")


def in_clause(values) -> str:
    return ",".join(["%s"] * len(values))
