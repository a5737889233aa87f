from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PaymentStatus
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_enum
from .model import PaymentRecord, StudentAccount
from .repository import AccountRepository

_ACCOUNT_COLUMNS = (
    "id, student_id, current_balance, days_overdue, payment_status, last_payment_date, last_payment_amount, notes"
)


def _to_account(r) -> StudentAccount:
    last_amount = r.get("last_payment_amount")
    return StudentAccount(
        id=str(r["id"]),
        student_id=str(r["student_id"]),
        current_balance=Decimal(str(r["current_balance"] or 0)),
        days_overdue=int(r.get("days_overdue") or 0),
        payment_status=to_enum(PaymentStatus, r["payment_status"]),
        last_payment_date=r.get("last_payment_date"),
        last_payment_amount=Decimal(str(last_amount)) if last_amount is not None else None,
        notes=r.get("notes"),
    )


class MySQLAccountRepository(AccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student(self, student_id: str) -> Optional[StudentAccount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ACCOUNT_COLUMNS} FROM student_accounts WHERE student_id=%s", (student_id,))
            r = fetchone(cur)
            return _to_account(r) if r else None

    def record_payment(self, *, payment: PaymentRecord) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payment_history(
                    id, account_id, student_id, amount, payment_date, payment_method,
                    reference_number, notes, recorded_by, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,NOW())
                """,
                (
                    payment.id,
                    payment.account_id,
                    payment.student_id,
                    payment.amount,
                    payment.payment_date,
                    payment.payment_method,
                    payment.reference_number,
                    payment.notes,
                    payment.recorded_by,
                ),
            )
            # Lowered in place; concurrent payments each subtract from the stored row.
            cur.execute(
                """
                UPDATE student_accounts
                SET current_balance=GREATEST(0, current_balance - %s),
                    last_payment_date=%s, last_payment_amount=%s
                WHERE id=%s
                """,
                (payment.amount, payment.payment_date, payment.amount, payment.account_id),
            )
            cur.execute("SELECT current_balance FROM student_accounts WHERE id=%s", (payment.account_id,))
            r = fetchone(cur)
            if not r:
                raise NotFoundError(f"Account not found: {payment.account_id}")
            return Decimal(str(r["current_balance"]))

    def list_overdue(self) -> Sequence[StudentAccount]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ACCOUNT_COLUMNS}
                FROM student_accounts
                WHERE payment_status <> 'current'
                ORDER BY days_overdue DESC
                """
            )
            return [_to_account(r) for r in fetchall(cur)]

    def update_overdue(self, *, account_id: str, days_overdue: int, payment_status: PaymentStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE student_accounts SET days_overdue=%s, payment_status=%s WHERE id=%s",
                (int(days_overdue), payment_status.value, account_id),
            )
            return cur.rowcount > 0
