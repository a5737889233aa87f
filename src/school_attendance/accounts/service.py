from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from ..common.validators import optional_text, require_non_empty
from ..core.constants import OVERDUE_15_DAYS, OVERDUE_30_DAYS, OVERDUE_60_DAYS
from ..core.enums import PaymentStatus
from ..core.exceptions import NotFoundError, ValidationError
from .model import PaymentRecord, StudentAccount
from .repository import AccountRepository

logger = logging.getLogger(__name__)


def payment_status_for(days_overdue: int) -> PaymentStatus:
    days = int(days_overdue)
    if days >= OVERDUE_60_DAYS:
        return PaymentStatus.OVERDUE_60
    if days >= OVERDUE_30_DAYS:
        return PaymentStatus.OVERDUE_30
    if days >= OVERDUE_15_DAYS:
        return PaymentStatus.OVERDUE_15
    return PaymentStatus.CURRENT


class AccountService:
    def __init__(self, accounts: AccountRepository):
        self._accounts = accounts

    def record_payment(
        self,
        *,
        student_id: str,
        amount,
        payment_date: date,
        payment_method: str,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
        recorded_by: Optional[str] = None,
    ) -> StudentAccount:
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError):
            raise ValidationError("Amount must be a number")
        if not value.is_finite() or value <= 0:
            raise ValidationError("Amount must be positive")
        method = require_non_empty(payment_method, "Payment method")

        account = self._accounts.get_for_student(student_id)
        if not account:
            raise NotFoundError(f"No account for student {student_id}")

        payment = PaymentRecord(
            id=str(uuid.uuid4()),
            account_id=account.id,
            student_id=student_id,
            amount=value,
            payment_date=payment_date,
            payment_method=method,
            reference_number=optional_text(reference_number),
            notes=optional_text(notes),
            recorded_by=recorded_by,
        )
        new_balance = self._accounts.record_payment(payment=payment)
        logger.info("Payment recorded student=%s amount=%s balance=%s", student_id, value, new_balance)

        return replace(
            account,
            current_balance=new_balance,
            last_payment_date=payment_date,
            last_payment_amount=value,
        )

    def list_debtors(self) -> Sequence[StudentAccount]:
        return list(self._accounts.list_overdue())

    def refresh_overdue(self, student_id: str, days_overdue: int) -> PaymentStatus:
        """Store a recomputed days-overdue figure and the tier derived from it."""
        if int(days_overdue) < 0:
            raise ValidationError("Days overdue cannot be negative")
        account = self._accounts.get_for_student(student_id)
        if not account:
            raise NotFoundError(f"No account for student {student_id}")

        status = payment_status_for(days_overdue)
        self._accounts.update_overdue(account_id=account.id, days_overdue=int(days_overdue), payment_status=status)
        if status != account.payment_status:
            logger.info("Payment status student=%s %s -> %s", student_id, account.payment_status.value, status.value)
        return status
