from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import PaymentStatus


@dataclass(frozen=True)
class StudentAccount:
    id: str
    student_id: str
    current_balance: Decimal
    days_overdue: int
    payment_status: PaymentStatus
    last_payment_date: Optional[date] = None
    last_payment_amount: Optional[Decimal] = None
    notes: Optional[str] = None

    @property
    def is_debtor(self) -> bool:
        return self.payment_status.is_overdue


@dataclass(frozen=True)
class PaymentRecord:
    id: str
    account_id: str
    student_id: str
    amount: Decimal
    payment_date: date
    payment_method: str
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: Optional[str] = None
