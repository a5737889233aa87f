from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import PaymentStatus
from .model import PaymentRecord, StudentAccount


class AccountRepository(Protocol):
    def get_for_student(self, student_id: str) -> Optional[StudentAccount]:
        raise NotImplementedError

    def record_payment(self, *, payment: PaymentRecord) -> Decimal:
        """Insert the payment and lower the stored balance (never below 0) in one transaction.

        Returns the balance after the payment.
        """

        raise NotImplementedError

    def list_overdue(self) -> Sequence[StudentAccount]:
        """Accounts in any overdue tier, most days overdue first."""

        raise NotImplementedError

    def update_overdue(self, *, account_id: str, days_overdue: int, payment_status: PaymentStatus) -> bool:
        raise NotImplementedError
