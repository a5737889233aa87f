from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Status stored for one student on one class day."""

    PRESENT = "present"
    ABSENT = "absent"
    EXCUSED = "excused"


class PaymentStatus(str, Enum):
    """Overdue tier of a student account."""

    CURRENT = "current"
    OVERDUE_15 = "overdue_15"
    OVERDUE_30 = "overdue_30"
    OVERDUE_60 = "overdue_60"

    @property
    def is_overdue(self) -> bool:
        return self is not PaymentStatus.CURRENT


class AlertType(str, Enum):
    LOW_ATTENDANCE = "low_attendance"
    DEBTOR_LOW_ATTENDANCE = "debtor_low_attendance"
    PRE_NOTIFIED_ABSENCE = "pre_notified_absence"
