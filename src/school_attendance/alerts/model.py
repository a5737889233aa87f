from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.validators import require_positive
from ..core.constants import DEFAULT_ABSENCE_THRESHOLD, DEFAULT_LOOKBACK_DAYS
from ..core.enums import AlertType


@dataclass(frozen=True)
class AttendanceAlert:
    id: str
    student_id: str
    alert_type: AlertType
    alert_date: date
    consecutive_absences: int
    weeks_absent: int
    is_debtor: bool
    created_at: datetime
    is_resolved: bool = False
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class AlertPolicy:
    """When a run of absences becomes an alert."""

    absence_threshold: int = DEFAULT_ABSENCE_THRESHOLD
    lookback_days: int = DEFAULT_LOOKBACK_DAYS

    def __post_init__(self):
        require_positive(self.absence_threshold, "Absence threshold")
        require_positive(self.lookback_days, "Lookback days")


@dataclass(frozen=True)
class ScanFailure:
    student_id: str
    error: str


@dataclass
class ScanReport:
    """Outcome of one detection run; failures never abort the run."""

    as_of: date
    scanned: int = 0
    created: int = 0
    updated: int = 0
    reconciled: int = 0
    failures: list[ScanFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def success_count(self) -> int:
        return self.scanned - self.failed


@dataclass(frozen=True)
class EmailNotification:
    """An e-mail composed for a parent; delivery happens elsewhere."""

    id: str
    recipient_email: str
    recipient_type: str
    subject: str
    body: str
    sent_at: datetime
    alert_id: Optional[str] = None
    sent_by: Optional[str] = None
