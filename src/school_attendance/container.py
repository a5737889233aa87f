from __future__ import annotations

from dataclasses import dataclass

from .accounts.mysql_account_repository import MySQLAccountRepository
from .accounts.service import AccountService
from .alerts.model import AlertPolicy
from .alerts.mysql_alert_repository import MySQLAlertRepository, MySQLEmailNotificationRepository
from .alerts.service import AlertService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .commission.mysql_assignment_repository import MySQLAssignmentRepository
from .commission.service import CommissionService, TeacherAssignmentService
from .core.constants import DEFAULT_ABSENCE_THRESHOLD, DEFAULT_LOOKBACK_DAYS, DEFAULT_MAX_BACKDATE_DAYS
from .database.connection import DatabaseConnection, DBConfig
from .notifications.mysql_notification_repository import MySQLAccessTokenRepository, MySQLNotificationRepository
from .notifications.service import ParentPortalService
from .reports.service import AttendanceReportService
from .students.mysql_student_repository import MySQLClassRepository, MySQLStudentRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    students_repo: MySQLStudentRepository
    classes_repo: MySQLClassRepository
    attendance_repo: MySQLAttendanceRepository
    notifications_repo: MySQLNotificationRepository
    tokens_repo: MySQLAccessTokenRepository
    alerts_repo: MySQLAlertRepository
    emails_repo: MySQLEmailNotificationRepository
    accounts_repo: MySQLAccountRepository
    assignments_repo: MySQLAssignmentRepository

    attendance_service: AttendanceService
    report_service: AttendanceReportService
    alert_service: AlertService
    parent_portal_service: ParentPortalService
    commission_service: CommissionService
    assignment_service: TeacherAssignmentService
    account_service: AccountService


def build_container(
    *,
    db_config: dict,
    absence_threshold: int = DEFAULT_ABSENCE_THRESHOLD,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    max_backdate_days: int = DEFAULT_MAX_BACKDATE_DAYS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    students_repo = MySQLStudentRepository(conn)
    classes_repo = MySQLClassRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)
    tokens_repo = MySQLAccessTokenRepository(conn)
    alerts_repo = MySQLAlertRepository(conn)
    emails_repo = MySQLEmailNotificationRepository(conn)
    accounts_repo = MySQLAccountRepository(conn)
    assignments_repo = MySQLAssignmentRepository(conn)

    attendance_service = AttendanceService(
        attendance_repo,
        students_repo,
        classes_repo,
        notifications_repo,
        max_backdate_days=max_backdate_days,
    )
    report_service = AttendanceReportService(attendance_repo, classes_repo, students_repo)
    alert_service = AlertService(
        alerts_repo,
        attendance_repo,
        students_repo,
        classes_repo,
        accounts_repo,
        notifications_repo,
        emails_repo,
        policy=AlertPolicy(absence_threshold=absence_threshold, lookback_days=lookback_days),
    )
    parent_portal_service = ParentPortalService(tokens_repo, notifications_repo, students_repo, alert_service)
    commission_service = CommissionService(assignments_repo, attendance_repo, classes_repo, students_repo)
    assignment_service = TeacherAssignmentService(assignments_repo, classes_repo)
    account_service = AccountService(accounts_repo)

    return Container(
        conn=conn,
        students_repo=students_repo,
        classes_repo=classes_repo,
        attendance_repo=attendance_repo,
        notifications_repo=notifications_repo,
        tokens_repo=tokens_repo,
        alerts_repo=alerts_repo,
        emails_repo=emails_repo,
        accounts_repo=accounts_repo,
        assignments_repo=assignments_repo,
        attendance_service=attendance_service,
        report_service=report_service,
        alert_service=alert_service,
        parent_portal_service=parent_portal_service,
        commission_service=commission_service,
        assignment_service=assignment_service,
        account_service=account_service,
    )


def build_container_from_settings(settings) -> Container:
    return build_container(
        db_config=dict(getattr(settings, "DB_CONFIG")),
        absence_threshold=int(getattr(settings, "ALERT_ABSENCE_THRESHOLD", DEFAULT_ABSENCE_THRESHOLD)),
        lookback_days=int(getattr(settings, "ALERT_LOOKBACK_DAYS", DEFAULT_LOOKBACK_DAYS)),
        max_backdate_days=int(getattr(settings, "ATTENDANCE_MAX_BACKDATE_DAYS", DEFAULT_MAX_BACKDATE_DAYS)),
    )
