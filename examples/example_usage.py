"""Example: drive the service layer directly, without Flask.

Prints the last 30 days of per-class attendance and the open alerts.
"""

import importlib
from datetime import timedelta

from dotenv import load_dotenv

from school_attendance.common.datetime_utils import today_local
from school_attendance.config import get_settings_module
from school_attendance.container import build_container_from_settings


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container_from_settings(settings)

    end = today_local()
    tallies = container.report_service.class_tallies(start=end - timedelta(days=29), end=end)
    for t in tallies:
        print(f"{t.class_name}: {t.attendance_percentage}% ({t.present_count}/{t.total}, excused={t.excused_count})")

    for alert in container.alert_service.list_alerts():
        print(f"{alert.alert_type.value} student={alert.student_id} absences={alert.consecutive_absences}")


if __name__ == "__main__":
    main()
