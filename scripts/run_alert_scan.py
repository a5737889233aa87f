"""Daily alert detection run.

Usage: python scripts/run_alert_scan.py [YYYY-MM-DD]

Exits with status 1 when any student failed to scan.
"""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from dotenv import load_dotenv

from school_attendance.common.datetime_utils import parse_iso_date
from school_attendance.config import get_settings_module
from school_attendance.container import build_container_from_settings
from school_attendance.logging_config import configure_logging


def main(argv: list[str]) -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    as_of = parse_iso_date(argv[0]) if argv else None
    container = build_container_from_settings(settings)
    report = container.alert_service.scan(as_of=as_of)

    print(
        f"as_of={report.as_of.isoformat()} scanned={report.scanned} ok={report.success_count} "
        f"failed={report.failed} created={report.created} updated={report.updated} reconciled={report.reconciled}"
    )
    for failure in report.failures:
        print(f"  FAILED student={failure.student_id}: {failure.error}")
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
