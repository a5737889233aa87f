import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

ALERT_ABSENCE_THRESHOLD = int(os.getenv("ALERT_ABSENCE_THRESHOLD", "3"))
ALERT_LOOKBACK_DAYS = int(os.getenv("ALERT_LOOKBACK_DAYS", "14"))
ATTENDANCE_MAX_BACKDATE_DAYS = int(os.getenv("ATTENDANCE_MAX_BACKDATE_DAYS", "30"))
