from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask, jsonify

from .accounts.controller import register as register_accounts
from .alerts.controller import register as register_alerts
from .attendance.controller import register as register_attendance
from .commission.controller import register as register_commission
from .common.http import register_error_handlers
from .config import get_settings_module
from .container import build_container_from_settings
from .database.bootstrap import apply_schema, list_tables
from .logging_config import configure_logging
from .notifications.controller import register as register_notifications
from .reports.controller import register as register_reports

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    db_config = getattr(settings, "DB_CONFIG")

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config)
        logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

    container = build_container_from_settings(settings)
    app.extensions["school_attendance"] = container

    register_error_handlers(app)
    register_attendance(app, container)
    register_reports(app, container)
    register_alerts(app, container)
    register_notifications(app, container)
    register_commission(app, container)
    register_accounts(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    return app
