from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_optional_date, today_local
from ..common.http import to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reports/classes", methods=["GET"], endpoint="report_classes")
    def report_classes():
        end = parse_optional_date(request.args.get("end")) or today_local()
        start_s = request.args.get("start")
        start = parse_iso_date(start_s) if start_s else end - timedelta(days=29)
        class_id = request.args.get("class_id") or None

        svc = container.report_service
        tallies = svc.class_tallies(start=start, end=end, class_id=class_id)
        return jsonify(
            {
                "start": start.isoformat(),
                "end": end.isoformat(),
                "classes": to_json(tallies),
                "summary": to_json(svc.summary(tallies)),
            }
        )

    @app.route("/api/classes/<class_id>/weekly-stats", methods=["GET"], endpoint="report_weekly_stats")
    def report_weekly_stats(class_id: str):
        today = parse_optional_date(request.args.get("today"))
        return jsonify(to_json(container.report_service.weekly_stats(class_id, today=today)))
