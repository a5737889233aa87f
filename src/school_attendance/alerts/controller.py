from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import json_body, optional_str, parse_optional_enum, to_json
from ..core.enums import AlertType
from ..core.exceptions import ValidationError
from ..container import Container

_RESOLVED_FILTERS = {"unresolved": False, "resolved": True, "all": None}


def register(app: Flask, container: Container) -> None:
    @app.route("/api/alerts", methods=["GET"], endpoint="alerts_list")
    def alerts_list():
        resolved_s = request.args.get("resolved", "unresolved")
        if resolved_s not in _RESOLVED_FILTERS:
            raise ValidationError("resolved must be one of: unresolved, resolved, all")
        alert_type = parse_optional_enum(AlertType, request.args.get("type"), "type")

        alerts = container.alert_service.list_alerts(resolved=_RESOLVED_FILTERS[resolved_s], alert_type=alert_type)
        return jsonify({"alerts": to_json(alerts)})

    @app.route("/api/alerts/scan", methods=["POST"], endpoint="alerts_scan")
    def alerts_scan():
        data = json_body()
        report = container.alert_service.scan(as_of=parse_optional_date(data.get("as_of")))
        body = to_json(report)
        body.update(failed=report.failed, success_count=report.success_count)
        return jsonify(body)

    @app.route("/api/alerts/<alert_id>/resolve", methods=["POST"], endpoint="alerts_resolve")
    def alerts_resolve(alert_id: str):
        data = json_body()
        alert = container.alert_service.resolve(
            alert_id,
            resolved_by=optional_str(data, "resolved_by"),
            notes=optional_str(data, "notes"),
        )
        return jsonify(to_json(alert))

    @app.route("/api/alerts/<alert_id>/notify-parent", methods=["POST"], endpoint="alerts_notify_parent")
    def alerts_notify_parent(alert_id: str):
        data = json_body()
        email = container.alert_service.notify_parent(alert_id, sent_by=optional_str(data, "sent_by"))
        return jsonify(to_json(email)), 201
