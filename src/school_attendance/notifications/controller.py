from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, optional_str, to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    portal = container.parent_portal_service

    @app.route("/api/students/<student_id>/parent-token", methods=["POST"], endpoint="parent_token_issue")
    def parent_token_issue(student_id: str):
        token = portal.issue_token(student_id)
        return jsonify({"student_id": student_id, "token": token.token})

    @app.route("/api/students/<student_id>/parent-token", methods=["DELETE"], endpoint="parent_token_revoke")
    def parent_token_revoke(student_id: str):
        return jsonify({"student_id": student_id, "revoked": portal.revoke_tokens(student_id)})

    @app.route("/api/parent/<token>", methods=["GET"], endpoint="parent_student")
    def parent_student(token: str):
        student = portal.resolve_token(token)
        return jsonify(
            {
                "id": student.id,
                "full_name": student.full_name,
                "grade": student.grade,
                "class_id": student.class_id,
            }
        )

    @app.route("/api/parent/<token>/absences", methods=["GET"], endpoint="parent_absences")
    def parent_absences(token: str):
        return jsonify({"absences": to_json(portal.upcoming_absences(token))})

    @app.route("/api/parent/<token>/absences", methods=["POST"], endpoint="parent_absence_notify")
    def parent_absence_notify(token: str):
        data = json_body()
        notification = portal.notify_absence(
            token,
            class_id=str(data.get("class_id") or ""),
            absence_date=parse_iso_date(str(data.get("absence_date") or "")),
            reason=str(data.get("reason") or ""),
            notes=optional_str(data, "notes"),
        )
        return jsonify(to_json(notification)), 201

    @app.route(
        "/api/parent/<token>/absences/<notification_id>",
        methods=["DELETE"],
        endpoint="parent_absence_cancel",
    )
    def parent_absence_cancel(token: str, notification_id: str):
        portal.cancel_absence(token, notification_id)
        return "", 204
