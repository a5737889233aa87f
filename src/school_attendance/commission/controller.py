from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import json_body, to_json
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/teachers/<teacher_id>/commission", methods=["GET"], endpoint="commission_report")
    def commission_report(teacher_id: str):
        report = container.commission_service.report(
            teacher_id,
            start=parse_optional_date(request.args.get("start")),
            end=parse_optional_date(request.args.get("end")),
        )
        body = to_json(report)
        body["total_absences"] = report.total_absences
        for group, data in zip(report.classes, body["classes"]):
            data["total_absences"] = group.total_absences
        return jsonify(body)

    @app.route("/api/teachers/<teacher_id>/classes", methods=["GET"], endpoint="teacher_classes")
    def teacher_classes(teacher_id: str):
        return jsonify({"teacher_id": teacher_id, "class_ids": container.assignment_service.list_class_ids(teacher_id)})

    @app.route("/api/teachers/<teacher_id>/classes", methods=["PUT"], endpoint="teacher_classes_replace")
    def teacher_classes_replace(teacher_id: str):
        class_ids = json_body().get("class_ids")
        if not isinstance(class_ids, list):
            raise ValidationError("class_ids must be a list")
        diff = container.assignment_service.set_assignments(teacher_id, [str(c) for c in class_ids])
        return jsonify(to_json(diff))
