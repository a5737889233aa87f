from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, optional_str, parse_enum, to_json
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AttendanceMark


def register(app: Flask, container: Container) -> None:
    @app.route("/api/classes/<class_id>/attendance/<day>", methods=["GET"], endpoint="attendance_sheet")
    def attendance_sheet(class_id: str, day: str):
        rows = container.attendance_service.prepare_sheet(class_id, parse_iso_date(day))
        return jsonify({"class_id": class_id, "date": day, "students": to_json(rows)})

    @app.route("/api/classes/<class_id>/attendance/<day>", methods=["PUT"], endpoint="attendance_mark")
    def attendance_mark(class_id: str, day: str):
        data = json_body()
        raw_marks = data.get("marks")
        if not isinstance(raw_marks, list):
            raise ValidationError("marks must be a list")

        marks = []
        for item in raw_marks:
            if not isinstance(item, dict) or not item.get("student_id"):
                raise ValidationError("Each mark needs a student_id")
            marks.append(
                AttendanceMark(
                    student_id=str(item["student_id"]),
                    status=parse_enum(AttendanceStatus, item.get("status"), "status"),
                    absence_reason=optional_str(item, "absence_reason"),
                    comments=optional_str(item, "comments"),
                )
            )

        diff = container.attendance_service.mark_class(
            class_id=class_id,
            attendance_date=parse_iso_date(day),
            marks=marks,
            marked_by=optional_str(data, "marked_by"),
        )
        return jsonify(to_json(diff))
