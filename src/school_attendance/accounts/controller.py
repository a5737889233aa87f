from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_optional_date, today_local
from ..common.http import json_body, optional_str, to_json
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/accounts/debtors", methods=["GET"], endpoint="accounts_debtors")
    def accounts_debtors():
        return jsonify({"accounts": to_json(container.account_service.list_debtors())})

    @app.route("/api/students/<student_id>/payments", methods=["POST"], endpoint="accounts_record_payment")
    def accounts_record_payment(student_id: str):
        data = json_body()
        account = container.account_service.record_payment(
            student_id=student_id,
            amount=data.get("amount"),
            payment_date=parse_optional_date(data.get("payment_date")) or today_local(),
            payment_method=str(data.get("payment_method") or "cash"),
            reference_number=optional_str(data, "reference_number"),
            notes=optional_str(data, "notes"),
            recorded_by=optional_str(data, "recorded_by"),
        )
        return jsonify(to_json(account)), 201

    @app.route("/api/students/<student_id>/overdue", methods=["PUT"], endpoint="accounts_refresh_overdue")
    def accounts_refresh_overdue(student_id: str):
        days = json_body().get("days_overdue")
        if not isinstance(days, int) or isinstance(days, bool):
            raise ValidationError("days_overdue must be an integer")
        status = container.account_service.refresh_overdue(student_id, days)
        return jsonify({"student_id": student_id, "days_overdue": days, "payment_status": status.value})
