from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from flask import Flask, jsonify, request

from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    StoreError,
    ValidationError,
)

E = TypeVar("E", bound=Enum)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (StoreError, 503),
)


def to_json(value: Any) -> Any:
    """Convert dataclasses/enums/dates/decimals into JSON-friendly values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_json(v) for v in value]
    return value


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def parse_optional_enum(enum_cls: Type[E], value: Optional[str], field_name: str) -> Optional[E]:
    if value is None or value in {"", "all"}:
        return None
    return parse_enum(enum_cls, value, field_name)


def register_error_handlers(app: Flask) -> None:
    def handle_domain_error(exc: DomainError):
        status = 400
        for cls, code in _STATUS_BY_ERROR:
            if isinstance(exc, cls):
                status = code
                break
        return jsonify({"error": str(exc), "type": type(exc).__name__}), status

    app.register_error_handler(DomainError, handle_domain_error)


def optional_str(data: dict, key: str) -> Optional[str]:
    """``data[key]`` when it is a string, None when absent or null."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value
