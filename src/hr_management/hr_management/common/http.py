from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from flask import jsonify, request


def ok(message: str | None = None, *, status: int = 200, **data):
    body = {"success": True}
    if message:
        body["message"] = message
    body.update({k: serialize(v) for k, v in data.items()})
    return jsonify(body), status


def json_body() -> dict:
    """JSON payload, or form fields for multipart requests."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict() if request.form else {}


def serialize(value: Any) -> Any:
    """Dataclasses, enums and temporal values to plain JSON types."""
    if is_dataclass(value) and not isinstance(value, type):
        return serialize(asdict(value))
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value
