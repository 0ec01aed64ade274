from __future__ import annotations

import math
from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_fields(payload: dict, *names: str) -> None:
    """Raise one ValidationError listing every missing/empty field."""
    missing = [n for n in names if payload.get(n) in (None, "")]
    if missing:
        raise ValidationError(f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required.")


def require_amount(value: Any, field_name: str = "amount", *, allow_zero: bool = False) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(amount):
        raise ValidationError(f"{field_name} must be a finite number")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise ValidationError(f"{field_name} must be greater than 0")
    return amount


def normalize_email(value: Optional[str]) -> str:
    return require_non_empty(value, "email").lower()
