from __future__ import annotations

import math

from ..core.exceptions import ValidationError


def require_id(value, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is required") from None
    if parsed <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return parsed


def to_finite_float(value) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def require_non_negative(value, field_name: str) -> float:
    parsed = to_finite_float(value)
    if parsed is None or parsed < 0:
        raise ValidationError(f"{field_name} must be a non-negative number")
    return parsed
