from __future__ import annotations

from ..core.exceptions import ValidationError


def require_non_empty(value, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required.")
    return str(value).strip()


def require_fields(data: dict, *names: str, message: str | None = None) -> None:
    missing = [n for n in names if data.get(n) in (None, "") or (isinstance(data.get(n), str) and not data[n].strip())]
    if missing:
        raise ValidationError(message or f"Missing required fields: {', '.join(missing)}.")


def require_int(value, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number.")


def optional_int(value) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid number: {value!r}")
