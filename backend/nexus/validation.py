from __future__ import annotations

from typing import Any


class ValidationError(ValueError):
    """400-level input problem. errors carries every message when there is more than one."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate retailer name)."""


def require_json_object(payload: Any) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def clean_str(value: Any, *, field: str, required: bool = False, max_length: int | None = None) -> str | None:
    """Strip a string field; blank becomes None (or an error when required)."""
    if value is None:
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    text = value.strip()
    if not text:
        if required:
            raise ValidationError(f"{field} cannot be blank")
        return None
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return text


def parse_limit(raw: Any, *, default: int, maximum: int) -> int:
    """Query-string limit: plain digits only, clamped to maximum."""
    if raw is None or raw == "":
        return default
    text = str(raw).strip()
    if not text.isdigit():
        raise ValidationError("limit must be a positive integer")
    value = int(text)
    if value < 1:
        raise ValidationError("limit must be a positive integer")
    return min(value, maximum)
