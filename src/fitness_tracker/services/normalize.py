"""Decoding helpers for heterogeneous gateway payloads."""

import logging
import math
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TypeVar

from pydantic import BaseModel, ValidationError

_logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_list(payload: object, *keys: str) -> list[object]:
    """Return the first list found under ``keys``, or the payload if it is a list.

    Backend versions return the same logical list as ``{"weights": [...]}``,
    ``{"items": [...]}`` or a bare array.
    """
    if isinstance(payload, dict):
        for key in keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
        return []
    if isinstance(payload, list):
        return payload
    return []


def extract_object(payload: object, *keys: str) -> dict[str, object] | None:
    """Return the first dict found under ``keys``, falling back to the payload."""
    if not isinstance(payload, dict):
        return None
    for key in keys:
        value = payload.get(key)
        if isinstance(value, dict):
            return value
    return payload or None


def first_value(row: object, *keys: str) -> object | None:
    """Return the first non-empty value of ``keys`` in a mapping."""
    if not isinstance(row, dict):
        return None
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def to_float(value: object, default: float = 0.0) -> float:
    """Convert numbers and numeric strings to a finite float."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int | float):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value)
        except ValueError:
            return default
    else:
        return default
    return result if math.isfinite(result) else default


def to_optional_float(value: object) -> float | None:
    """Like ``to_float`` but returns None when the value is not numeric."""
    result = to_float(value, default=math.nan)
    return None if math.isnan(result) else result


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are treated as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_models(model: type[ModelT], rows: Iterable[object]) -> list[ModelT]:
    """Validate rows into models, dropping the ones that do not fit."""
    parsed: list[ModelT] = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as exc:
            _logger.warning("Dropping malformed %s row: %s", model.__name__, exc)
    return parsed
