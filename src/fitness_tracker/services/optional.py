"""Soft-absence handling for endpoints the backend may not ship yet."""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from fitness_tracker.domain.errors import (
    ConfigurationError,
    InputValidationError,
    NotAuthenticatedError,
    ResponseShapeError,
    TransportError,
)

T = TypeVar("T")

SOFT_ABSENCE_MARKERS = ("unknown action", "not implemented", "not found")

_ALWAYS_RAISED = (
    ConfigurationError,
    InputValidationError,
    NotAuthenticatedError,
    ResponseShapeError,
    TransportError,
)

_logger = logging.getLogger(__name__)


def is_soft_absence(exc: BaseException) -> bool:
    """Return True when an error means "this endpoint has no data for us"."""
    if isinstance(exc, _ALWAYS_RAISED):
        return False
    message = str(exc).lower()
    if any(marker in message for marker in SOFT_ABSENCE_MARKERS):
        return True
    return "route" in message and "not" in message


async def optional_call(call: Callable[[], Awaitable[T]]) -> T | None:
    """Await ``call`` and downgrade soft-absence errors to None."""
    try:
        return await call()
    except Exception as exc:
        if not is_soft_absence(exc):
            raise
        _logger.debug("Optional call returned no data: %s", exc)
        return None
