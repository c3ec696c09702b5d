"""Goal targets and their validation."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, fields
from typing import Protocol

from fitness_tracker.domain.errors import InputValidationError, NotAuthenticatedError
from fitness_tracker.domain.goals import GOAL_UNITS, GoalRow, Goals
from fitness_tracker.services.normalize import to_optional_float

MACRO_SUM_MESSAGE = "Carbs + Protein + Fat must equal 100%."
MACRO_TOTAL_PCT = 100
MACRO_TOLERANCE = 1e-6
_MACRO_KEYS = ("carbs_pct", "protein_pct", "fat_pct")

_logger = logging.getLogger(__name__)


class GoalsRepository(Protocol):
    """Persistence interface for goal rows."""

    def list_current(self, user_id: str) -> list[GoalRow]:
        """Return the active goal rows of a user."""

    def replace_current(self, user_id: str, row: GoalRow) -> None:
        """Drop the active row of the same goal type and insert ``row``."""


def validate_macro_split(payload: dict[str, object]) -> None:
    """Reject a payload whose macro percentages do not add up to 100."""
    values = [payload.get(key) for key in _MACRO_KEYS]
    if all(value is None for value in values):
        return
    numbers = [to_optional_float(value) for value in values]
    if any(number is None for number in numbers):
        raise InputValidationError(MACRO_SUM_MESSAGE)
    if abs(sum(numbers) - MACRO_TOTAL_PCT) > MACRO_TOLERANCE:
        raise InputValidationError(MACRO_SUM_MESSAGE)


def rows_from_payload(payload: dict[str, object]) -> list[GoalRow]:
    """Turn a goals payload into one row per numeric goal type."""
    rows = []
    for goal_type, unit in GOAL_UNITS.items():
        value = to_optional_float(payload.get(goal_type))
        if value is None:
            continue
        rows.append(GoalRow(goal_type=goal_type, target_value=value, unit=unit))
    return rows


@dataclass
class GoalsService:
    """Reads and saves the user's current goals."""

    repository: GoalsRepository
    current_user_id: Callable[[], str | None]

    def get_goals(self) -> Goals:
        """Return current goals overlaid on the defaults."""
        user_id = self._require_user()
        known = {field.name for field in fields(Goals)}
        values = {
            row.goal_type: row.target_value
            for row in self.repository.list_current(user_id)
            if row.goal_type in known
        }
        return Goals(**values)

    def save_goals(self, payload: dict[str, object]) -> Goals:
        """Validate and store goals, then return the refreshed values."""
        validate_macro_split(payload)
        user_id = self._require_user()
        rows = rows_from_payload(payload)
        for row in rows:
            self.repository.replace_current(user_id, row)
        _logger.info("Saved %s goal rows", len(rows))
        return self.get_goals()

    def _require_user(self) -> str:
        user_id = self.current_user_id()
        if not user_id:
            raise NotAuthenticatedError()
        return user_id
