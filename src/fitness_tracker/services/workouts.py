"""Resolution of the user's most recent workout."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from fitness_tracker.services.aggregation import pick_latest_workout
from fitness_tracker.services.fitness_api import FitnessApi

RECENT_WORKOUTS_LIMIT = 25
DIRECT_QUERY_LIMIT = 10

WorkoutStrategy = Callable[[], Awaitable[dict[str, object] | None]]

_logger = logging.getLogger(__name__)


class WorkoutHistory(Protocol):
    """Read access to stored workout sessions."""

    def recent_sessions(self, limit: int = 10) -> list[dict[str, object]]:
        """Return recent workout rows, newest first."""


@dataclass
class LastWorkoutResolver:
    """Finds the last workout by trying progressively cruder sources."""

    api: FitnessApi
    history: WorkoutHistory | None = None
    strategies: Sequence[tuple[str, WorkoutStrategy]] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.strategies:
            self.strategies = self.default_strategies()

    def default_strategies(self) -> tuple[tuple[str, WorkoutStrategy], ...]:
        """Return the built-in strategies in the order they are tried."""
        return (
            ("last-workout", self._from_last_workout),
            ("dashboard", self._from_dashboard),
            ("workouts", self._from_recent_workouts),
            ("tables", self._from_tables),
        )

    async def resolve(self) -> dict[str, object] | None:
        """Return the first workout any strategy finds."""
        for name, strategy in self.strategies:
            try:
                workout = await strategy()
            except Exception as exc:  # noqa: BLE001
                _logger.warning("Last workout strategy %s failed: %s", name, exc)
                continue
            if workout:
                _logger.debug("Last workout resolved by %s", name)
                return workout
        return None

    async def _from_last_workout(self) -> dict[str, object] | None:
        return await self.api.last_workout()

    async def _from_dashboard(self) -> dict[str, object] | None:
        dashboard = await self.api.dashboard() or {}
        workout = dashboard.get("last_workout") or dashboard.get("lastWorkout")
        return workout if isinstance(workout, dict) else None

    async def _from_recent_workouts(self) -> dict[str, object] | None:
        return pick_latest_workout(await self.api.workouts(RECENT_WORKOUTS_LIMIT))

    async def _from_tables(self) -> dict[str, object] | None:
        if self.history is None:
            return None
        rows = await asyncio.to_thread(self.history.recent_sessions, DIRECT_QUERY_LIMIT)
        return pick_latest_workout(rows)
