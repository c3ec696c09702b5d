"""Progress screen series for the 7 and 30 day ranges."""

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from fitness_tracker.domain.errors import InputValidationError
from fitness_tracker.domain.stats import ProgressReport
from fitness_tracker.services.aggregation import (
    day_range,
    progress_series,
    series_stats,
)
from fitness_tracker.services.fitness_api import FitnessApi

RANGE_DAYS = {"7D": 7, "30D": 30}
HISTORY_LIMIT = 200

_logger = logging.getLogger(__name__)


@dataclass
class ProgressService:
    """Builds daily intake, exercise and weight series."""

    api: FitnessApi

    async def load(
        self,
        range_label: str = "7D",
        timezone_name: str = "UTC",
        now: datetime | None = None,
    ) -> ProgressReport:
        """Return the series for a range label such as ``7D`` or ``30D``."""
        days_count = RANGE_DAYS.get(range_label.upper())
        if days_count is None:
            raise InputValidationError(f"Unknown range: {range_label}")
        tz = ZoneInfo(timezone_name)
        now = now.astimezone(tz) if now else datetime.now(tz=tz)
        days = day_range(now.date(), days_count)
        start = datetime.combine(days[0], time.min, tzinfo=tz)
        end = datetime.combine(days[-1], time.min, tzinfo=tz) + timedelta(days=1)

        meals = []
        try:
            meals = await self.api.meals_range(start, end - timedelta(milliseconds=1))
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Progress meals unavailable: %s", exc)
        workouts = []
        try:
            workouts = await self.api.workouts(HISTORY_LIMIT)
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Progress workouts unavailable: %s", exc)
        weights = []
        try:
            weights = await self.api.weights(HISTORY_LIMIT)
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Progress weights unavailable: %s", exc)

        points = progress_series(meals, workouts, weights, days, tz)
        return ProgressReport(
            points=points,
            meals=series_stats(point.meals_kcal for point in points),
            exercise=series_stats(point.exercise_kcal for point in points),
            net=series_stats(point.net_kcal for point in points),
            weight=series_stats(point.weight_kg or 0.0 for point in points),
        )
