"""Home screen composition."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TypeVar
from zoneinfo import ZoneInfo

from fitness_tracker.domain.goals import WATER_CUP_ML, Goals
from fitness_tracker.domain.stats import Dashboard, WeeklySummary
from fitness_tracker.services.aggregation import (
    DEFAULT_BODY_WEIGHT_KG,
    daily_macro_totals,
    derive_macro_goals,
    exercise_kcal_for_window,
    round_half_up,
    summarize_workout,
    weekly_summary,
)
from fitness_tracker.services.fitness_api import FitnessApi
from fitness_tracker.services.goals import GoalsService
from fitness_tracker.services.normalize import first_value, to_float, to_optional_float
from fitness_tracker.services.workouts import LastWorkoutResolver

TODAY_WORKOUTS_LIMIT = 120
WEEK_WORKOUTS_LIMIT = 60
RECOMMENDED_LIMIT = 6

T = TypeVar("T")

_logger = logging.getLogger(__name__)


@dataclass
class DashboardService:
    """Loads the home screen widgets, degrading each one on its own."""

    api: FitnessApi
    goals: GoalsService
    last_workout: LastWorkoutResolver
    default_weight_kg: float = DEFAULT_BODY_WEIGHT_KG

    async def load(
        self, timezone_name: str = "UTC", now: datetime | None = None
    ) -> Dashboard:
        """Return the dashboard for the user's local day."""
        tz = ZoneInfo(timezone_name)
        now = now.astimezone(tz) if now else datetime.now(tz=tz)
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1)

        meals = await self._safe("meals", self.api.meals_today, [])
        totals = daily_macro_totals(meals)
        goals = await self._load_goals()

        weight_row = await self._safe("weight", self.api.latest_weight)
        weight_kg = to_optional_float(
            first_value(weight_row, "weight_kg", "value_kg", "kg")
        )
        weight_delta = weight_kg - goals.weight if weight_kg is not None else 0.0
        body_weight = weight_kg or goals.weight or self.default_weight_kg

        workout = await self._safe("last workout", self.last_workout.resolve)
        card = summarize_workout(workout, now) if workout else None

        today_rows = await self._safe(
            "today", lambda: self.api.workouts(TODAY_WORKOUTS_LIMIT), []
        )
        activity = exercise_kcal_for_window(
            today_rows, body_weight, start, end, now, streak_today=now.date()
        )
        weekly = await self._weekly(body_weight, now)

        steps = await self._safe("steps", self.api.steps_today)
        water = await self._safe("water", self.api.water_today)
        recommended = await self._safe("recommended", self.api.recommended_workouts)

        return Dashboard(
            totals=totals,
            goals=goals,
            macro_goals=derive_macro_goals(
                goals.calories, goals.macro_split, goals.weight
            ),
            activity=activity,
            weekly=weekly,
            weight_kg=weight_kg,
            weight_delta_kg=weight_delta,
            last_workout=card,
            steps=_optional_int(first_value(steps, "steps", "value")),
            steps_goal=_optional_int(first_value(steps, "goal")),
            water_ml=to_optional_float(first_value(water, "ml", "value_ml")),
            recommended=list(recommended or [])[:RECOMMENDED_LIMIT],
        )

    async def _load_goals(self) -> Goals:
        goals = await self._safe(
            "goals", lambda: asyncio.to_thread(self.goals.get_goals)
        )
        if goals is not None:
            return goals
        profile = await self._safe("profile", self.api.profile)
        if not profile:
            return Goals()
        defaults = Goals()
        return Goals(
            calories=to_float(profile.get("calorie_goal"), defaults.calories),
            weight=to_float(profile.get("target_weight_kg"), defaults.weight),
            water_cups=to_float(profile.get("water_goal_ml"), defaults.water_ml)
            / WATER_CUP_ML,
        )

    async def _weekly(self, weight_kg: float, now: datetime) -> WeeklySummary:
        server = await self._safe("weekly summary", self.api.weekly_summary)
        if server:
            return WeeklySummary(
                workouts=int(to_float(server.get("workouts"))),
                calories=round_half_up(to_float(server.get("calories"))),
                active_min=int(to_float(server.get("active_min"))),
            )
        rows = await self._safe(
            "week", lambda: self.api.workouts(WEEK_WORKOUTS_LIMIT), []
        )
        return weekly_summary(rows, weight_kg, now)

    async def _safe(
        self,
        widget: str,
        call: Callable[[], Awaitable[T]],
        default: T | None = None,
    ) -> T | None:
        try:
            return await call()
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Dashboard widget %s unavailable: %s", widget, exc)
            return default


def _optional_int(value: object) -> int | None:
    number = to_optional_float(value)
    return None if number is None else round_half_up(number)

