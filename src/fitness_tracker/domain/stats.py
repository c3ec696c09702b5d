"""Domain models for dashboard statistics."""

from dataclasses import dataclass, field
from datetime import date

from fitness_tracker.domain.goals import Goals
from fitness_tracker.domain.nutrition import MacroGoals, MacroTotals


@dataclass(frozen=True)
class WeeklySummary:
    """Workout totals over the last seven days."""

    workouts: int
    calories: int
    active_min: int


@dataclass(frozen=True)
class WorkoutCard:
    """View-ready summary of a single workout."""

    title: str
    duration_min: int
    calories: int
    date_label: str
    completed: bool


@dataclass(frozen=True)
class ActivityToday:
    """Exercise minutes and calories for the current day."""

    minutes: int
    calories: int
    streak: int


@dataclass(frozen=True)
class DayPoint:
    """Daily values plotted on the progress screen."""

    day: date
    meals_kcal: float
    exercise_kcal: float
    weight_kg: float | None

    @property
    def net_kcal(self) -> float:
        """Return food minus exercise calories."""
        return self.meals_kcal - self.exercise_kcal


@dataclass
class SeriesStats:
    """Average, maximum and minimum of a series."""

    avg: float = 0.0
    max: float = 0.0
    min: float = 0.0
    values: list[float] = field(default_factory=list)


@dataclass
class Dashboard:
    """Everything the home screen shows, each widget degraded independently."""

    totals: MacroTotals
    goals: Goals
    macro_goals: MacroGoals
    activity: ActivityToday
    weekly: WeeklySummary
    weight_kg: float | None = None
    weight_delta_kg: float = 0.0
    last_workout: WorkoutCard | None = None
    steps: int | None = None
    steps_goal: int | None = None
    water_ml: float | None = None
    recommended: list[dict[str, object]] = field(default_factory=list)

    @property
    def net_kcal(self) -> float:
        """Return food minus exercise calories for today."""
        return self.totals.calories - self.activity.calories

    @property
    def remaining_kcal(self) -> int:
        """Return the calorie goal left after the net intake."""
        return round(self.goals.calories - self.net_kcal)


@dataclass
class ProgressReport:
    """Daily series and their summary statistics for a period."""

    points: list[DayPoint]
    meals: SeriesStats
    exercise: SeriesStats
    net: SeriesStats
    weight: SeriesStats
