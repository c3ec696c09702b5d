"""Domain models for user goals."""

from dataclasses import dataclass

from fitness_tracker.domain.nutrition import MacroSplit

WATER_CUP_ML = 250


@dataclass(frozen=True)
class Goals:
    """Current goal values for a user."""

    calories: float = 2000
    carbs_pct: float = 40
    protein_pct: float = 30
    fat_pct: float = 30
    weight: float = 75
    water_cups: float = 12
    workout_days: float = 3

    @property
    def macro_split(self) -> MacroSplit:
        """Return the macro split as a value object."""
        return MacroSplit(
            carbs_pct=self.carbs_pct,
            protein_pct=self.protein_pct,
            fat_pct=self.fat_pct,
        )

    @property
    def water_ml(self) -> float:
        """Return the water target in millilitres."""
        return self.water_cups * WATER_CUP_ML


@dataclass(frozen=True)
class GoalRow:
    """Row of the goals table."""

    goal_type: str
    target_value: float
    unit: str | None


GOAL_UNITS: dict[str, str] = {
    "calories": "kcal",
    "carbs_pct": "%",
    "protein_pct": "%",
    "fat_pct": "%",
    "weight": "kg",
    "water_cups": "cups",
    "workout_days": "days/week",
}
