"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MacroTotals:
    """Summed calories and macros."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class MacroSplit:
    """Macro split in percent of calories."""

    carbs_pct: float
    protein_pct: float
    fat_pct: float

    @property
    def total(self) -> float:
        """Return the sum of the three percentages."""
        return self.carbs_pct + self.protein_pct + self.fat_pct


@dataclass(frozen=True)
class MacroGoals:
    """Daily macro targets in grams."""

    protein_g: int
    carbs_g: int
    fat_g: int
