"""Domain models for workouts."""

from pydantic import BaseModel, ConfigDict, Field


class WorkoutSet(BaseModel):
    """Set logged during an active workout."""

    session_id: str
    exercise: str
    set_index: int
    reps: int | None = None
    weight_kg: float | None = None


class ExercisePlanEntry(BaseModel):
    """Exercise in a favorite workout plan."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str = ""
    sets: int = 3
    reps: int = 10
    weight_kg: float | None = None


class FavoriteWorkout(BaseModel):
    """Saved workout routine."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str = "Favorite Workout"
    plan: list[ExercisePlanEntry] = Field(default_factory=list)
