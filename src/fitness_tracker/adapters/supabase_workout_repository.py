"""Supabase repository reading workout sessions straight from the tables."""

import logging
from dataclasses import dataclass

from supabase import Client, PostgrestAPIError

from fitness_tracker.services.workouts import WorkoutHistory

WORKOUT_TABLES = ("workout_sessions", "workouts")
ORDER_COLUMNS = ("ended_at", "completed_at", "recorded_at", "started_at")
WORKOUT_COLUMNS = (
    "id,name,calories_burned,calories,started_at,start_time,ended_at,end_time,"
    "completed_at,recorded_at,title,date,duration,duration_min"
)

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseWorkoutRepository(WorkoutHistory):
    """Direct table access used when no workout endpoint answers.

    Row level security scopes the rows to the signed-in user.
    """

    client: Client

    def recent_sessions(self, limit: int = 10) -> list[dict[str, object]]:
        """Return the newest rows of the first table and column that work."""
        for table in WORKOUT_TABLES:
            for column in ORDER_COLUMNS:
                try:
                    response = (
                        self.client.table(table)
                        .select(WORKOUT_COLUMNS)
                        .order(column, desc=True)
                        .limit(limit)
                        .execute()
                    )
                except PostgrestAPIError as exc:
                    _logger.debug("Query on %s by %s failed: %s", table, column, exc)
                    continue
                rows = [row for row in response.data or [] if isinstance(row, dict)]
                if rows:
                    return rows
                break
        return []
