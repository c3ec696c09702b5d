"""Supabase repository for goals."""

from dataclasses import dataclass

from supabase import Client

from fitness_tracker.domain.goals import GoalRow
from fitness_tracker.services.goals import GoalsRepository


@dataclass
class SupabaseGoalsRepository(GoalsRepository):
    """Supabase implementation for the goals table.

    A goal type has at most one current row, the one whose ``end_date`` is
    null.
    """

    client: Client

    def list_current(self, user_id: str) -> list[GoalRow]:
        """Return the active goal rows of a user."""
        response = (
            self.client.table("goals")
            .select("goal_type,target_value,unit")
            .eq("user_id", user_id)
            .is_("end_date", "null")
            .execute()
        )
        return [_parse_row(row) for row in response.data or [] if row.get("goal_type")]

    def replace_current(self, user_id: str, row: GoalRow) -> None:
        """Delete the active row of this goal type and insert the new one."""
        (
            self.client.table("goals")
            .delete()
            .eq("user_id", user_id)
            .eq("goal_type", row.goal_type)
            .is_("end_date", "null")
            .execute()
        )
        self.client.table("goals").insert(
            {
                "user_id": user_id,
                "goal_type": row.goal_type,
                "target_value": row.target_value,
                "unit": row.unit,
                "end_date": None,
            }
        ).execute()


def _parse_row(row: dict[str, object]) -> GoalRow:
    return GoalRow(
        goal_type=str(row["goal_type"]),
        target_value=float(row.get("target_value") or 0.0),
        unit=row.get("unit"),
    )
