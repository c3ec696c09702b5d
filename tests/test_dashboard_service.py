"""Tests for the dashboard composition."""

import asyncio
from datetime import UTC, datetime

from fitness_tracker.domain.errors import ApplicationError, NetworkError
from fitness_tracker.services.dashboard import DashboardService
from fitness_tracker.services.fitness_api import FitnessApi
from fitness_tracker.services.goals import GoalsService
from fitness_tracker.services.workouts import LastWorkoutResolver
from tests.conftest import FakeFunctionsClient, InMemoryGoalsRepository

NOW = datetime(2025, 10, 6, 15, 5, tzinfo=UTC)
TODAY_WORKOUT = {
    "name": "Run",
    "started_at": "2025-10-06T10:00:00Z",
    "ended_at": "2025-10-06T11:00:00Z",
    "calories_burned": 300,
}


def _service(api: FitnessApi, goals: GoalsService) -> DashboardService:
    return DashboardService(
        api=api, goals=goals, last_workout=LastWorkoutResolver(api=api)
    )


def test_dashboard_combines_every_widget(
    api: FitnessApi,
    functions_client: FakeFunctionsClient,
    goals_service: GoalsService,
) -> None:
    functions_client.responses.update(
        {
            "meals-today": {
                "meals": [
                    {
                        "meal_type": "lunch",
                        "meal_items": [{"calories": 250, "protein_g": 20}],
                    }
                ]
            },
            "weights": {"weights": [{"weight_kg": 80}]},
            "last-workout": {"workout": TODAY_WORKOUT},
            "workouts": {"workouts": [TODAY_WORKOUT]},
            "weekly-summary": ApplicationError(
                "Unknown action: weekly-summary", status_code=400
            ),
            "steps-today": {"steps": 8234, "goal": 10000},
            "water-today": {"ml": 750},
            "recommended-workouts": {"items": [{"id": "yoga"}]},
        }
    )

    dashboard = asyncio.run(_service(api, goals_service).load(now=NOW))

    assert dashboard.totals.calories == 250
    assert dashboard.macro_goals.protein_g == 120
    assert dashboard.weight_kg == 80
    assert dashboard.weight_delta_kg == 5
    assert dashboard.last_workout is not None
    assert dashboard.last_workout.title == "Run"
    assert dashboard.activity.minutes == 60
    assert dashboard.activity.calories == 300
    assert dashboard.activity.streak == 1
    assert dashboard.weekly.workouts == 1
    assert dashboard.weekly.active_min == 60
    assert dashboard.steps == 8234
    assert dashboard.steps_goal == 10000
    assert dashboard.water_ml == 750
    assert dashboard.recommended == [{"id": "yoga"}]
    assert dashboard.remaining_kcal == 2050
    assert "dashboard" not in functions_client.keys()


def test_dashboard_prefers_server_weekly_summary(
    api: FitnessApi,
    functions_client: FakeFunctionsClient,
    goals_service: GoalsService,
) -> None:
    functions_client.responses["weekly-summary"] = {
        "workouts": 4,
        "calories": 1234.6,
        "active_min": 180,
    }

    dashboard = asyncio.run(_service(api, goals_service).load(now=NOW))

    assert dashboard.weekly.workouts == 4
    assert dashboard.weekly.calories == 1235
    assert dashboard.weekly.active_min == 180


def test_dashboard_degrades_each_widget(
    api: FitnessApi, functions_client: FakeFunctionsClient
) -> None:
    functions_client.responses.update(
        {
            "meals-today": NetworkError("offline"),
            "profile": {"profile": {"calorie_goal": 1800, "water_goal_ml": 2000}},
        }
    )
    goals = GoalsService(
        repository=InMemoryGoalsRepository(), current_user_id=lambda: None
    )

    dashboard = asyncio.run(_service(api, goals).load(now=NOW))

    assert dashboard.totals.calories == 0
    assert dashboard.goals.calories == 1800
    assert dashboard.goals.water_ml == 2000
    assert dashboard.weight_kg is None
    assert dashboard.last_workout is None
    assert dashboard.weekly.workouts == 0
    assert dashboard.steps is None
    assert dashboard.recommended == []
