"""Tests for last-workout resolution."""

import asyncio
from dataclasses import dataclass, field

from fitness_tracker.domain.errors import ApplicationError, NetworkError
from fitness_tracker.services.fitness_api import FitnessApi
from fitness_tracker.services.workouts import LastWorkoutResolver
from tests.conftest import FakeFunctionsClient


@dataclass
class FakeHistory:
    rows: list[dict[str, object]] = field(default_factory=list)
    limits: list[int] = field(default_factory=list)

    def recent_sessions(self, limit: int = 10) -> list[dict[str, object]]:
        self.limits.append(limit)
        return self.rows


def test_last_workout_endpoint_wins(
    api: FitnessApi, functions_client: FakeFunctionsClient
) -> None:
    functions_client.responses["last-workout"] = {"workout": {"id": "w1"}}

    workout = asyncio.run(LastWorkoutResolver(api=api).resolve())

    assert workout == {"id": "w1"}
    assert functions_client.keys() == ["last-workout"]


def test_dashboard_camel_case_key_is_used(
    api: FitnessApi, functions_client: FakeFunctionsClient
) -> None:
    functions_client.responses.update(
        {
            "last-workout": ApplicationError("Unknown action", status_code=400),
            "dashboard": {"lastWorkout": {"id": "w2"}},
        }
    )

    workout = asyncio.run(LastWorkoutResolver(api=api).resolve())

    assert workout == {"id": "w2"}


def test_recent_workouts_pick_the_latest(
    api: FitnessApi, functions_client: FakeFunctionsClient
) -> None:
    functions_client.responses["workouts"] = {
        "items": [
            {"id": "old", "ended_at": "2025-10-01T10:00:00Z"},
            {"id": "new", "ended_at": "2025-10-05T10:00:00Z"},
        ]
    }

    workout = asyncio.run(LastWorkoutResolver(api=api).resolve())

    assert workout["id"] == "new"
    assert functions_client.calls[-1]["params"]["limit"] == 25


def test_failing_strategies_fall_through_to_tables(
    api: FitnessApi, functions_client: FakeFunctionsClient
) -> None:
    functions_client.responses["workouts"] = NetworkError("offline")
    history = FakeHistory(rows=[{"id": "direct", "started_at": "2025-10-06T08:00:00Z"}])

    workout = asyncio.run(LastWorkoutResolver(api=api, history=history).resolve())

    assert workout["id"] == "direct"
    assert history.limits == [10]


def test_nothing_found_resolves_to_none(api: FitnessApi) -> None:
    assert asyncio.run(LastWorkoutResolver(api=api).resolve()) is None


def test_custom_strategies_run_in_order(api: FitnessApi) -> None:
    order: list[str] = []

    async def empty() -> None:
        order.append("empty")

    async def found() -> dict[str, object]:
        order.append("found")
        return {"id": "custom"}

    resolver = LastWorkoutResolver(
        api=api, strategies=(("empty", empty), ("found", found))
    )

    assert asyncio.run(resolver.resolve()) == {"id": "custom"}
    assert order == ["empty", "found"]
