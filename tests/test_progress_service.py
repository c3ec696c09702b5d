"""Tests for the progress series."""

import asyncio
from datetime import UTC, date, datetime

import pytest

from fitness_tracker.domain.errors import InputValidationError, NetworkError
from fitness_tracker.services.fitness_api import FitnessApi
from fitness_tracker.services.progress import ProgressService
from tests.conftest import FakeFunctionsClient

NOW = datetime(2025, 10, 6, 15, 5, tzinfo=UTC)


def test_seven_day_series(
    api: FitnessApi, functions_client: FakeFunctionsClient
) -> None:
    functions_client.responses.update(
        {
            "meals-range": {
                "meals": [
                    {
                        "eaten_at": "2025-10-06T08:00:00Z",
                        "meal_items": [{"calories": 600}],
                    }
                ]
            },
            "workouts": {
                "workouts": [
                    {"ended_at": "2025-10-06T18:00:00Z", "calories_burned": 200}
                ]
            },
            "weights": {
                "weights": [{"weight_kg": 81, "recorded_at": "2025-10-01T07:00:00Z"}]
            },
        }
    )

    report = asyncio.run(ProgressService(api).load("7D", now=NOW))

    assert [point.day for point in report.points][0] == date(2025, 9, 30)
    assert len(report.points) == 7
    assert report.points[-1].net_kcal == 400
    assert report.net.max == 400
    assert report.meals.avg == pytest.approx(600 / 7)
    assert report.points[0].weight_kg is None
    assert report.points[-1].weight_kg == 81
    params = functions_client.calls[0]["params"]
    assert params["start"] == "2025-09-30T00:00:00Z"
    assert params["end"] == "2025-10-06T23:59:59.999000Z"


def test_thirty_day_range_survives_failures(
    api: FitnessApi, functions_client: FakeFunctionsClient
) -> None:
    functions_client.responses["meals-range"] = NetworkError("offline")

    report = asyncio.run(ProgressService(api).load("30d", now=NOW))

    assert len(report.points) == 30
    assert report.meals.max == 0


def test_unknown_range_is_rejected(api: FitnessApi) -> None:
    with pytest.raises(InputValidationError):
        asyncio.run(ProgressService(api).load("1Y"))
