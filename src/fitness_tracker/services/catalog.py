"""Catalog of Edge Function operations used by the app."""

from dataclasses import dataclass

USER_API = "user-api"


@dataclass(frozen=True)
class Endpoint:
    """A named gateway operation."""

    name: str
    function: str
    action: str | None = None
    method: str = "GET"
    required: tuple[str, ...] = ()
    optional: bool = False
    lookup: bool = False


def _user_api(name: str, method: str = "GET", **kwargs: object) -> Endpoint:
    return Endpoint(name=name, function=USER_API, action=name, method=method, **kwargs)


ENDPOINTS: dict[str, Endpoint] = {
    endpoint.name: endpoint
    for endpoint in (
        # diary
        _user_api("meals-today"),
        _user_api("meals-range", required=("start", "end")),
        _user_api("ensure-meal-today", "POST", required=("meal_type",)),
        _user_api("create-meal", "POST", required=("meal_type",)),
        _user_api(
            "add-meal-item-manual", "POST", required=("meal_id", "food_name")
        ),
        Endpoint(
            name="add-meal-item",
            function="add-meal-item",
            method="POST",
            required=("meal_id", "product", "qty"),
            optional=True,
        ),
        Endpoint(
            name="food-search",
            function="food-search",
            required=("q", "limit"),
            lookup=True,
        ),
        Endpoint(
            name="nutrition-lookup",
            function="nutrition-lookup",
            required=("ean",),
            optional=True,
            lookup=True,
        ),
        # weight and water
        _user_api("weights", required=("limit",)),
        _user_api("add-weight", "POST", required=("weight_kg", "recorded_at")),
        _user_api("water-today", optional=True),
        _user_api("add-water", "POST", required=("ml",), optional=True),
        _user_api("steps-today", optional=True),
        # workouts
        _user_api("workouts", required=("limit",)),
        _user_api("add-workout", "POST", required=("started_at", "ended_at")),
        _user_api("last-workout", optional=True),
        _user_api("weekly-summary", optional=True),
        _user_api("workout-detail", required=("id",), optional=True),
        _user_api("start-workout", "POST", required=("name",), optional=True),
        _user_api(
            "log-set",
            "POST",
            required=("session_id", "exercise", "set_index"),
            optional=True,
        ),
        _user_api("finish-workout", "POST", required=("session_id",), optional=True),
        _user_api("recommended-workouts", optional=True),
        _user_api("favorite-workouts", optional=True),
        _user_api("save-favorite-workout", "POST", required=("name", "plan")),
        _user_api("exercises", required=("q",), optional=True, lookup=True),
        # profile and summaries
        _user_api("dashboard", optional=True),
        _user_api("profile", optional=True),
        _user_api("upsert-profile-and-goals", "POST"),
    )
}
