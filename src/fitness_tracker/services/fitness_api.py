"""Named operations of the fitness tracker backend."""

import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time

from pydantic import BaseModel

from fitness_tracker.adapters.functions_client import FunctionsClient
from fitness_tracker.domain.errors import (
    ApplicationError,
    InputValidationError,
    ResponseShapeError,
    TransportError,
)
from fitness_tracker.domain.meals import Meal, MealItem, MealType, Product
from fitness_tracker.domain.workouts import (
    ExercisePlanEntry,
    FavoriteWorkout,
    WorkoutSet,
)
from fitness_tracker.services.cache import Cache, LruCache
from fitness_tracker.services.cancellation import CancellationToken
from fitness_tracker.services.catalog import ENDPOINTS, Endpoint
from fitness_tracker.services.normalize import (
    ModelT,
    extract_list,
    extract_object,
    parse_models,
    parse_timestamp,
    to_optional_float,
)
from fitness_tracker.services.optional import optional_call

MIN_SEARCH_CHARS = 2
DEFAULT_LOOKUP_TIMEOUT_SECONDS = 8.0
WEIGHT_FALLBACK_LIMIT = 50

_logger = logging.getLogger(__name__)
_WHITESPACE = re.compile(r"\s+")


def normalize_query(query: str | None) -> str:
    """Normalize a search query for caching."""
    return _WHITESPACE.sub(" ", (query or "").strip()).lower()


@dataclass
class FitnessApi:
    """Catalog-driven access to the Edge Functions.

    Required operations raise on failure; optional ones resolve to None when
    the backend does not implement them yet.
    """

    client: FunctionsClient
    food_cache: Cache = field(default_factory=LruCache)
    lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT_SECONDS

    async def call(
        self,
        name: str,
        *,
        params: dict[str, object] | None = None,
        body: dict[str, object] | None = None,
        cancel: CancellationToken | None = None,
    ) -> object:
        """Invoke a catalog operation by name."""
        endpoint = ENDPOINTS[name]
        _check_required(endpoint, params, body)
        query: dict[str, object] = {}
        if endpoint.action:
            query["action"] = endpoint.action
        query.update(params or {})

        async def _request() -> object:
            return await self.client.request(
                endpoint.function,
                method=endpoint.method,
                params=query,
                body=body,
                cancel=cancel,
                timeout=self.lookup_timeout if endpoint.lookup else None,
            )

        if endpoint.optional:
            return await optional_call(_request)
        return await _request()

    # --- summaries -------------------------------------------------------

    async def dashboard(self) -> dict[str, object] | None:
        """Return the server-side dashboard bundle, if deployed."""
        return _as_dict(await self.call("dashboard"))

    async def profile(self) -> dict[str, object] | None:
        """Return the user's profile, if deployed."""
        return extract_object(await self.call("profile"), "profile")

    async def upsert_profile_and_goals(self, **fields: object) -> object:
        """Store profile fields and goal targets in one call."""
        payload = {key: value for key, value in fields.items() if value is not None}
        return await self.call("upsert-profile-and-goals", body=payload)

    async def steps_today(self) -> dict[str, object] | None:
        """Return today's step count, if deployed."""
        return _as_dict(await self.call("steps-today"))

    # --- diary -----------------------------------------------------------

    async def meals_today(self) -> list[Meal]:
        """Return today's meals with their items."""
        payload = await self.call("meals-today")
        return parse_models(Meal, extract_list(payload, "meals", "items"))

    async def meals_range(
        self, start: datetime | str, end: datetime | str
    ) -> list[Meal]:
        """Return meals eaten between two instants."""
        payload = await self.call(
            "meals-range", params={"start": _iso(start), "end": _iso(end)}
        )
        return parse_models(Meal, extract_list(payload, "meals", "items"))

    async def ensure_meal_today(self, meal_type: str | MealType) -> Meal:
        """Return today's meal of a type, creating it when missing."""
        slot = _slot(meal_type)
        payload = await self.call("ensure-meal-today", body={"meal_type": slot})
        return _expect_model(Meal, payload, "meal")

    async def create_meal(
        self, meal_type: str | MealType, eaten_at: datetime | str | None = None
    ) -> Meal:
        """Create a meal, optionally on another date."""
        body: dict[str, object] = {"meal_type": _slot(meal_type)}
        if eaten_at is not None:
            body["eaten_at"] = _iso(eaten_at)
        payload = await self.call("create-meal", body=body)
        return _expect_model(Meal, payload, "meal")

    async def add_meal_item_manual(  # noqa: PLR0913
        self,
        meal_id: str,
        food_name: str,
        *,
        qty: float | None = None,
        unit: str | None = None,
        calories: float | None = None,
        protein_g: float | None = None,
        carbs_g: float | None = None,
        fat_g: float | None = None,
        meta: dict[str, object] | None = None,
    ) -> MealItem:
        """Add a hand-entered item to a meal."""
        name = (food_name or "").strip()
        if not name:
            raise InputValidationError("Please enter a food name.")
        payload = await self.call(
            "add-meal-item-manual",
            body={
                "meal_id": meal_id,
                "food_name": name,
                "qty": qty,
                "unit": unit,
                "calories": calories,
                "protein_g": protein_g,
                "carbs_g": carbs_g,
                "fat_g": fat_g,
                "meta": meta or {"source": "manual"},
            },
        )
        return _expect_model(MealItem, payload, "item")

    async def add_meal_item_from_product(
        self,
        meal_id: str,
        product: Product,
        qty: float = 100,
        unit: str = "g",
    ) -> MealItem | None:
        """Add a searched or scanned product; the server scales the nutrients."""
        payload = await self.call(
            "add-meal-item",
            body={
                "meal_id": meal_id,
                "product": product.model_dump(exclude_none=True),
                "qty": qty,
                "unit": unit,
            },
        )
        if payload is None:
            return None
        return _expect_model(MealItem, payload, "item")

    async def search_foods(
        self,
        query: str | None,
        limit: int = 25,
        cancel: CancellationToken | None = None,
    ) -> list[Product]:
        """Search foods, caching results per normalized query and limit."""
        normalized = normalize_query(query)
        if len(normalized) < MIN_SEARCH_CHARS:
            return []
        cache_key = f"food-search:{normalized}:{limit}"
        cached = self.food_cache.get(cache_key)
        if isinstance(cached, list):
            return list(cached)

        payload = await self.call(
            "food-search",
            params={"q": (query or "").strip(), "limit": limit},
            cancel=cancel,
        )
        products = parse_models(Product, extract_list(payload, "products", "items"))
        self.food_cache.set(cache_key, products)
        _logger.debug("Food search %r returned %s products", normalized, len(products))
        return list(products)

    async def lookup_ean(self, ean: str) -> Product | None:
        """Look a product up by barcode, if the lookup is deployed."""
        payload = await self.call("nutrition-lookup", params={"ean": ean})
        product = extract_object(payload, "product")
        if product is None:
            return None
        parsed = parse_models(Product, [product])
        return parsed[0] if parsed else None

    # --- weight and water ------------------------------------------------

    async def weights(
        self, limit: int = 30, before: datetime | str | None = None
    ) -> list[dict[str, object]]:
        """Return recent weight entries, newest first."""
        params: dict[str, object] = {"limit": limit}
        if before is not None:
            params["before"] = _iso(before)
        payload = await self.call("weights", params=params)
        return [
            row
            for row in extract_list(payload, "weights", "items")
            if isinstance(row, dict)
        ]

    async def latest_weight(self) -> dict[str, object] | None:
        """Return the newest weight entry."""
        rows = await self.weights(limit=1)
        return rows[0] if rows else None

    async def weight_on_date(
        self, day: date | datetime | str
    ) -> dict[str, object] | None:
        """Return the newest weight recorded on or before a UTC day."""
        end_of_day = _end_of_day(day)
        try:
            rows = await self.weights(limit=1, before=end_of_day)
        except (ApplicationError, ResponseShapeError, TransportError) as exc:
            _logger.warning("Weight lookup with 'before' failed: %s", exc)
            rows = []
        if rows:
            return rows[0]

        candidates = []
        for row in await self.weights(limit=WEIGHT_FALLBACK_LIMIT):
            recorded = parse_timestamp(row.get("recorded_at"))
            if recorded is not None and recorded <= end_of_day:
                candidates.append((recorded, row))
        if not candidates:
            return None
        return max(candidates, key=lambda pair: pair[0])[1]

    async def add_weight(
        self, weight_kg: float, recorded_at: datetime | str | None = None
    ) -> object:
        """Record a body weight measurement."""
        value = to_optional_float(weight_kg)
        if value is None or value <= 0:
            raise InputValidationError("Please enter your weight in kg.")
        when = recorded_at if recorded_at is not None else datetime.now(tz=UTC)
        return await self.call(
            "add-weight", body={"weight_kg": value, "recorded_at": _iso(when)}
        )

    async def water_today(self) -> dict[str, object] | None:
        """Return today's water intake, if deployed."""
        return _as_dict(await self.call("water-today"))

    async def add_water(self, ml: float, at: datetime | str | None = None) -> object:
        """Log water intake in millilitres."""
        body: dict[str, object] = {"ml": ml}
        if at is not None:
            body["at"] = _iso(at)
        return await self.call("add-water", body=body)

    # --- workouts --------------------------------------------------------

    async def workouts(self, limit: int = 20) -> list[dict[str, object]]:
        """Return recent workout sessions."""
        payload = await self.call("workouts", params={"limit": limit})
        return [
            row
            for row in extract_list(payload, "workouts", "items")
            if isinstance(row, dict)
        ]

    async def last_workout(self) -> dict[str, object] | None:
        """Return the most recent workout, if the endpoint is deployed."""
        payload = await self.call("last-workout")
        if isinstance(payload, dict) and "workout" in payload:
            return _as_dict(payload["workout"])
        return _as_dict(payload)

    async def weekly_summary(self) -> dict[str, object] | None:
        """Return the server-computed weekly summary, if deployed."""
        return _as_dict(await self.call("weekly-summary"))

    async def workout_detail(self, workout_id: str) -> dict[str, object] | None:
        """Return one workout with its sets."""
        payload = await self.call("workout-detail", params={"id": workout_id})
        return extract_object(payload, "workout")

    async def add_workout(  # noqa: PLR0913
        self,
        started_at: datetime | str,
        ended_at: datetime | str,
        *,
        duration_sec: int | None = None,
        calories_burned: int | None = None,
        sets: list[dict[str, object]] | None = None,
        notes: str = "",
    ) -> object:
        """Store a completed workout in one call."""
        return await self.call(
            "add-workout",
            body={
                "notes": notes,
                "started_at": _iso(started_at),
                "ended_at": _iso(ended_at),
                "duration_sec": duration_sec,
                "calories_burned": calories_burned,
                "sets": sets or [],
            },
        )

    async def start_workout(self, name: str) -> dict[str, object] | None:
        """Open a workout session on the server."""
        return _as_dict(await self.call("start-workout", body={"name": name}))

    async def log_set(self, workout_set: WorkoutSet) -> object:
        """Log one set of the active workout."""
        return await self.call("log-set", body=workout_set.model_dump())

    async def finish_workout(
        self,
        session_id: str,
        notes: str | None = None,
        calories_burned: int | None = None,
    ) -> object:
        """Close a workout session."""
        return await self.call(
            "finish-workout",
            body={
                "session_id": session_id,
                "notes": notes,
                "calories_burned": calories_burned,
            },
        )

    async def recommended_workouts(self) -> list[dict[str, object]] | None:
        """Return recommended workouts, if deployed."""
        payload = await self.call("recommended-workouts")
        if payload is None:
            return None
        return [
            row
            for row in extract_list(payload, "items", "workouts", "recommended")
            if isinstance(row, dict)
        ]

    async def favorite_workouts(self) -> list[FavoriteWorkout] | None:
        """Return saved favorite workouts, if deployed."""
        payload = await self.call("favorite-workouts")
        if payload is None:
            return None
        return parse_models(
            FavoriteWorkout, extract_list(payload, "items", "favorites")
        )

    async def save_favorite_workout(
        self, name: str, plan: list[ExercisePlanEntry | dict[str, object]]
    ) -> object:
        """Save a workout plan as a favorite."""
        title = (name or "").strip()
        if not title:
            raise InputValidationError("Please enter a name for this workout.")
        entries = [
            entry.model_dump(exclude_none=True)
            if isinstance(entry, BaseModel)
            else dict(entry)
            for entry in plan
        ]
        return await self.call(
            "save-favorite-workout", body={"name": title, "plan": entries}
        )

    async def search_exercises(
        self,
        query: str | None,
        limit: int = 50,
        cancel: CancellationToken | None = None,
    ) -> list[dict[str, object]] | None:
        """Search the exercise catalog, if deployed."""
        payload = await self.call(
            "exercises",
            params={"q": (query or "").strip(), "limit": limit},
            cancel=cancel,
        )
        if payload is None:
            return None
        return [
            row
            for row in extract_list(payload, "items", "exercises")
            if isinstance(row, dict)
        ]


def _check_required(
    endpoint: Endpoint,
    params: dict[str, object] | None,
    body: dict[str, object] | None,
) -> None:
    provided: dict[str, object] = {**(params or {}), **(body or {})}
    missing = [key for key in endpoint.required if provided.get(key) is None]
    if missing:
        raise InputValidationError(
            f"{endpoint.name}: missing required parameter(s): {', '.join(missing)}"
        )


def _expect_model(model: type[ModelT], payload: object, key: str) -> ModelT:
    """Return ``payload[key]`` as a model or raise a shape error."""
    data = extract_object(payload, key)
    parsed = parse_models(model, [data] if data is not None else [])
    if not parsed:
        raise ResponseShapeError(f"Expected '{key}' object in response")
    return parsed[0]


def _as_dict(payload: object) -> dict[str, object] | None:
    return payload if isinstance(payload, dict) else None


def _slot(meal_type: str | MealType) -> str:
    if isinstance(meal_type, MealType):
        return meal_type.value
    return MealType.normalize(meal_type).value


def _iso(value: datetime | date | str) -> str:
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=UTC)
        return moment.astimezone(UTC).isoformat().replace("+00:00", "Z")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _end_of_day(day: date | datetime | str) -> datetime:
    if isinstance(day, datetime):
        day_value = day.astimezone(UTC).date() if day.tzinfo else day.date()
    elif isinstance(day, date):
        day_value = day
    else:
        day_value = date.fromisoformat(str(day)[:10])
    return datetime.combine(day_value, time(23, 59, 59, 999000), tzinfo=UTC)
