"""Pure helpers turning gateway payloads into dashboard numbers.

None of these functions raise: missing or malformed values count as zero so
a partial backend outage only blanks the affected widget.
"""

import math
from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta, tzinfo

from pydantic import BaseModel

from fitness_tracker.domain.meals import MealItem, MealType, Product
from fitness_tracker.domain.nutrition import MacroGoals, MacroSplit, MacroTotals
from fitness_tracker.domain.stats import (
    ActivityToday,
    DayPoint,
    SeriesStats,
    WeeklySummary,
    WorkoutCard,
)
from fitness_tracker.services.normalize import (
    first_value,
    parse_timestamp,
    parse_models,
    to_float,
    to_optional_float,
)

PROTEIN_G_PER_KG = 1.6
FAT_G_PER_KG = 0.8
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9

MODERATE_MET = 3.5
VIGOROUS_MET = 6.0
DEFAULT_BODY_WEIGHT_KG = 70.0
MAX_WORKOUT_MINUTES = 180
MAX_PLAUSIBLE_WORKOUT_KCAL = 3000
MAX_DAILY_EXERCISE_KCAL = 8000
MAX_STREAK_DAYS = 90
MAX_DURATION_AS_MINUTES = 1000
NOON = 12

# Field names used for workout timestamps across API versions, in priority order.
WORKOUT_TIMESTAMP_FIELDS = (
    "completed_at",
    "ended_at",
    "end_time",
    "recorded_at",
    "started_at",
    "start_time",
    "date",
)
_START_FIELDS = ("started_at", "start_time", "start")
_END_FIELDS = ("ended_at", "end_time", "completed_at", "date")
_STARTED_TODAY_FIELDS = ("started_at", "start_time", "date", "completed_at", "ended_at")
_WEEKLY_FIELDS = ("ended_at", "completed_at", "date", "started_at", "start_time")
_STREAK_FIELDS = (
    "completed_at",
    "ended_at",
    "recorded_at",
    "started_at",
    "date",
    "start_time",
)
_LABEL_FIELDS = (
    "completed_at",
    "recorded_at",
    "ended_at",
    "started_at",
    "start_time",
    "date",
)
_PROGRESS_WORKOUT_FIELDS = ("ended_at", "started_at", "recorded_at", "date")
_WEIGHT_TIME_FIELDS = ("recorded_at", "created_at", "inserted_at")


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, like the app UI does."""
    if not math.isfinite(value):
        return 0
    return math.floor(value + 0.5)


def daily_macro_totals(meals: Iterable[object]) -> MacroTotals:
    """Sum calories and macros over all items of all meals."""
    calories = protein = carbs = fat = 0.0
    for meal in _rows(meals):
        items = meal.get("meal_items")
        for item in _rows(items if isinstance(items, list) else []):
            calories += to_float(item.get("calories"))
            protein += to_float(item.get("protein_g"))
            carbs += to_float(item.get("carbs_g"))
            fat += to_float(item.get("fat_g"))
    return MacroTotals(calories=calories, protein_g=protein, carbs_g=carbs, fat_g=fat)


def derive_macro_goals(
    calorie_goal: object, split: MacroSplit | None, weight_kg: object = None
) -> MacroGoals:
    """Derive gram targets from body weight, else from the percentage split."""
    calories = to_float(calorie_goal)
    weight = to_float(weight_kg)
    if weight > 0:
        protein = max(0, round_half_up(PROTEIN_G_PER_KG * weight))
        fat = max(0, round_half_up(FAT_G_PER_KG * weight))
        used = protein * KCAL_PER_G_PROTEIN + fat * KCAL_PER_G_FAT
        carbs = round_half_up(max(0.0, calories - used) / KCAL_PER_G_CARBS)
        return MacroGoals(protein_g=protein, carbs_g=carbs, fat_g=fat)

    split = split or MacroSplit(carbs_pct=0, protein_pct=0, fat_pct=0)
    return MacroGoals(
        protein_g=max(
            0, round_half_up(calories * split.protein_pct / 100 / KCAL_PER_G_PROTEIN)
        ),
        carbs_g=max(
            0, round_half_up(calories * split.carbs_pct / 100 / KCAL_PER_G_CARBS)
        ),
        fat_g=max(0, round_half_up(calories * split.fat_pct / 100 / KCAL_PER_G_FAT)),
    )


def estimate_workout_kcal(
    elapsed_sec: object,
    weight_kg: object = DEFAULT_BODY_WEIGHT_KG,
    intensity: str = "moderate",
) -> int:
    """Estimate burned kcal with MET x 3.5 x kg / 200 x minutes."""
    met = VIGOROUS_MET if intensity == "vigorous" else MODERATE_MET
    weight = to_float(weight_kg)
    if weight <= 0:
        weight = DEFAULT_BODY_WEIGHT_KG
    minutes = max(0.0, to_float(elapsed_sec)) / 60
    return max(0, round_half_up(met * 3.5 * weight / 200 * minutes))


def workout_timestamp(row: object) -> datetime | None:
    """Resolve the effective timestamp of a workout record."""
    return _first_timestamp(row, WORKOUT_TIMESTAMP_FIELDS)


def pick_latest_workout(rows: Iterable[object]) -> dict[str, object] | None:
    """Return the workout with the newest effective timestamp."""
    epoch = datetime.fromtimestamp(0, tz=UTC)
    latest: dict[str, object] | None = None
    latest_ts = epoch
    for row in _rows(rows):
        ts = workout_timestamp(row) or epoch
        if latest is None or ts > latest_ts:
            latest, latest_ts = row, ts
    return latest


def workout_minutes(
    row: object, now: datetime | None = None, *, allow_ongoing: bool = True
) -> int:
    """Return the workout duration in minutes.

    Ongoing sessions count up to ``now`` but never more than three hours.
    """
    now = now or datetime.now(tz=UTC)
    start = _first_timestamp(row, _START_FIELDS)
    end = _first_timestamp(row, _END_FIELDS)
    if start is not None and end is not None and end > start:
        return max(1, round_half_up((end - start).total_seconds() / 60))
    if allow_ongoing and start is not None and now > start:
        elapsed = round_half_up((now - start).total_seconds() / 60)
        return min(MAX_WORKOUT_MINUTES, max(1, elapsed))
    raw = first_value(row, "duration_min", "duration")
    return max(0, round_half_up(to_float(raw)))


def workout_calories(
    row: object,
    weight_kg: object = DEFAULT_BODY_WEIGHT_KG,
    now: datetime | None = None,
) -> int:
    """Return recorded kcal when plausible, else a moderate-intensity estimate."""
    recorded = to_float(first_value(row, "calories_burned", "calories"))
    if 0 < recorded <= MAX_PLAUSIBLE_WORKOUT_KCAL:
        return round_half_up(recorded)
    minutes = min(MAX_WORKOUT_MINUTES, workout_minutes(row, now))
    return estimate_workout_kcal(minutes * 60, weight_kg)


def exercise_kcal_for_window(  # noqa: PLR0913
    rows: Iterable[object],
    weight_kg: object,
    start: datetime,
    end: datetime,
    now: datetime | None = None,
    *,
    streak_today: date | None = None,
) -> ActivityToday:
    """Sum minutes and kcal of workouts that started inside ``[start, end)``."""
    now = now or datetime.now(tz=UTC)
    rows = _rows(rows)
    minutes_total = 0
    kcal_total = 0
    for row in rows:
        started = _first_timestamp(row, _STARTED_TODAY_FIELDS)
        if started is None or started < start or started >= end:
            continue
        minutes = min(MAX_WORKOUT_MINUTES, workout_minutes(row, now))
        if not minutes:
            continue
        minutes_total += minutes
        kcal_total += workout_calories(row, weight_kg, now)
    kcal = min(MAX_DAILY_EXERCISE_KCAL, max(0, kcal_total))
    streak = workout_streak(rows, streak_today or start.date())
    return ActivityToday(minutes=minutes_total, calories=kcal, streak=streak)


def weekly_summary(
    rows: Iterable[object], weight_kg: object, now: datetime | None = None
) -> WeeklySummary:
    """Count workouts, active minutes and kcal over the last seven days."""
    now = now or datetime.now(tz=UTC)
    cutoff = now - timedelta(days=6)
    workouts = active_min = calories = 0
    for row in _rows(rows):
        ts = _first_timestamp(row, _WEEKLY_FIELDS)
        if ts is None or ts < cutoff or ts > now:
            continue
        workouts += 1
        active_min += workout_minutes(row, now)
        calories += workout_calories(row, weight_kg, now)
    return WeeklySummary(workouts=workouts, calories=calories, active_min=active_min)


def workout_streak(rows: Iterable[object], today: date) -> int:
    """Count consecutive days with a workout, ending today."""
    days = set()
    for row in _rows(rows):
        ts = _first_timestamp(row, _STREAK_FIELDS)
        if ts is not None:
            days.add(ts.astimezone(UTC).date())
    streak = 0
    for offset in range(MAX_STREAK_DAYS):
        if today - timedelta(days=offset) in days:
            streak += 1
        else:
            break
    return streak


def summarize_workout(row: object, now: datetime | None = None) -> WorkoutCard:
    """Build the "last workout" card."""
    now = now or datetime.now(tz=UTC)
    data = row if isinstance(row, dict) else {}
    completed = any(
        data.get(key) for key in ("completed", "completed_at", "ended_at", "end_time")
    )
    return WorkoutCard(
        title=str(first_value(data, "name", "title") or "Workout"),
        duration_min=_card_minutes(data),
        calories=max(
            0,
            round_half_up(
                to_float(first_value(data, "calories", "calories_burned", "kcal"))
            ),
        ),
        date_label=workout_date_label(data, now),
        completed=bool(completed),
    )


def workout_date_label(row: dict[str, object], now: datetime) -> str:
    """Return "Today • 6:30 PM"-style labels for a workout."""
    raw = row.get("date_label")
    if isinstance(raw, str) and raw.strip():
        text = raw.strip()
        if text.lower() in {"today", "yesterday"}:
            return text.lower().capitalize()
        parsed = parse_timestamp(text)
        return pretty_date(parsed, now) if parsed else text
    ts = _first_timestamp(row, _LABEL_FIELDS)
    return pretty_date(ts, now) if ts else ""


def pretty_date(moment: datetime, now: datetime) -> str:
    """Format a moment relative to ``now`` in ``now``'s timezone."""
    local = moment.astimezone(now.tzinfo or UTC)
    today = now.date()
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < NOON else "PM"
    time_str = f"{hour}:{local.minute:02d} {meridiem}"
    if local.date() == today:
        return f"Today • {time_str}"
    if local.date() == today - timedelta(days=1):
        return f"Yesterday • {time_str}"
    return f"{local:%a}, {local:%b} {local.day} • {time_str}"


def workout_volume(sets: Iterable[object]) -> float:
    """Sum weight x reps over completed sets."""
    total = 0.0
    for row in _rows(sets):
        if row.get("done") is False:
            continue
        total += to_float(row.get("weight_kg")) * to_float(row.get("reps"))
    return total


def scale_product(product: Product | dict[str, object], qty_g: object) -> MacroTotals:
    """Scale a per-100 g product to the given gram quantity."""
    data = product.model_dump() if isinstance(product, BaseModel) else product
    nutrients = data.get("nutrients") if isinstance(data, dict) else None
    nutrients = nutrients if isinstance(nutrients, dict) else {}
    factor = max(0.0, to_float(qty_g)) / 100
    return MacroTotals(
        calories=to_float(nutrients.get("calories")) * factor,
        protein_g=to_float(nutrients.get("protein_g")) * factor,
        carbs_g=to_float(nutrients.get("carbs_g")) * factor,
        fat_g=to_float(nutrients.get("fat_g")) * factor,
    )


def group_meals_by_type(meals: Iterable[object]) -> dict[MealType, list[MealItem]]:
    """Group meal items into breakfast, lunch, dinner and snack."""
    groups: dict[MealType, list[MealItem]] = {meal_type: [] for meal_type in MealType}
    for meal in _rows(meals):
        items = meal.get("meal_items")
        slot = MealType.normalize(meal.get("meal_type"))
        rows = items if isinstance(items, list) else []
        groups[slot].extend(parse_models(MealItem, rows))
    return groups


def day_range(today: date, days: int) -> list[date]:
    """Return ``days`` consecutive dates ending with ``today``."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def progress_series(
    meals: Iterable[object],
    workouts: Iterable[object],
    weights: Iterable[object],
    days: list[date],
    tz: tzinfo = UTC,
) -> list[DayPoint]:
    """Build per-day meal, exercise and weight values for the progress chart."""
    if not days:
        return []
    first, last = days[0], days[-1]

    intake: dict[date, float] = {}
    for meal in _rows(meals):
        eaten = parse_timestamp(meal.get("eaten_at"))
        if eaten is None:
            continue
        key = eaten.astimezone(tz).date()
        items = meal.get("meal_items")
        for item in _rows(items if isinstance(items, list) else []):
            intake[key] = intake.get(key, 0.0) + to_float(item.get("calories"))

    exercise: dict[date, float] = {}
    for row in _rows(workouts):
        ts = _first_timestamp(row, _PROGRESS_WORKOUT_FIELDS)
        if ts is None:
            continue
        key = ts.astimezone(tz).date()
        if key < first or key > last:
            continue
        kcal = to_float(first_value(row, "calories_burned", "calories"))
        exercise[key] = exercise.get(key, 0.0) + kcal

    latest_weights: dict[date, tuple[datetime, float]] = {}
    for row in _rows(weights):
        ts = _first_timestamp(row, _WEIGHT_TIME_FIELDS)
        value = to_optional_float(row.get("weight_kg"))
        if ts is None or value is None:
            continue
        key = ts.astimezone(tz).date()
        if key < first or key > last:
            continue
        current = latest_weights.get(key)
        if current is None or ts > current[0]:
            latest_weights[key] = (ts, value)

    points: list[DayPoint] = []
    carried: float | None = None
    for day in days:
        if day in latest_weights:
            carried = latest_weights[day][1]
        points.append(
            DayPoint(
                day=day,
                meals_kcal=intake.get(day, 0.0),
                exercise_kcal=exercise.get(day, 0.0),
                weight_kg=carried,
            )
        )
    return points


def series_stats(values: Iterable[object]) -> SeriesStats:
    """Return average, max and min of a numeric series."""
    numbers = [to_float(value) for value in values]
    if not numbers:
        return SeriesStats()
    return SeriesStats(
        avg=sum(numbers) / len(numbers),
        max=max(numbers),
        min=min(numbers),
        values=numbers,
    )


def _card_minutes(row: dict[str, object]) -> int:
    if row.get("duration_min") is not None:
        return max(0, round_half_up(to_float(row.get("duration_min"))))
    duration = to_optional_float(row.get("duration"))
    if duration is not None and duration < MAX_DURATION_AS_MINUTES:
        return max(0, round_half_up(duration))
    start = _first_timestamp(row, _START_FIELDS)
    end = _first_timestamp(row, ("completed_at", "ended_at", "end_time", "end"))
    if start is not None and end is not None and end > start:
        return max(0, round_half_up((end - start).total_seconds() / 60))
    return 0


def _first_timestamp(row: object, keys: tuple[str, ...]) -> datetime | None:
    """Return the first field of ``keys`` that holds a parsable timestamp."""
    if not isinstance(row, dict):
        return None
    for key in keys:
        value = row.get(key)
        if value is None or value == "":
            continue
        moment = parse_timestamp(value)
        if moment is not None:
            return moment
    return None


def _rows(values: object) -> list[dict[str, object]]:
    """Coerce a list of dicts or models into a list of dicts."""
    if not isinstance(values, Iterable) or isinstance(values, str | bytes | dict):
        return []
    rows: list[dict[str, object]] = []
    for value in values:
        if isinstance(value, BaseModel):
            rows.append(value.model_dump())
        elif isinstance(value, dict):
            rows.append(value)
    return rows
