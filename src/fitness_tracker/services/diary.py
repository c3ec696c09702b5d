"""Food diary workflows on top of the meal endpoints."""

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from fitness_tracker.domain.errors import InputValidationError
from fitness_tracker.domain.meals import Meal, MealItem, MealType, Product
from fitness_tracker.services.aggregation import scale_product
from fitness_tracker.services.fitness_api import FitnessApi
from fitness_tracker.services.normalize import to_optional_float

BARCODE_LENGTHS = (8, 12, 13, 14)
DEFAULT_PORTION_G = 100
PRODUCT_NOT_FOUND_MESSAGE = "Product not found. Try search or manual add."
_NON_DIGITS = re.compile(r"\D")

_logger = logging.getLogger(__name__)


def clean_barcode(code: str | None) -> str:
    """Keep the digits of a scanned code and check its length."""
    digits = _NON_DIGITS.sub("", code or "")
    if len(digits) not in BARCODE_LENGTHS:
        raise InputValidationError("Barcode must have 8, 12, 13 or 14 digits.")
    return digits


@dataclass
class DiaryService:
    """Adds foods to meals and reads the diary by day."""

    api: FitnessApi

    async def meals_for_day(
        self, day: date, timezone_name: str = "UTC"
    ) -> list[Meal]:
        """Return the meals eaten on a local calendar day."""
        tz = ZoneInfo(timezone_name)
        start = datetime.combine(day, time.min, tzinfo=tz)
        end = start + timedelta(days=1) - timedelta(milliseconds=1)
        return await self.api.meals_range(start, end)

    async def ensure_and_add(
        self,
        meal_type: str | MealType,
        product: Product,
        qty: float = DEFAULT_PORTION_G,
    ) -> list[Meal]:
        """Add a product to today's meal of a type and return today's meals."""
        meal = await self.api.ensure_meal_today(meal_type)
        await self.add_product(meal.id, product, qty)
        return await self.api.meals_today()

    async def add_product(
        self, meal_id: str, product: Product, grams: object = DEFAULT_PORTION_G
    ) -> MealItem:
        """Add a product portion, falling back to a manual item when needed.

        The quantity is floored to whole grams and never below 1 g.
        """
        qty = _whole_grams(grams)
        item = await self.api.add_meal_item_from_product(meal_id, product, qty, "g")
        if item is not None:
            return item

        _logger.info("add-meal-item unavailable, storing %r manually", product.name)
        scaled = scale_product(product, qty)
        return await self.api.add_meal_item_manual(
            meal_id,
            product.name or "Food",
            qty=qty,
            unit="g",
            calories=scaled.calories,
            protein_g=scaled.protein_g,
            carbs_g=scaled.carbs_g,
            fat_g=scaled.fat_g,
            meta={"source": product.source or "search", "ean": product.ean},
        )

    async def add_by_barcode(self, meal_id: str, code: str) -> MealItem:
        """Look a barcode up and add 100 g of the product."""
        ean = clean_barcode(code)
        product = await self.api.lookup_ean(ean)
        if product is None or not product.name:
            raise InputValidationError(PRODUCT_NOT_FOUND_MESSAGE)
        if not product.ean:
            product = product.model_copy(update={"ean": ean})
        return await self.add_product(meal_id, product, DEFAULT_PORTION_G)

    async def add_manual(  # noqa: PLR0913
        self,
        meal_id: str,
        food_name: str,
        *,
        qty: float | None = None,
        unit: str | None = "g",
        calories: float | None = None,
        protein_g: float | None = None,
        carbs_g: float | None = None,
        fat_g: float | None = None,
    ) -> MealItem:
        """Add a hand-entered food."""
        if not (food_name or "").strip():
            raise InputValidationError("Please enter a food name.")
        return await self.api.add_meal_item_manual(
            meal_id,
            food_name,
            qty=qty,
            unit=unit,
            calories=calories,
            protein_g=protein_g,
            carbs_g=carbs_g,
            fat_g=fat_g,
            meta={"source": "manual"},
        )


def _whole_grams(grams: object) -> int:
    value = to_optional_float(grams)
    if value is None:
        return 1
    return max(1, math.floor(value))
