"""Domain models for the food diary."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MealType(Enum):
    """Meal slots shown in the diary."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"

    @classmethod
    def normalize(cls, raw: object) -> "MealType":
        """Map free-form input onto a meal type, defaulting to snack."""
        value = str(raw or "").strip().lower()
        if value == "snacks":
            return cls.SNACK
        for member in cls:
            if member.value == value:
                return member
        return cls.SNACK


class Nutrients(BaseModel):
    """Nutrient snapshot per 100 g."""

    model_config = ConfigDict(extra="allow")

    calories: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None


class Product(BaseModel):
    """Food product returned by search or barcode lookup."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    brand: str | None = None
    image: str | None = None
    nutrients: Nutrients = Field(default_factory=Nutrients)
    ean: str | None = None
    source: str | None = None


class MealItem(BaseModel):
    """Logged food item belonging to a meal."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    meal_id: str | None = None
    food_name: str = ""
    qty: float | None = None
    unit: str | None = None
    calories: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None
    meta: dict[str, object] = Field(default_factory=dict)


class Meal(BaseModel):
    """Meal with its items."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    meal_type: str | None = None
    eaten_at: str | None = None
    notes: str | None = None
    meal_items: list[MealItem] = Field(default_factory=list)

    @property
    def slot(self) -> MealType:
        """Return the normalized meal type."""
        return MealType.normalize(self.meal_type)
