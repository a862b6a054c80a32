"""Ingredient nutrition domain models."""

from dataclasses import dataclass
from typing import Literal

from fuelrx.domain.nutrition import ConversionMethod, NutritionVector, ServingSpec


@dataclass(frozen=True)
class IngredientNutritionRecord:
    """Stored per-serving nutrition for an ingredient."""

    id: str
    ingredient_name: str
    serving_size: float
    serving_unit: str
    calories: float
    protein: float
    carbs: float
    fat: float
    source: str | None = None
    usda_fdc_id: str | None = None
    usda_match_status: str | None = None

    @property
    def serving(self) -> ServingSpec:
        return ServingSpec(size=self.serving_size, unit=self.serving_unit)


@dataclass(frozen=True)
class UsdaMatchApplication:
    """Result of applying a USDA match to an ingredient nutrition record."""

    nutrition_id: str
    fdc_id: int
    usda_description: str
    nutrition_per_100g: NutritionVector
    updated_nutrition: bool
    conversion_successful: bool
    conversion_method: ConversionMethod | Literal["none"]
    calculated_gram_weight: float | None
    serving_size: float
    serving_unit: str
    available_portions: list[str]
    message: str
