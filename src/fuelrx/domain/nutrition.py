"""Nutrition domain models."""

from dataclasses import dataclass
from typing import Literal

ConversionMethod = Literal["weight", "usda_portion", "failed"]


def format_quantity(value: float) -> str:
    """Render a number in full, dropping the fraction for whole values."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class NutritionVector:
    """Nutrient profile per 100g or per serving."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float | None = None
    sugar: float | None = None


@dataclass(frozen=True)
class ServingSpec:
    """Declared serving, e.g. 1.5 cups."""

    size: float
    unit: str


@dataclass(frozen=True)
class UsdaPortion:
    """Alternative USDA serving where `gram_weight` is the mass of `amount` units."""

    description: str
    gram_weight: float
    amount: float
    unit: str

    def label(self) -> str:
        """Human-readable portion label."""
        return f"{self.description} ({format_quantity(self.gram_weight)}g)"


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting per-100g nutrition to a serving."""

    nutrition: NutritionVector | None
    method: ConversionMethod
    gram_weight: float | None = None

    def __post_init__(self) -> None:
        if (self.nutrition is None) != (self.method == "failed"):
            raise ValueError("nutrition must be None exactly when method is 'failed'")

    @property
    def succeeded(self) -> bool:
        return self.nutrition is not None


@dataclass(frozen=True)
class UsdaFoodSummary:
    """Search hit from USDA FoodData Central."""

    fdc_id: int
    description: str
    data_type: str | None
    brand_owner: str | None


@dataclass(frozen=True)
class UsdaFood:
    """USDA food with per-100g nutrition and portions."""

    fdc_id: int
    description: str
    data_type: str | None
    nutrition_per_100g: NutritionVector
    portions: list[UsdaPortion]
