"""Serving-size to USDA nutrition conversion.

Conversion order is fixed: direct weight units first, then USDA portion
matching, then a ``failed`` result that leaves stored macros untouched.
"""

import logging
import math
from collections.abc import Sequence
from types import MappingProxyType

from fuelrx.domain.nutrition import ConversionResult, NutritionVector, UsdaPortion

_logger = logging.getLogger(__name__)

GRAMS_PER_UNIT = MappingProxyType(
    {
        "g": 1.0,
        "gram": 1.0,
        "grams": 1.0,
        "oz": 28.3495,
        "ounce": 28.3495,
        "ounces": 28.3495,
        "lb": 453.592,
        "pound": 453.592,
        "pounds": 453.592,
        "kg": 1000.0,
    }
)

# Iteration order decides the canonical unit.
UNIT_ALIASES = MappingProxyType(
    {
        "cup": ("cup", "cups", "c"),
        "tbsp": ("tbsp", "tablespoon", "tablespoons", "tbs", "T"),
        "tsp": ("tsp", "teaspoon", "teaspoons", "t"),
        "whole": ("whole", "unit", "piece", "item", "each"),
        "slice": ("slice", "slices"),
        "medium": ("medium", "med"),
        "large": ("large", "lg"),
        "small": ("small", "sm"),
    }
)


def grams_per_unit(unit: str) -> float | None:
    """Return grams per unit for plain weight units."""
    return GRAMS_PER_UNIT.get(unit.lower())


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, as nutrition labels expect."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def scale_nutrition(per_100g: NutritionVector, multiplier: float) -> NutritionVector:
    """Scale a per-100g profile; calories to integers, the rest to 0.1."""

    def _tenth(value: float) -> float:
        return round_half_up(value * multiplier, 1)

    return NutritionVector(
        calories=round_half_up(per_100g.calories * multiplier),
        protein=_tenth(per_100g.protein),
        carbs=_tenth(per_100g.carbs),
        fat=_tenth(per_100g.fat),
        fiber=_tenth(per_100g.fiber) if per_100g.fiber is not None else None,
        sugar=_tenth(per_100g.sugar) if per_100g.sugar is not None else None,
    )


def canonical_unit(unit: str) -> str | None:
    """Map a unit spelling to its alias bucket, first table entry wins."""
    unit_lower = unit.lower()
    for canonical, aliases in UNIT_ALIASES.items():
        if unit_lower in aliases or canonical in unit_lower:
            return canonical
    return None


def find_matching_portion(
    portions: Sequence[UsdaPortion], serving_size: float, serving_unit: str
) -> float | None:
    """Return grams for the serving from the first matching USDA portion.

    This is a first-match linear scan over ``portions`` in the given order,
    not a ranking. Ambiguous lists resolve to whichever portion comes first.
    """
    unit_lower = serving_unit.lower()
    canonical = canonical_unit(serving_unit)

    for portion in portions:
        description = portion.description.lower()
        portion_unit = portion.unit.lower()
        if portion_unit == unit_lower or unit_lower in description:
            return portion.gram_weight / portion.amount * serving_size
        if canonical and (canonical in portion_unit or canonical in description):
            return portion.gram_weight / portion.amount * serving_size

    return None


def convert_serving(
    per_100g: NutritionVector,
    serving_size: float,
    serving_unit: str,
    portions: Sequence[UsdaPortion],
) -> ConversionResult:
    """Convert per-100g nutrition to the declared serving.

    A blank unit never converts; an empty string would otherwise match the
    first USDA portion description.
    """
    if not serving_unit.strip():
        _logger.warning(
            'Cannot convert "%s %s" to grams - serving unit is blank',
            serving_size,
            serving_unit,
        )
        return ConversionResult(nutrition=None, method="failed")

    unit_grams = grams_per_unit(serving_unit)
    if unit_grams:
        serving_grams = serving_size * unit_grams
        return ConversionResult(
            nutrition=scale_nutrition(per_100g, serving_grams / 100),
            method="weight",
            gram_weight=serving_grams,
        )

    portion_grams = find_matching_portion(portions, serving_size, serving_unit)
    if portion_grams is not None and portion_grams > 0:
        return ConversionResult(
            nutrition=scale_nutrition(per_100g, portion_grams / 100),
            method="usda_portion",
            gram_weight=portion_grams,
        )

    _logger.warning(
        'Cannot convert "%s %s" to grams - no weight conversion or USDA portion '
        "data available",
        serving_size,
        serving_unit,
    )
    return ConversionResult(nutrition=None, method="failed")
