"""USDA FoodData Central lookups with caching."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fuelrx.adapters.fdc_client import FdcClient
from fuelrx.domain.nutrition import (
    NutritionVector,
    UsdaFood,
    UsdaFoodSummary,
    UsdaPortion,
    format_quantity,
)
from fuelrx.services.cache import Cache

_NUTRIENT_IDS = {
    "energy": 1008,
    "protein": 1003,
    "carbs": 1005,
    "fat": 1004,
    "fiber": 1079,
    "sugar": 2000,
    "sugar_alt": 1063,
}

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class UsdaService:
    """Service for USDA food searches and details."""

    fdc_client: FdcClient
    cache: Cache
    search_ttl_seconds: int = 3600
    food_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(
        self, query: str, limit: int = 10, data_types: list[str] | None = None
    ) -> list[UsdaFoodSummary]:
        """Search USDA foods."""
        type_key = ",".join(data_types or [])
        cache_key = f"usda:search:{query.lower()}:{limit}:{type_key}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.search_foods(
                query, page_size=limit, data_types=data_types
            ),
            action="search",
        )
        foods = [
            UsdaFoodSummary(
                fdc_id=food["fdcId"],
                description=food.get("description", ""),
                data_type=food.get("dataType"),
                brand_owner=food.get("brandOwner"),
            )
            for food in payload.get("foods", [])
        ]
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        _logger.debug("USDA search: query=%s results=%s", query, len(foods))
        return foods

    async def get_food(self, fdc_id: int) -> UsdaFood | None:
        """Return a USDA food with per-100g nutrition, or None if unknown."""
        cache_key = f"usda:food:{fdc_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, UsdaFood):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.get_food(fdc_id),
            action=f"get_food:{fdc_id}",
        )
        if payload is None:
            _logger.warning("USDA food not found: %s", fdc_id)
            return None
        food = UsdaFood(
            fdc_id=payload.get("fdcId", fdc_id),
            description=payload.get("description", ""),
            data_type=payload.get("dataType"),
            nutrition_per_100g=extract_nutrition_per_100g(payload),
            portions=extract_portions(payload),
        )
        self.cache.set(cache_key, food, ttl_seconds=self.food_ttl_seconds)
        return food

    async def _call_with_retry(
        self,
        func: "Callable[[], Awaitable[dict[str, object] | None]]",
        *,
        action: str,
    ) -> dict[str, object] | None:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "USDA %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _nutrient_amounts(food_nutrients: list[dict[str, object]]) -> dict[int, float]:
    """Map nutrient id to amount for detail and search payload shapes."""
    amounts: dict[int, float] = {}
    for nutrient in food_nutrients:
        nutrient_info = nutrient.get("nutrient") or {}
        nutrient_id = nutrient_info.get("id") or nutrient.get("nutrientId")
        amount = nutrient.get("amount", nutrient.get("value"))
        if nutrient_id is None or isinstance(amount, bool):
            continue
        if isinstance(amount, int | float) and nutrient_id not in amounts:
            amounts[int(nutrient_id)] = float(amount)
    return amounts


def extract_nutrition_per_100g(payload: dict[str, object]) -> NutritionVector:
    """Extract per-100g macros, fiber and sugar from an FDC food payload."""
    amounts = _nutrient_amounts(payload.get("foodNutrients") or [])
    sugar = amounts.get(_NUTRIENT_IDS["sugar"])
    if sugar is None:
        sugar = amounts.get(_NUTRIENT_IDS["sugar_alt"])
    return NutritionVector(
        calories=amounts.get(_NUTRIENT_IDS["energy"], 0.0),
        protein=amounts.get(_NUTRIENT_IDS["protein"], 0.0),
        carbs=amounts.get(_NUTRIENT_IDS["carbs"], 0.0),
        fat=amounts.get(_NUTRIENT_IDS["fat"], 0.0),
        fiber=amounts.get(_NUTRIENT_IDS["fiber"]),
        sugar=sugar,
    )


def extract_portions(payload: dict[str, object]) -> list[UsdaPortion]:
    """Extract portions with a positive gram weight, keeping FDC order."""
    portions = []
    for raw in payload.get("foodPortions") or []:
        gram_weight = raw.get("gramWeight") or 0
        if gram_weight <= 0:
            continue
        amount = raw.get("amount") or 1
        measure = raw.get("measureUnit") or {}
        measure_name = measure.get("name")
        description = (
            raw.get("portionDescription")
            or raw.get("modifier")
            or f"{format_quantity(amount)} {measure_name or 'unit'}"
        )
        portions.append(
            UsdaPortion(
                description=description,
                gram_weight=float(gram_weight),
                amount=float(amount),
                unit=measure.get("abbreviation") or measure_name or "unit",
            )
        )
    return portions
