"""Applying USDA matches to stored ingredient nutrition."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from fuelrx.domain.ingredients import IngredientNutritionRecord, UsdaMatchApplication
from fuelrx.domain.nutrition import (
    ConversionResult,
    ServingSpec,
    UsdaFood,
    format_quantity,
)
from fuelrx.errors import NutritionRecordNotFoundError, UsdaFoodNotFoundError
from fuelrx.services.audit import AuditService
from fuelrx.services.serving_conversion import convert_serving, round_half_up
from fuelrx.services.usda import UsdaService

USDA_CONFIDENCE_SCORE = 0.95

_logger = logging.getLogger(__name__)


class IngredientNutritionRepository(Protocol):
    """Persistence interface for ingredient nutrition rows."""

    def get_nutrition(self, nutrition_id: str) -> IngredientNutritionRecord | None:
        """Return a nutrition record with ingredient details."""

    def update_nutrition(self, nutrition_id: str, payload: dict[str, object]) -> None:
        """Apply a partial update to a nutrition record."""


@dataclass(frozen=True)
class ApplyUsdaMatch:
    """Parameters for applying a USDA food to a nutrition record."""

    nutrition_id: str
    fdc_id: int
    confidence: float = 1.0
    reasoning: str = "Manual admin selection"
    update_nutrition: bool = True
    is_manual_override: bool = False


@dataclass
class IngredientNutritionService:
    """Service that writes USDA reference data and serving macros."""

    repository: IngredientNutritionRepository
    usda_service: UsdaService
    audit_service: AuditService

    async def preview_conversion(
        self, fdc_id: int, serving: ServingSpec
    ) -> tuple[UsdaFood, ConversionResult]:
        """Convert a USDA food to a serving without persisting anything."""
        food = await self._require_food(fdc_id)
        result = convert_serving(
            food.nutrition_per_100g, serving.size, serving.unit, food.portions
        )
        return food, result

    async def apply_usda_match(
        self, request: ApplyUsdaMatch, admin_user_id: str
    ) -> UsdaMatchApplication:
        """Store USDA per-100g values and, when possible, per-serving macros."""
        record = self.repository.get_nutrition(request.nutrition_id)
        if record is None:
            raise NutritionRecordNotFoundError(request.nutrition_id)
        food = await self._require_food(request.fdc_id)

        match_status = "manual_override" if request.is_manual_override else "matched"
        now = datetime.now(tz=UTC).isoformat()
        per_100g = food.nutrition_per_100g
        update: dict[str, object] = {
            "usda_fdc_id": str(request.fdc_id),
            "usda_match_status": match_status,
            "usda_matched_at": now,
            "usda_match_confidence": request.confidence,
            "usda_match_reasoning": request.reasoning,
            "usda_calories_per_100g": per_100g.calories,
            "usda_protein_per_100g": per_100g.protein,
            "usda_carbs_per_100g": per_100g.carbs,
            "usda_fat_per_100g": per_100g.fat,
            "usda_fiber_per_100g": per_100g.fiber,
            "usda_sugar_per_100g": per_100g.sugar,
            "source": "usda",
            "confidence_score": USDA_CONFIDENCE_SCORE,
            "updated_at": now,
        }

        conversion: ConversionResult | None = None
        if request.update_nutrition:
            serving = record.serving
            conversion = convert_serving(
                per_100g, serving.size, serving.unit, food.portions
            )
            if conversion.nutrition is not None:
                macros = conversion.nutrition
                update.update(
                    calories=macros.calories,
                    protein=macros.protein,
                    carbs=macros.carbs,
                    fat=macros.fat,
                )
                if macros.fiber is not None:
                    update["fiber"] = macros.fiber
                if macros.sugar is not None:
                    update["sugar"] = macros.sugar
            else:
                _logger.warning(
                    "USDA match %s for nutrition %s stored without serving macros",
                    request.fdc_id,
                    request.nutrition_id,
                )

        self.repository.update_nutrition(request.nutrition_id, update)

        self.audit_service.record_admin_action(
            admin_user_id=admin_user_id,
            action="update_nutrition",
            entity_type="ingredient_nutrition",
            entity_id=request.nutrition_id,
            changes={
                "usda_fdc_id": {"old": record.usda_fdc_id, "new": str(request.fdc_id)},
                "usda_match_status": {
                    "old": record.usda_match_status,
                    "new": match_status,
                },
                "source": {"old": record.source, "new": "usda"},
            },
        )

        succeeded = conversion is not None and conversion.succeeded
        return UsdaMatchApplication(
            nutrition_id=request.nutrition_id,
            fdc_id=request.fdc_id,
            usda_description=food.description,
            nutrition_per_100g=per_100g,
            updated_nutrition=request.update_nutrition,
            conversion_successful=succeeded,
            conversion_method=conversion.method if succeeded else "none",
            calculated_gram_weight=conversion.gram_weight if succeeded else None,
            serving_size=record.serving_size,
            serving_unit=record.serving_unit,
            available_portions=[portion.label() for portion in food.portions],
            message=_match_message(record, conversion),
        )

    async def _require_food(self, fdc_id: int) -> UsdaFood:
        food = await self.usda_service.get_food(fdc_id)
        if food is None:
            raise UsdaFoodNotFoundError(str(fdc_id))
        return food


def _match_message(
    record: IngredientNutritionRecord, conversion: ConversionResult | None
) -> str:
    serving = f"{format_quantity(record.serving_size)} {record.serving_unit}"
    if conversion is None or not conversion.succeeded:
        return (
            f'Saved USDA data but could not convert "{record.serving_unit}" to grams. '
            "No matching USDA portion data available. "
            "Macros unchanged - please update manually."
        )
    grams = int(round_half_up(conversion.gram_weight or 0))
    if conversion.method == "usda_portion":
        return f"Updated nutrition for {serving} using USDA portion data ({grams}g)"
    return f"Updated nutrition for {serving} ({grams}g)"
