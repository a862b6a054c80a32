"""Supabase implementation for ingredient nutrition records."""

from dataclasses import dataclass

from supabase import Client

from fuelrx.domain.ingredients import IngredientNutritionRecord
from fuelrx.services.ingredient_nutrition import IngredientNutritionRepository


@dataclass
class SupabaseIngredientNutritionRepository(IngredientNutritionRepository):
    """Supabase-backed repository for ingredient nutrition."""

    client: Client

    def get_nutrition(self, nutrition_id: str) -> IngredientNutritionRecord | None:
        """Return a record from the ingredient_nutrition_with_details view."""
        response = (
            self.client.table("ingredient_nutrition_with_details")
            .select("*")
            .eq("id", nutrition_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_nutrition(response.data[0])

    def update_nutrition(self, nutrition_id: str, payload: dict[str, object]) -> None:
        """Update the underlying ingredient_nutrition row."""
        response = (
            self.client.table("ingredient_nutrition")
            .update(payload)
            .eq("id", nutrition_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update nutrition record {nutrition_id}")


def _parse_nutrition(row: dict[str, object]) -> IngredientNutritionRecord:
    usda_fdc_id = row.get("usda_fdc_id")
    return IngredientNutritionRecord(
        id=str(row["id"]),
        ingredient_name=row.get("ingredient_name") or "",
        serving_size=float(row.get("serving_size") or 0),
        serving_unit=row.get("serving_unit") or "",
        calories=float(row.get("calories") or 0),
        protein=float(row.get("protein") or 0),
        carbs=float(row.get("carbs") or 0),
        fat=float(row.get("fat") or 0),
        source=row.get("source"),
        usda_fdc_id=str(usda_fdc_id) if usda_fdc_id is not None else None,
        usda_match_status=row.get("usda_match_status"),
    )
