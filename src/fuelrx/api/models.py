"""Pydantic request and response models for the admin API."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class NutritionVectorModel(BaseModel):
    """Nutrition profile as returned over HTTP."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float | None = None
    sugar: float | None = None


class ConvertServingRequest(BaseModel):
    """Preview conversion of a USDA food to a serving."""

    fdc_id: int = Field(gt=0)
    serving_size: float = Field(gt=0)
    serving_unit: str = Field(min_length=1)


class ConvertServingResponse(BaseModel):
    """Conversion preview result."""

    fdc_id: int
    usda_description: str
    nutrition_per_100g: NutritionVectorModel
    nutrition: NutritionVectorModel | None
    method: Literal["weight", "usda_portion", "failed"]
    gram_weight: float | None = None
    available_portions: list[str]


class ApplyUsdaMatchRequest(BaseModel):
    """Apply a USDA food to an ingredient nutrition record."""

    nutrition_id: str = Field(min_length=1)
    fdc_id: int = Field(gt=0)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    reasoning: str = "Manual admin selection"
    update_nutrition: bool = True
    is_manual_override: bool = False


class ApplyUsdaMatchResponse(BaseModel):
    """Outcome of a USDA match application."""

    success: bool = True
    nutrition_id: str
    fdc_id: int
    usda_description: str
    nutrition_per_100g: NutritionVectorModel
    updated_nutrition: bool
    conversion_successful: bool
    conversion_method: Literal["weight", "usda_portion", "failed", "none"]
    calculated_gram_weight: float | None
    serving_size: float
    serving_unit: str
    available_portions: list[str]
    message: str


class ParsePrepSessionsRequest(BaseModel):
    """Raw prep session tool output from the LLM."""

    prep_sessions: list[dict[str, object]] | str
    daily_assembly: dict[str, object] | str | None = None

    @field_validator("prep_sessions")
    @classmethod
    def _not_blank(
        cls, value: list[dict[str, object]] | str
    ) -> list[dict[str, object]] | str:
        if isinstance(value, str) and not value.strip():
            raise ValueError("prep_sessions must not be blank")
        return value


class PrepWarningModel(BaseModel):
    """Single prep session validation warning."""

    type: str
    message: str
    severity: Literal["warning", "error"]
    meal_id: str | None = None


class ParsePrepSessionsResponse(BaseModel):
    """Recovered prep sessions with validation warnings."""

    prep_sessions: list[dict[str, object]]
    daily_assembly: dict[str, object]
    warnings: list[PrepWarningModel]
