"""Admin API endpoints with simple token auth."""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from fuelrx.api.models import (
    ApplyUsdaMatchRequest,
    ApplyUsdaMatchResponse,
    ConvertServingRequest,
    ConvertServingResponse,
    ParsePrepSessionsRequest,
    ParsePrepSessionsResponse,
)
from fuelrx.domain.nutrition import ServingSpec
from fuelrx.errors import (
    InvalidPrepSessionsError,
    JsonRepairExhaustedError,
    NutritionRecordNotFoundError,
    UsdaFoodNotFoundError,
)
from fuelrx.services.ingredient_nutrition import ApplyUsdaMatch

if TYPE_CHECKING:
    from fuelrx.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])
logger = logging.getLogger(__name__)


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/usda/search", dependencies=[Depends(require_admin)])
async def search_usda(
    request: Request, query: str, limit: int = 10
) -> dict[str, object]:
    """Search USDA FoodData Central."""
    container: AppContainer = request.app.state.container
    try:
        foods = await container.usda_service.search(query, limit=limit)
    except Exception as exc:
        logger.exception("USDA search failed", extra={"query": query})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="USDA search failed"
        ) from exc
    return {"foods": [asdict(food) for food in foods]}


@router.post("/usda/convert", dependencies=[Depends(require_admin)])
async def convert_serving(
    body: ConvertServingRequest, request: Request
) -> ConvertServingResponse:
    """Preview serving nutrition for a USDA food without saving it."""
    container: AppContainer = request.app.state.container
    try:
        food, result = await container.ingredient_nutrition_service.preview_conversion(
            body.fdc_id, ServingSpec(size=body.serving_size, unit=body.serving_unit)
        )
    except UsdaFoodNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="USDA food not found"
        ) from exc
    return ConvertServingResponse(
        fdc_id=food.fdc_id,
        usda_description=food.description,
        nutrition_per_100g=asdict(food.nutrition_per_100g),
        nutrition=asdict(result.nutrition) if result.nutrition else None,
        method=result.method,
        gram_weight=result.gram_weight,
        available_portions=[portion.label() for portion in food.portions],
    )


@router.patch("/usda/match", dependencies=[Depends(require_admin)])
async def apply_usda_match(
    body: ApplyUsdaMatchRequest,
    request: Request,
    x_admin_user_id: str | None = Header(default=None),
) -> ApplyUsdaMatchResponse:
    """Apply a USDA match to an ingredient nutrition record."""
    container: AppContainer = request.app.state.container
    try:
        application = await container.ingredient_nutrition_service.apply_usda_match(
            ApplyUsdaMatch(**body.model_dump()),
            admin_user_id=x_admin_user_id or "admin",
        )
    except NutritionRecordNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Nutrition record not found"
        ) from exc
    except UsdaFoodNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="USDA food not found"
        ) from exc
    except Exception as exc:
        logger.exception(
            "Error applying USDA match",
            extra={"nutrition_id": body.nutrition_id, "fdc_id": body.fdc_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to apply USDA match",
        ) from exc
    return ApplyUsdaMatchResponse(**asdict(application))


@router.post("/prep-sessions/parse", dependencies=[Depends(require_admin)])
async def parse_prep_sessions(
    body: ParsePrepSessionsRequest, request: Request
) -> ParsePrepSessionsResponse:
    """Recover and validate prep sessions from raw LLM tool output."""
    container: AppContainer = request.app.state.container
    service = container.prep_session_service
    try:
        sessions = service.normalize(body.model_dump())
    except (JsonRepairExhaustedError, InvalidPrepSessionsError) as exc:
        logger.error(
            "Failed to generate prep sessions: %s\n%s", exc, exc.raw_response
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate prep sessions",
        ) from exc
    warnings = service.validate(sessions)
    return ParsePrepSessionsResponse(
        prep_sessions=sessions.prep_sessions,
        daily_assembly=sessions.daily_assembly,
        warnings=[asdict(warning) for warning in warnings],
    )
