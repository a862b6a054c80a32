"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from fuelrx.adapters.fdc_client import HttpxFdcClient
from fuelrx.adapters.supabase_audit_repository import SupabaseAuditRepository
from fuelrx.adapters.supabase_ingredient_nutrition_repository import (
    SupabaseIngredientNutritionRepository,
)
from fuelrx.config import Settings
from fuelrx.services.audit import AuditService
from fuelrx.services.cache import InMemoryCache
from fuelrx.services.ingredient_nutrition import IngredientNutritionService
from fuelrx.services.prep_sessions import PrepSessionService
from fuelrx.services.usda import UsdaService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    usda_service: UsdaService
    ingredient_nutrition_service: IngredientNutritionService
    prep_session_service: PrepSessionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
    )
    usda_service = UsdaService(
        fdc_client=fdc_client,
        cache=InMemoryCache(),
        search_ttl_seconds=resolved_settings.usda_search_ttl_seconds,
        food_ttl_seconds=resolved_settings.usda_food_ttl_seconds,
    )
    ingredient_nutrition_service = IngredientNutritionService(
        repository=SupabaseIngredientNutritionRepository(supabase_client),
        usda_service=usda_service,
        audit_service=AuditService(SupabaseAuditRepository(supabase_client)),
    )

    async def close_resources() -> None:
        await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        usda_service=usda_service,
        ingredient_nutrition_service=ingredient_nutrition_service,
        prep_session_service=PrepSessionService(),
        close_resources=close_resources,
    )
