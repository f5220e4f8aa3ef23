"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx
from supabase import create_client

from sculptr.adapters.health_bridge_capability import HttpxHealthBridgeCapability
from sculptr.adapters.nutritionix_provider import HttpxNutritionixProvider
from sculptr.adapters.open_food_facts_provider import HttpxOpenFoodFactsProvider
from sculptr.adapters.plan_generation_client import HttpxPlanGenerationClient
from sculptr.adapters.supabase_health_repository import SupabaseHealthSyncRepository
from sculptr.adapters.supabase_profile_repository import SupabaseProfileRepository
from sculptr.config import Settings, parse_platform_tag
from sculptr.services.cache import InMemoryCache
from sculptr.services.health_sync import (
    AvailableCapability,
    CapabilityRegistry,
    HealthSyncCoordinator,
)
from sculptr.services.nutrition import FoodProvider, NutritionLookupGateway
from sculptr.services.plan_generation import PlanGenerationService
from sculptr.services.plan_validation import PlanValidator
from sculptr.services.profiles import ProfileService
from sculptr.services.targets import TargetCalculator

HEALTH_PLATFORMS = ("healthkit", "googlefit")

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    target_calculator: TargetCalculator
    plan_validator: PlanValidator
    plan_generation_service: PlanGenerationService
    profile_service: ProfileService
    nutrition_gateway: NutritionLookupGateway
    health_sync: HealthSyncCoordinator
    close_resources: Callable[[], Awaitable[None]]


def create_food_provider(
    settings: Settings, http_client: httpx.AsyncClient | None = None
) -> FoodProvider:
    """Select the configured food provider.

    Nutritionix needs credentials; without them Open Food Facts is used.
    """
    client = http_client or httpx.AsyncClient()
    if settings.nutrition_provider == "nutritionix":
        if settings.nutritionix_app_id and settings.nutritionix_app_key:
            return HttpxNutritionixProvider(
                app_id=settings.nutritionix_app_id,
                app_key=settings.nutritionix_app_key,
                base_url=settings.nutritionix_base_url,
                http_client=client,
            )
        _logger.warning("Nutritionix credentials missing, using Open Food Facts")
    return HttpxOpenFoodFactsProvider(
        base_url=settings.off_base_url, http_client=client
    )


def create_capability_registry(settings: Settings) -> CapabilityRegistry:
    """Register the health bridge for every supported platform tag."""
    registry = CapabilityRegistry()
    bridge_url = settings.health_bridge_url
    if not bridge_url:
        return registry
    for platform in HEALTH_PLATFORMS:
        registry.register(
            platform,
            lambda platform=platform: HttpxHealthBridgeCapability.create(
                platform,
                bridge_url,
                timeout_seconds=settings.health_timeout_seconds,
            ),
        )
    return registry


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    health_repository = SupabaseHealthSyncRepository(supabase_client)
    profile_repository = SupabaseProfileRepository(supabase_client)

    target_calculator = TargetCalculator()
    plan_validator = PlanValidator()
    plan_client = (
        HttpxPlanGenerationClient.create(
            resolved_settings.plan_functions_base_url,
            timeout_seconds=resolved_settings.plan_generation_timeout_seconds,
        )
        if resolved_settings.plan_functions_base_url
        else None
    )
    plan_generation_service = PlanGenerationService(
        generator=plan_client,
        validator=plan_validator,
        timeout_seconds=resolved_settings.plan_generation_timeout_seconds,
    )
    profile_service = ProfileService(profile_repository, target_calculator)

    food_provider = create_food_provider(resolved_settings)
    nutrition_gateway = NutritionLookupGateway(
        provider=food_provider,
        cache=InMemoryCache(),
    )

    capability = create_capability_registry(resolved_settings).resolve(
        parse_platform_tag(resolved_settings.health_platform)
    )
    health_sync = HealthSyncCoordinator(
        repository=health_repository,
        capability=capability,
        timeout_seconds=resolved_settings.health_timeout_seconds,
    )

    async def close_resources() -> None:
        await food_provider.close()
        if plan_client is not None:
            await plan_client.close()
        if isinstance(capability, AvailableCapability):
            await capability.impl.close()

    return AppContainer(
        settings=resolved_settings,
        target_calculator=target_calculator,
        plan_validator=plan_validator,
        plan_generation_service=plan_generation_service,
        profile_service=profile_service,
        nutrition_gateway=nutrition_gateway,
        health_sync=health_sync,
        close_resources=close_resources,
    )
