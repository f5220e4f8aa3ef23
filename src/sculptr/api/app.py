"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date
from typing import Any
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from sculptr.api.models import (
    HealthOptInRequest,
    MealPlanGenerationRequest,
    MealPlanValidationRequest,
    WorkoutGenerationRequest,
    WorkoutValidationRequest,
    targets_payload,
)
from sculptr.app_logging import configure_logging
from sculptr.containers import AppContainer
from sculptr.domain.health import PermissionScopes, SyncOutcome
from sculptr.domain.plans import MalformedPlan, PlanValidationResult
from sculptr.domain.targets import Goal, InvalidProfile, Profile, parse_enum
from sculptr.services.plan_generation import PlanOutcome


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to close resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(InvalidProfile)
    async def invalid_profile_handler(
        request: Request, exc: InvalidProfile
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "error": "invalid_profile",
                "field": exc.field,
                "message": exc.message,
            },
        )

    @app.exception_handler(MalformedPlan)
    async def malformed_plan_handler(
        request: Request, exc: MalformedPlan
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"error": "malformed_plan", "errors": exc.errors},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/targets")
    async def compute_targets(
        profile: dict[str, Any], request: Request, rest_day: bool = False
    ) -> dict[str, object]:
        """Compute targets for a profile without storing them."""
        state_container: AppContainer = request.app.state.container
        breakdown = state_container.target_calculator.breakdown(
            Profile.from_mapping(profile), rest_day=rest_day
        )
        return {
            **targets_payload(breakdown.targets),
            "basal": breakdown.basal,
            "expenditure": breakdown.expenditure,
            "floorApplied": breakdown.floor_applied,
            "restDay": breakdown.rest_day,
        }

    @app.post("/users/{user_id}/targets/ensure")
    async def ensure_targets(user_id: UUID, request: Request) -> dict[str, int]:
        """Return stored targets, computing them from the profile if missing."""
        state_container: AppContainer = request.app.state.container
        targets = state_container.profile_service.ensure_targets(user_id)
        if targets is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No complete profile for user",
            )
        return targets_payload(targets)

    @app.post("/plans/meal/validate")
    async def validate_meal_plan(
        body: MealPlanValidationRequest, request: Request
    ) -> dict[str, object]:
        """Check a generated meal plan against targets."""
        state_container: AppContainer = request.app.state.container
        result = state_container.plan_validator.validate_meal_plan(
            body.plan, body.targets.to_domain(), tier=body.tier
        )
        return _validation_payload(result)

    @app.post("/plans/workout/validate")
    async def validate_workout_program(
        body: WorkoutValidationRequest, request: Request
    ) -> dict[str, object]:
        """Check a generated workout program against the goal policy."""
        state_container: AppContainer = request.app.state.container
        result = state_container.plan_validator.validate_workout_program(
            body.program,
            parse_enum(Goal, body.goal, "goal"),
            body.preferences,
            tier=body.tier,
        )
        return _validation_payload(result)

    @app.post("/plans/meal")
    async def generate_meal_plan(
        body: MealPlanGenerationRequest, request: Request
    ) -> dict[str, object]:
        """Return a generated meal plan, or the preset when it fails the gate."""
        state_container: AppContainer = request.app.state.container
        profile = Profile.from_mapping(body.profile)
        targets = state_container.target_calculator.calculate(profile)
        outcome = await state_container.plan_generation_service.generate_meal_plan(
            profile, targets, tier=body.tier, preferences=body.preferences
        )
        return _outcome_payload(outcome)

    @app.post("/plans/workout")
    async def generate_workout_program(
        body: WorkoutGenerationRequest, request: Request
    ) -> dict[str, object]:
        """Return a generated workout program, or the preset rotation."""
        state_container: AppContainer = request.app.state.container
        profile = Profile.from_mapping(body.profile)
        preferences = state_container.plan_validator.parse_preferences(
            body.preferences
        )
        service = state_container.plan_generation_service
        outcome = await service.generate_workout_program(
            profile, preferences, tier=body.tier
        )
        return _outcome_payload(outcome)

    @app.get("/foods/search")
    async def search_foods(q: str, request: Request) -> dict[str, object]:
        """Search foods through the configured provider."""
        state_container: AppContainer = request.app.state.container
        gateway = state_container.nutrition_gateway
        result = await gateway.search_food(q)
        return {
            "foods": [asdict(food) for food in result.foods],
            "provider": gateway.provider.name,
            "degraded": result.degraded,
        }

    @app.get("/foods/barcode/{code}")
    async def lookup_barcode(code: str, request: Request) -> dict[str, object]:
        """Look up a product by barcode."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.nutrition_gateway.lookup_barcode(code)
        if result.food is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
            )
        return asdict(result.food)

    @app.post("/users/{user_id}/health/opt-in")
    async def health_opt_in(
        user_id: UUID, request: Request, body: HealthOptInRequest | None = None
    ) -> dict[str, object]:
        """Request device permissions and enable health sync."""
        state_container: AppContainer = request.app.state.container
        scopes = body or HealthOptInRequest()
        outcome = await state_container.health_sync.opt_in(
            user_id,
            PermissionScopes(
                steps=scopes.steps, workouts=scopes.workouts, weight=scopes.weight
            ),
        )
        return _sync_payload(outcome)

    @app.post("/users/{user_id}/health/opt-out")
    async def health_opt_out(user_id: UUID, request: Request) -> dict[str, str]:
        """Disable health sync for a user."""
        state_container: AppContainer = request.app.state.container
        state_container.health_sync.opt_out(user_id)
        return {"status": "disabled"}

    @app.post("/users/{user_id}/health/steps/sync")
    async def sync_steps(
        user_id: UUID, request: Request, day: date | None = None
    ) -> dict[str, object]:
        """Read steps for a day from the device and store them."""
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.health_sync.sync_steps(user_id, day)
        return _sync_payload(outcome)

    return app


def _validation_payload(result: PlanValidationResult) -> dict[str, object]:
    return {
        "accepted": result.accepted,
        "violations": [asdict(violation) for violation in result.violations],
    }


def _outcome_payload(outcome: PlanOutcome) -> dict[str, object]:
    return {
        "source": outcome.source,
        "fallbackReason": outcome.fallback_reason,
        "plan": outcome.plan.model_dump(by_alias=True, mode="json"),
        "violations": [asdict(violation) for violation in outcome.violations],
    }


def _sync_payload(outcome: SyncOutcome) -> dict[str, object]:
    return {
        "status": outcome.status.value,
        "steps": outcome.steps,
        "day": outcome.day.isoformat() if outcome.day else None,
        "detail": outcome.detail,
    }
