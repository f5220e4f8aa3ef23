"""Gate between the external plan generator and the user.

A generated plan reaches the user only when it parses and passes every rule.
Anything else (timeout, generator failure, malformed payload, rejection, or a
tier without generation) falls back to a deterministic preset.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

import httpx

from sculptr.domain.plans import (
    MalformedPlan,
    MealPlanResponse,
    RuleViolation,
    WorkoutPreferences,
    WorkoutProgramResponse,
)
from sculptr.domain.targets import Profile, Targets, Tier
from sculptr.services.plan_validation import PlanValidator
from sculptr.services.presets import preset_meal_plan, preset_workout_program

FallbackReason = Literal[
    "timeout",
    "generator_error",
    "generator_unavailable",
    "malformed",
    "rejected",
    "tier",
]

_logger = logging.getLogger(__name__)


class PlanGenerator(Protocol):
    """External planner reached over a callable endpoint."""

    async def generate_workout_program(self, payload: dict[str, Any]) -> Any:
        """Return the raw workout program payload."""

    async def generate_meal_plan(self, payload: dict[str, Any]) -> Any:
        """Return the raw meal plan payload."""


@dataclass(frozen=True)
class PlanOutcome:
    """Plan delivered to the user and where it came from."""

    source: Literal["generated", "preset"]
    plan: MealPlanResponse | WorkoutProgramResponse
    fallback_reason: FallbackReason | None = None
    violations: list[RuleViolation] = field(default_factory=list)


@dataclass
class PlanGenerationService:
    """Request generated plans and fall back to presets when they fail."""

    generator: PlanGenerator | None
    validator: PlanValidator
    timeout_seconds: float = 120.0

    async def generate_meal_plan(
        self,
        profile: Profile,
        targets: Targets,
        *,
        tier: Tier,
        preferences: dict[str, Any] | None = None,
    ) -> PlanOutcome:
        """Return a validated generated meal plan or the preset split."""
        fallback = preset_meal_plan(targets)
        if tier is not Tier.PREMIUM:
            return PlanOutcome(source="preset", plan=fallback, fallback_reason="tier")
        if self.generator is None:
            return PlanOutcome(
                source="preset", plan=fallback, fallback_reason="generator_unavailable"
            )

        payload = {
            "profile": _profile_payload(profile),
            "targets": _targets_payload(targets),
            "preferences": preferences or {},
        }
        raw = await self._call(self.generator.generate_meal_plan, payload, "meal plan")
        if isinstance(raw, _Failure):
            return PlanOutcome(
                source="preset", plan=fallback, fallback_reason=raw.reason
            )

        try:
            plan = self.validator.parse_meal_plan(raw)
        except MalformedPlan as exc:
            _logger.warning("Generated meal plan is malformed: %s", exc)
            return PlanOutcome(
                source="preset", plan=fallback, fallback_reason="malformed"
            )
        result = self.validator.validate_meal_plan(plan, targets, tier=tier)
        if not result.accepted:
            return PlanOutcome(
                source="preset",
                plan=fallback,
                fallback_reason="rejected",
                violations=result.violations,
            )
        return PlanOutcome(source="generated", plan=plan)

    async def generate_workout_program(
        self,
        profile: Profile,
        preferences: WorkoutPreferences,
        *,
        tier: Tier,
    ) -> PlanOutcome:
        """Return a validated generated program or the preset rotation."""
        fallback = preset_workout_program(profile.goal, preferences.days_per_week)
        if tier is not Tier.PREMIUM:
            return PlanOutcome(source="preset", plan=fallback, fallback_reason="tier")
        if self.generator is None:
            return PlanOutcome(
                source="preset", plan=fallback, fallback_reason="generator_unavailable"
            )

        payload = {
            "profile": _profile_payload(profile),
            "preferences": preferences.model_dump(by_alias=True, exclude_none=True),
        }
        raw = await self._call(
            self.generator.generate_workout_program, payload, "workout program"
        )
        if isinstance(raw, _Failure):
            return PlanOutcome(
                source="preset", plan=fallback, fallback_reason=raw.reason
            )

        try:
            program = self.validator.parse_workout_program(raw)
        except MalformedPlan as exc:
            _logger.warning("Generated workout program is malformed: %s", exc)
            return PlanOutcome(
                source="preset", plan=fallback, fallback_reason="malformed"
            )
        result = self.validator.validate_workout_program(
            program, profile.goal, preferences, tier=tier
        )
        if not result.accepted:
            return PlanOutcome(
                source="preset",
                plan=fallback,
                fallback_reason="rejected",
                violations=result.violations,
            )
        return PlanOutcome(source="generated", plan=program)

    async def _call(
        self,
        operation: Callable[[dict[str, Any]], Awaitable[Any]],
        payload: dict[str, Any],
        kind: str,
    ) -> Any:
        try:
            return await asyncio.wait_for(
                operation(payload), timeout=self.timeout_seconds
            )
        except (TimeoutError, httpx.TimeoutException):
            _logger.warning(
                "Plan generation timed out after %.0f s (%s)",
                self.timeout_seconds,
                kind,
            )
            return _Failure("timeout")
        except Exception:
            _logger.exception("Plan generation failed (%s)", kind)
            return _Failure("generator_error")


@dataclass(frozen=True)
class _Failure:
    reason: FallbackReason


def _profile_payload(profile: Profile) -> dict[str, Any]:
    return {
        "goal": profile.goal.value,
        "sex": profile.sex.value,
        "weightKg": profile.weight_kg,
        "heightCm": profile.height_cm,
        "age": profile.age,
        "activity": profile.activity.value,
    }


def _targets_payload(targets: Targets) -> dict[str, int]:
    return {
        "calories": targets.calories,
        "proteinG": targets.protein_g,
        "carbsG": targets.carbs_g,
        "fatsG": targets.fats_g,
    }
