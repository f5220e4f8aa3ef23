"""Conformance checks for externally generated plans.

Validation runs in two stages. The payload is first parsed against the
generation contract; any structural mismatch raises ``MalformedPlan`` before a
single rule is evaluated. A parsed plan is then checked against the same
numeric policy used to derive targets, and every broken rule is reported as a
``RuleViolation``.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from sculptr.domain.plans import (
    GeneratedWorkout,
    MalformedPlan,
    MealPlanMeal,
    MealPlanResponse,
    PlanValidationResult,
    RuleViolation,
    WorkoutPreferences,
    WorkoutProgramResponse,
)
from sculptr.domain.targets import Goal, InvalidProfile, Targets, Tier, parse_enum

REP_BANDS: dict[Goal, tuple[int, int]] = {
    Goal.FAT_LOSS: (12, 15),
    Goal.MUSCLE_GAIN: (8, 12),
    Goal.STRENGTH_CONDITIONING: (4, 6),
    Goal.MAINTENANCE: (8, 12),
}

_REP_RANGE = re.compile(r"^\s*(\d+)\s*(?:-|–|to)\s*(\d+)")
_REP_SINGLE = re.compile(r"^\s*(\d+)\b")
_EPSILON = 1e-9

M = TypeVar("M", bound=BaseModel)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanPolicy:
    """Numeric policy applied to generated plans."""

    allow_generated: bool
    macro_tolerance: float = 0.02
    meal_energy_tolerance: float = 0.10
    meal_energy_min_kcal: float = 10.0
    min_exercises: int = 4
    max_exercises: int = 8
    min_rest_sec: float = 60.0
    max_rest_sec: float = 180.0

    @classmethod
    def for_tier(cls, tier: Tier) -> "PlanPolicy":
        """Select the policy for a subscription tier."""
        return cls(allow_generated=tier is Tier.PREMIUM)


@dataclass
class PlanValidator:
    """Gate generated plans; never produces fallbacks itself."""

    def parse_meal_plan(
        self, payload: MealPlanResponse | Mapping[str, object]
    ) -> MealPlanResponse:
        """Parse a meal plan response or raise ``MalformedPlan``."""
        return _parse(MealPlanResponse, payload)

    def parse_workout_program(
        self, payload: WorkoutProgramResponse | Mapping[str, object]
    ) -> WorkoutProgramResponse:
        """Parse a workout program response or raise ``MalformedPlan``."""
        return _parse(WorkoutProgramResponse, payload)

    def parse_preferences(
        self, payload: WorkoutPreferences | Mapping[str, object]
    ) -> WorkoutPreferences:
        """Parse workout preferences or raise ``MalformedPlan``."""
        return _parse(WorkoutPreferences, payload)

    def validate_meal_plan(
        self,
        payload: MealPlanResponse | Mapping[str, object],
        targets: Targets,
        *,
        tier: Tier,
    ) -> PlanValidationResult:
        """Check a seven-day meal plan against daily targets."""
        plan = self.parse_meal_plan(payload)
        policy = PlanPolicy.for_tier(tier)
        violations = _tier_violations(policy, tier)
        for day, plan_day in plan.plan.days():
            if not plan_day.meals:
                violations.append(
                    RuleViolation(
                        rule="empty_day",
                        path=f"plan.{day}",
                        message=f"{day} has no meals",
                    )
                )
                continue
            for index, meal in enumerate(plan_day.meals):
                violation = _check_meal_energy(
                    meal, f"plan.{day}.meals[{index}]", policy
                )
                if violation:
                    violations.append(violation)
            violations.extend(_check_day_totals(day, plan_day.meals, targets, policy))
        _log_result("meal plan", violations)
        return PlanValidationResult(violations=violations)

    def validate_workout_program(
        self,
        payload: WorkoutProgramResponse | Mapping[str, object],
        goal: Goal,
        preferences: WorkoutPreferences | Mapping[str, object],
        *,
        tier: Tier,
    ) -> PlanValidationResult:
        """Check workouts and the weekly schedule against the goal policy."""
        program = self.parse_workout_program(payload)
        prefs = self.parse_preferences(preferences)
        policy = PlanPolicy.for_tier(tier)
        violations = _tier_violations(policy, tier)
        for index, workout in enumerate(program.workouts):
            if workout.type != "strength":
                continue
            violations.extend(
                _check_strength_workout(workout, f"workouts[{index}]", goal, policy)
            )
        violations.extend(_check_schedule(program, prefs.days_per_week))
        _log_result("workout program", violations)
        return PlanValidationResult(violations=violations)


def parse_rep_target(value: str) -> tuple[int, int] | None:
    """Parse ``"8-12"``, ``"8 to 12 reps"`` or ``"10"`` into a range."""
    match = _REP_RANGE.match(value)
    if match:
        low, high = int(match.group(1)), int(match.group(2))
        return (min(low, high), max(low, high))
    match = _REP_SINGLE.match(value)
    if match:
        reps = int(match.group(1))
        return (reps, reps)
    return None


def _parse(model: type[M], payload: M | Mapping[str, object]) -> M:
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise MalformedPlan.from_validation_error(exc) from exc


def _tier_violations(policy: PlanPolicy, tier: Tier) -> list[RuleViolation]:
    if policy.allow_generated:
        return []
    return [
        RuleViolation(
            rule="tier_not_allowed",
            path="$",
            message=f"Generated plans are not available on the {tier} tier",
        )
    ]


def _check_meal_energy(
    meal: MealPlanMeal, path: str, policy: PlanPolicy
) -> RuleViolation | None:
    computed = meal.protein_g * 4 + meal.carbs_g * 4 + meal.fats_g * 9
    allowed = max(policy.meal_energy_min_kcal, computed * policy.meal_energy_tolerance)
    if abs(meal.calories - computed) <= allowed + _EPSILON:
        return None
    return RuleViolation(
        rule="meal_energy_mismatch",
        path=f"{path}.calories",
        message=(
            f"{meal.name} states {meal.calories:.0f} kcal but its macros "
            f"add up to {computed:.0f} kcal"
        ),
    )


def _check_day_totals(
    day: str, meals: list[MealPlanMeal], targets: Targets, policy: PlanPolicy
) -> list[RuleViolation]:
    sums = {
        "calories": sum(meal.calories for meal in meals),
        "protein": sum(meal.protein_g for meal in meals),
        "carbs": sum(meal.carbs_g for meal in meals),
        "fats": sum(meal.fats_g for meal in meals),
    }
    expected = {
        "calories": targets.calories,
        "protein": targets.protein_g,
        "carbs": targets.carbs_g,
        "fats": targets.fats_g,
    }
    violations = []
    for key, actual in sums.items():
        target = expected[key]
        if abs(actual - target) <= target * policy.macro_tolerance + _EPSILON:
            continue
        off = (actual - target) / target * 100 if target else float("inf")
        violations.append(
            RuleViolation(
                rule=f"day_{key}",
                path=f"plan.{day}",
                message=(
                    f"{day} {key} total {actual:.1f} is {off:+.1f}% from target "
                    f"{target} (allowed ±{policy.macro_tolerance * 100:.0f}%)"
                ),
            )
        )
    return violations


def _check_strength_workout(
    workout: GeneratedWorkout, path: str, profile_goal: Goal, policy: PlanPolicy
) -> list[RuleViolation]:
    violations: list[RuleViolation] = []
    exercises = workout.exercises or []
    if not policy.min_exercises <= len(exercises) <= policy.max_exercises:
        violations.append(
            RuleViolation(
                rule="exercise_count",
                path=f"{path}.exercises",
                message=(
                    f"{workout.name} has {len(exercises)} exercises, expected "
                    f"{policy.min_exercises}-{policy.max_exercises}"
                ),
            )
        )

    goal = profile_goal
    if workout.goal:
        try:
            goal = parse_enum(Goal, workout.goal, "goal")
        except InvalidProfile:
            violations.append(
                RuleViolation(
                    rule="unknown_goal",
                    path=f"{path}.goal",
                    message=f"{workout.name} declares unknown goal {workout.goal!r}",
                )
            )
    band_low, band_high = REP_BANDS[goal]

    for index, exercise in enumerate(exercises):
        exercise_path = f"{path}.exercises[{index}]"
        if exercise.rep_target is None or not exercise.rep_target.strip():
            violations.append(
                RuleViolation(
                    rule="rep_target_missing",
                    path=f"{exercise_path}.repTarget",
                    message=f"{exercise.name} has no rep target",
                )
            )
        else:
            reps = parse_rep_target(exercise.rep_target)
            if reps is None:
                violations.append(
                    RuleViolation(
                        rule="rep_target_unparseable",
                        path=f"{exercise_path}.repTarget",
                        message=(
                            f"{exercise.name} rep target "
                            f"{exercise.rep_target!r} is not a rep range"
                        ),
                    )
                )
            elif reps[0] < band_low or reps[1] > band_high:
                violations.append(
                    RuleViolation(
                        rule="rep_range",
                        path=f"{exercise_path}.repTarget",
                        message=(
                            f"{exercise.name} targets {exercise.rep_target} reps; "
                            f"{goal} requires {band_low}-{band_high}"
                        ),
                    )
                )
        rest = exercise.rest_sec
        if rest is None or not policy.min_rest_sec <= rest <= policy.max_rest_sec:
            violations.append(
                RuleViolation(
                    rule="rest_seconds",
                    path=f"{exercise_path}.restSec",
                    message=(
                        f"{exercise.name} rest {rest} s is outside "
                        f"{policy.min_rest_sec:.0f}-{policy.max_rest_sec:.0f} s"
                    ),
                )
            )
    return violations


def _check_schedule(
    program: WorkoutProgramResponse, days_per_week: int
) -> list[RuleViolation]:
    violations: list[RuleViolation] = []
    known = {workout.name for workout in program.workouts}
    scheduled_days = 0
    scheduled_names: set[str] = set()
    for day, name in program.schedule.items():
        if name is None or not name.strip():
            continue
        if name not in known:
            violations.append(
                RuleViolation(
                    rule="unknown_workout",
                    path=f"schedule.{day}",
                    message=f"{day} names {name!r}, which is not in the program",
                )
            )
            continue
        scheduled_days += 1
        scheduled_names.add(name)

    if scheduled_days < days_per_week:
        violations.append(
            RuleViolation(
                rule="schedule_coverage",
                path="schedule",
                message=(
                    f"Schedule covers {scheduled_days} days, "
                    f"{days_per_week} requested"
                ),
            )
        )
    for index, workout in enumerate(program.workouts):
        if workout.name not in scheduled_names:
            violations.append(
                RuleViolation(
                    rule="unscheduled_workout",
                    path=f"workouts[{index}]",
                    message=f"{workout.name} is never scheduled",
                )
            )
    return violations


def _log_result(kind: str, violations: list[RuleViolation]) -> None:
    if violations:
        _logger.info(
            "Rejected %s: %s",
            kind,
            ", ".join(sorted({violation.rule for violation in violations})),
        )
