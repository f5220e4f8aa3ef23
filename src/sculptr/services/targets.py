"""Deterministic calorie and macro target computation."""

import math
from dataclasses import dataclass

from sculptr.domain.targets import (
    ActivityLevel,
    Goal,
    InvalidProfile,
    Profile,
    Sex,
    TargetBreakdown,
    Targets,
    parse_enum,
)

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.NONE: 1.2,
    ActivityLevel.LIGHT: 1.4,
    ActivityLevel.MODERATE: 1.5,
    ActivityLevel.HIGH: 1.7,
}

GOAL_OFFSETS: dict[Goal, int] = {
    Goal.FAT_LOSS: -300,
    Goal.MUSCLE_GAIN: 200,
    Goal.STRENGTH_CONDITIONING: 100,
    Goal.MAINTENANCE: 0,
}

PROTEIN_G_PER_KG: dict[Goal, float] = {
    Goal.FAT_LOSS: 1.6,
    Goal.MUSCLE_GAIN: 2.0,
    Goal.STRENGTH_CONDITIONING: 2.0,
    Goal.MAINTENANCE: 1.6,
}

REST_DAY_REDUCTION = 200
FAT_FLOOR_SHARE = 0.25
FLOOR_BASAL_FACTOR = 1.0
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9


@dataclass
class TargetCalculator:
    """Derive daily targets from a profile.

    Pure and synchronous. Rest days only change the result for the fat loss
    goal, where the extra reduction is taken from carbs alone.
    """

    fat_floor_share: float = FAT_FLOOR_SHARE
    rest_day_reduction: int = REST_DAY_REDUCTION

    def calculate(self, profile: Profile, *, rest_day: bool = False) -> Targets:
        """Return targets for a training day, or a rest day when flagged."""
        return self.breakdown(profile, rest_day=rest_day).targets

    def breakdown(
        self, profile: Profile, *, rest_day: bool = False
    ) -> TargetBreakdown:
        """Return targets together with the intermediate values."""
        goal, sex, activity = _validate(profile)
        basal = basal_rate(sex, profile.weight_kg, profile.height_cm, profile.age)
        if basal <= 0:
            raise InvalidProfile("profile", "basal rate is not positive")
        multiplier = ACTIVITY_MULTIPLIERS[activity]
        expenditure = basal * multiplier
        floor = basal * FLOOR_BASAL_FACTOR

        training_target = expenditure + GOAL_OFFSETS[goal]
        training_floored = training_target < floor
        training_calories = round_half_up(max(training_target, floor))
        protein_g = round_half_up(PROTEIN_G_PER_KG[goal] * profile.weight_kg)
        fats_g = round_half_up(
            training_calories * self.fat_floor_share / KCAL_PER_G_FAT
        )
        remainder = (
            training_calories
            - protein_g * KCAL_PER_G_PROTEIN
            - fats_g * KCAL_PER_G_FAT
        )
        carbs_g = max(0, round_half_up(remainder / KCAL_PER_G_CARBS))
        targets = Targets(
            calories=training_calories,
            protein_g=protein_g,
            carbs_g=carbs_g,
            fats_g=fats_g,
        )

        if not (rest_day and goal is Goal.FAT_LOSS):
            return TargetBreakdown(
                basal=basal,
                activity_multiplier=multiplier,
                expenditure=expenditure,
                calorie_target=training_target,
                floor_applied=training_floored,
                rest_day=rest_day,
                targets=targets,
            )

        rest_target = training_target - self.rest_day_reduction
        rest_floored = rest_target < floor
        rest_calories = round_half_up(max(rest_target, floor))
        reduction = targets.calories - rest_calories
        rest_carbs = max(0, carbs_g - round_half_up(reduction / KCAL_PER_G_CARBS))
        return TargetBreakdown(
            basal=basal,
            activity_multiplier=multiplier,
            expenditure=expenditure,
            calorie_target=rest_target,
            floor_applied=rest_floored,
            rest_day=True,
            targets=Targets(
                calories=rest_calories,
                protein_g=protein_g,
                carbs_g=rest_carbs,
                fats_g=fats_g,
            ),
        )


def basal_rate(sex: Sex, weight_kg: float, height_cm: float, age: float) -> float:
    """Mifflin-St Jeor basal metabolic rate."""
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    return base + (5 if sex is Sex.MALE else -161)


def _validate(profile: Profile) -> tuple[Goal, Sex, ActivityLevel]:
    goal = parse_enum(Goal, profile.goal, "goal")
    sex = parse_enum(Sex, profile.sex, "sex")
    activity = parse_enum(ActivityLevel, profile.activity, "activity")
    for field in ("weight_kg", "height_cm", "age"):
        value = getattr(profile, field)
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise InvalidProfile(field, "must be a number")
        if not math.isfinite(value) or value <= 0:
            raise InvalidProfile(field, "must be positive")
    return goal, sex, activity


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)
