"""Tests for target computation."""

from datetime import date

import pytest

from sculptr.domain.targets import (
    ActivityLevel,
    Goal,
    InvalidProfile,
    Profile,
    Sex,
    Targets,
    age_from_birth_date,
    parse_enum,
)
from sculptr.services.targets import TargetCalculator, basal_rate
from tests.conftest import SCENARIO_PROFILE, SCENARIO_TARGETS


def _profile(**overrides: object) -> Profile:
    values: dict[str, object] = {
        "goal": Goal.FAT_LOSS,
        "sex": Sex.MALE,
        "weight_kg": 80,
        "height_cm": 180,
        "age": 30,
        "activity": ActivityLevel.MODERATE,
    }
    values.update(overrides)
    return Profile(**values)  # type: ignore[arg-type]


def test_basal_rate_follows_mifflin_st_jeor() -> None:
    assert basal_rate(Sex.MALE, 80, 180, 30) == pytest.approx(1780)
    assert basal_rate(Sex.FEMALE, 80, 180, 30) == pytest.approx(1614)


def test_fat_loss_scenario_breakdown() -> None:
    breakdown = TargetCalculator().breakdown(_profile())

    assert breakdown.basal == pytest.approx(1780)
    assert breakdown.activity_multiplier == 1.5
    assert breakdown.expenditure == pytest.approx(2670)
    assert breakdown.calorie_target == pytest.approx(2370)
    assert breakdown.floor_applied is False
    assert breakdown.targets == SCENARIO_TARGETS


def test_macros_fill_the_calorie_target() -> None:
    targets = TargetCalculator().calculate(_profile())

    energy = targets.protein_g * 4 + targets.carbs_g * 4 + targets.fats_g * 9
    assert abs(energy - targets.calories) <= 4
    assert targets.fats_g * 9 >= targets.calories * 0.25 - 9


def test_calculate_is_deterministic() -> None:
    calculator = TargetCalculator()
    assert calculator.calculate(_profile()) == calculator.calculate(_profile())


def test_fat_loss_rest_day_takes_200_kcal_from_carbs() -> None:
    calculator = TargetCalculator()
    training = calculator.calculate(_profile())
    rest = calculator.calculate(_profile(), rest_day=True)

    assert rest == Targets(calories=2170, protein_g=128, carbs_g=266, fats_g=66)
    assert training.calories - rest.calories == 200
    assert rest.protein_g == training.protein_g
    assert rest.fats_g == training.fats_g


def test_rest_day_carbs_never_go_negative() -> None:
    calculator = TargetCalculator(fat_floor_share=0.75)
    training = calculator.calculate(_profile())
    rest = calculator.calculate(_profile(), rest_day=True)

    assert training == Targets(calories=2370, protein_g=128, carbs_g=19, fats_g=198)
    assert rest.calories == 2170
    assert rest.carbs_g == 0
    assert rest.protein_g == training.protein_g
    assert rest.fats_g == training.fats_g


@pytest.mark.parametrize(
    "goal", [Goal.MUSCLE_GAIN, Goal.STRENGTH_CONDITIONING, Goal.MAINTENANCE]
)
def test_rest_day_is_unchanged_for_other_goals(goal: Goal) -> None:
    calculator = TargetCalculator()
    profile = _profile(goal=goal)
    assert calculator.calculate(profile, rest_day=True) == calculator.calculate(
        profile
    )


def test_muscle_gain_uses_higher_protein() -> None:
    targets = TargetCalculator().calculate(
        _profile(goal=Goal.MUSCLE_GAIN, activity=ActivityLevel.HIGH)
    )

    assert targets == Targets(calories=3226, protein_g=160, carbs_g=444, fats_g=90)


def test_calorie_floor_binds_for_small_sedentary_profile() -> None:
    profile = _profile(
        sex=Sex.FEMALE,
        weight_kg=50,
        height_cm=160,
        age=60,
        activity=ActivityLevel.NONE,
    )
    calculator = TargetCalculator()

    breakdown = calculator.breakdown(profile)
    rest = calculator.breakdown(profile, rest_day=True)

    assert breakdown.floor_applied is True
    assert breakdown.targets.calories == 1039
    assert rest.floor_applied is True
    assert rest.targets == breakdown.targets


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"weight_kg": 0}, "weight_kg"),
        ({"height_cm": -170}, "height_cm"),
        ({"age": 0}, "age"),
        ({"weight_kg": float("nan")}, "weight_kg"),
        ({"activity": "daily"}, "activity"),
        ({"sex": "other"}, "sex"),
        ({"goal": "Bulk"}, "goal"),
    ],
)
def test_invalid_profile_names_the_field(
    overrides: dict[str, object], field: str
) -> None:
    with pytest.raises(InvalidProfile) as excinfo:
        TargetCalculator().calculate(_profile(**overrides))

    assert excinfo.value.field == field


def test_non_positive_basal_rate_is_rejected() -> None:
    profile = _profile(sex=Sex.FEMALE, weight_kg=1, height_cm=1, age=100)

    with pytest.raises(InvalidProfile, match="basal"):
        TargetCalculator().calculate(profile)


def test_profile_from_mapping_accepts_display_labels() -> None:
    profile = Profile.from_mapping(SCENARIO_PROFILE)

    assert profile == _profile()


def test_profile_from_mapping_derives_age_from_dob() -> None:
    data = {
        "goal": "MUSCLE_GAIN",
        "sex": "female",
        "weight_kg": "62.5",
        "height_cm": 168,
        "dob": "1996-10-20",
        "activity": "LIGHT",
    }

    profile = Profile.from_mapping(data, today=date(2026, 10, 19))

    assert profile.age == 29
    assert profile.goal is Goal.MUSCLE_GAIN
    assert profile.sex is Sex.FEMALE
    assert profile.weight_kg == 62.5
    assert profile.activity is ActivityLevel.LIGHT


def test_profile_from_mapping_requires_weight() -> None:
    with pytest.raises(InvalidProfile) as excinfo:
        Profile.from_mapping({**SCENARIO_PROFILE, "weightKg": None})

    assert excinfo.value.field == "weight_kg"


def test_age_from_birth_date_on_birthday() -> None:
    assert age_from_birth_date("1996-10-19", today=date(2026, 10, 19)) == 30


def test_age_from_birth_date_rejects_garbage() -> None:
    with pytest.raises(InvalidProfile):
        age_from_birth_date("not-a-date")


def test_parse_enum_ignores_case_and_punctuation() -> None:
    assert parse_enum(Goal, "strength_conditioning", "goal") is (
        Goal.STRENGTH_CONDITIONING
    )
    assert parse_enum(Goal, "fat loss", "goal") is Goal.FAT_LOSS
    assert parse_enum(ActivityLevel, "6-7/WK or manual", "activity") is (
        ActivityLevel.HIGH
    )
