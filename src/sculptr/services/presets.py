"""Deterministic fallback plans."""

from sculptr.domain.plans import (
    WEEKDAYS,
    Exercise,
    GeneratedWorkout,
    MealPlanDay,
    MealPlanMeal,
    MealPlanResponse,
    MealPlanWeek,
    WorkoutProgramResponse,
)
from sculptr.domain.targets import Goal, Targets
from sculptr.services.plan_validation import REP_BANDS

MEAL_SPLIT: tuple[tuple[str, str, float], ...] = (
    ("Breakfast", "08:00", 0.25),
    ("Lunch", "12:30", 0.35),
    ("Snack", "15:30", 0.10),
    ("Dinner", "19:00", 0.30),
)

REST_SECONDS: dict[Goal, int] = {
    Goal.FAT_LOSS: 60,
    Goal.MUSCLE_GAIN: 90,
    Goal.STRENGTH_CONDITIONING: 150,
    Goal.MAINTENANCE: 90,
}

TARGET_SETS: dict[Goal, int] = {
    Goal.FAT_LOSS: 3,
    Goal.MUSCLE_GAIN: 4,
    Goal.STRENGTH_CONDITIONING: 5,
    Goal.MAINTENANCE: 3,
}

WORKOUT_TEMPLATES: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Full Body A",
        (
            ("back-squat", "Back Squat"),
            ("bench-press", "Bench Press"),
            ("barbell-row", "Barbell Row"),
            ("overhead-press", "Overhead Press"),
            ("plank", "Plank"),
        ),
    ),
    (
        "Full Body B",
        (
            ("deadlift", "Deadlift"),
            ("incline-db-press", "Incline Dumbbell Press"),
            ("lat-pulldown", "Lat Pulldown"),
            ("walking-lunge", "Walking Lunge"),
            ("cable-crunch", "Cable Crunch"),
        ),
    ),
    (
        "Full Body C",
        (
            ("front-squat", "Front Squat"),
            ("weighted-dip", "Weighted Dip"),
            ("pull-up", "Pull-up"),
            ("romanian-deadlift", "Romanian Deadlift"),
            ("hanging-leg-raise", "Hanging Leg Raise"),
        ),
    ),
)

TRAINING_DAYS: dict[int, tuple[str, ...]] = {
    1: ("Mon",),
    2: ("Mon", "Thu"),
    3: ("Mon", "Wed", "Fri"),
    4: ("Mon", "Tue", "Thu", "Fri"),
    5: ("Mon", "Tue", "Wed", "Fri", "Sat"),
    6: ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat"),
    7: WEEKDAYS,
}


def preset_meal_plan(targets: Targets) -> MealPlanResponse:
    """Seven identical days whose meals split every target by a fixed share."""
    meals = [
        MealPlanMeal(
            name=name,
            time=at,
            calories=round(targets.calories * share, 1),
            protein_g=round(targets.protein_g * share, 1),
            carbs_g=round(targets.carbs_g * share, 1),
            fats_g=round(targets.fats_g * share, 1),
        )
        for name, at, share in MEAL_SPLIT
    ]
    week = MealPlanWeek(
        **{day: MealPlanDay(meals=list(meals)) for day in WEEKDAYS}
    )
    return MealPlanResponse(
        plan=week,
        total_calories=targets.calories,
        total_protein=targets.protein_g,
        total_carbs=targets.carbs_g,
        total_fats=targets.fats_g,
    )


def preset_workout_program(goal: Goal, days_per_week: int) -> WorkoutProgramResponse:
    """Rotate full-body templates over the requested training days."""
    if not 1 <= days_per_week <= len(WEEKDAYS):
        raise ValueError("days_per_week must be between 1 and 7")
    low, high = REP_BANDS[goal]
    templates = WORKOUT_TEMPLATES[: min(days_per_week, len(WORKOUT_TEMPLATES))]
    workouts = [
        GeneratedWorkout(
            name=name,
            goal=goal.value,
            tags=["preset"],
            type="strength",
            exercises=[
                Exercise(
                    exercise_id=exercise_id,
                    name=exercise_name,
                    unit="kg",
                    target_sets=TARGET_SETS[goal],
                    rep_target=f"{low}-{high}",
                    rest_sec=REST_SECONDS[goal],
                )
                for exercise_id, exercise_name in exercises
            ],
        )
        for name, exercises in templates
    ]
    schedule: dict[str, str | None] = dict.fromkeys(WEEKDAYS)
    for index, day in enumerate(TRAINING_DAYS[days_per_week]):
        schedule[day] = workouts[index % len(workouts)].name
    return WorkoutProgramResponse(workouts=workouts, schedule=schedule)
