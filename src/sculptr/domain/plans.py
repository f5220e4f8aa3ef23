"""Boundary models for externally generated workout and meal plans."""

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

Weekday = Literal["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
WEEKDAYS: tuple[Weekday, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class _PlanModel(BaseModel):
    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")


class Exercise(_PlanModel):
    """Exercise prescription within a generated workout."""

    exercise_id: str = Field(alias="exerciseId")
    name: str = Field(min_length=1)
    unit: Literal["kg", "lb"]
    target_sets: int = Field(alias="targetSets", ge=1)
    rep_target: str | None = Field(default=None, alias="repTarget")
    rest_sec: float | None = Field(default=None, alias="restSec", ge=0)
    rpe_target: float | None = Field(default=None, alias="rpeTarget")
    notes: str | None = None


class GeneratedWorkout(_PlanModel):
    """Workout as returned by the external planner."""

    name: str = Field(min_length=1)
    goal: str | None = None
    tags: list[str] | None = None
    type: Literal["strength", "cardio"]
    exercises: list[Exercise] | None = None
    cardio: dict[str, Any] | None = None


class WorkoutProgramResponse(_PlanModel):
    """Workout generation response: workouts plus a weekly schedule."""

    workouts: list[GeneratedWorkout]
    schedule: dict[Weekday, str | None]


class WorkoutPreferences(_PlanModel):
    """User preferences sent with a workout generation request."""

    days_per_week: int = Field(alias="daysPerWeek", ge=1, le=7)
    equipment: list[str] | None = None
    focus_areas: list[str] | None = Field(default=None, alias="focusAreas")
    experience: Literal["beginner", "intermediate", "advanced"] | None = None


class MealPlanMeal(_PlanModel):
    """Single meal within a generated day."""

    name: str = Field(min_length=1)
    time: str | None = None
    calories: float = Field(ge=0)
    protein_g: float = Field(alias="proteinG", ge=0)
    carbs_g: float = Field(alias="carbsG", ge=0)
    fats_g: float = Field(alias="fatsG", ge=0)
    instructions: str | None = None


class MealPlanDay(_PlanModel):
    """Meals planned for one weekday."""

    meals: list[MealPlanMeal]


class MealPlanWeek(_PlanModel):
    """Seven planned days keyed by weekday."""

    mon: MealPlanDay = Field(alias="Mon")
    tue: MealPlanDay = Field(alias="Tue")
    wed: MealPlanDay = Field(alias="Wed")
    thu: MealPlanDay = Field(alias="Thu")
    fri: MealPlanDay = Field(alias="Fri")
    sat: MealPlanDay = Field(alias="Sat")
    sun: MealPlanDay = Field(alias="Sun")

    def days(self) -> list[tuple[Weekday, MealPlanDay]]:
        """Return the days in calendar order."""
        return [(day, getattr(self, day.lower())) for day in WEEKDAYS]


class MealPlanResponse(_PlanModel):
    """Meal plan generation response."""

    plan: MealPlanWeek
    total_calories: float = Field(alias="totalCalories")
    total_protein: float = Field(alias="totalProtein")
    total_carbs: float = Field(alias="totalCarbs")
    total_fats: float = Field(alias="totalFats")


class MalformedPlan(ValueError):
    """Raised when a payload does not match the generation contract."""

    def __init__(self, errors: list[dict[str, str]]) -> None:
        summary = "; ".join(f"{err['loc']}: {err['message']}" for err in errors)
        super().__init__(f"Malformed plan: {summary}")
        self.errors = errors

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "MalformedPlan":
        """Flatten pydantic errors into location/message pairs."""
        return cls(
            [
                {
                    "loc": ".".join(str(part) for part in err["loc"]) or "$",
                    "message": err["msg"],
                }
                for err in exc.errors()
            ]
        )


@dataclass(frozen=True)
class RuleViolation:
    """A structurally valid plan breaking one policy rule."""

    rule: str
    path: str
    message: str


@dataclass(frozen=True)
class PlanValidationResult:
    """Outcome of rule evaluation."""

    violations: list[RuleViolation] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        """True when no rule was violated."""
        return not self.violations

    def rules(self) -> set[str]:
        """Return the distinct violated rule codes."""
        return {violation.rule for violation in self.violations}
