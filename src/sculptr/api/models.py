"""Pydantic models for API request bodies."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sculptr.domain.targets import Targets, Tier


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TargetsBody(_ApiModel):
    """Daily targets as sent by clients."""

    calories: int
    protein_g: int = Field(alias="proteinG")
    carbs_g: int = Field(alias="carbsG")
    fats_g: int = Field(alias="fatsG")

    def to_domain(self) -> Targets:
        """Convert into domain targets."""
        return Targets(
            calories=self.calories,
            protein_g=self.protein_g,
            carbs_g=self.carbs_g,
            fats_g=self.fats_g,
        )


class MealPlanValidationRequest(_ApiModel):
    """Meal plan to check against the user's targets."""

    plan: dict[str, Any]
    targets: TargetsBody
    tier: Tier = Tier.FREE


class WorkoutValidationRequest(_ApiModel):
    """Workout program to check against the user's goal and preferences."""

    program: dict[str, Any]
    goal: str
    preferences: dict[str, Any]
    tier: Tier = Tier.FREE


class MealPlanGenerationRequest(_ApiModel):
    profile: dict[str, Any]
    tier: Tier = Tier.FREE
    preferences: dict[str, Any] | None = None


class WorkoutGenerationRequest(_ApiModel):
    profile: dict[str, Any]
    preferences: dict[str, Any]
    tier: Tier = Tier.FREE


class HealthOptInRequest(_ApiModel):
    """Data types the user agrees to share."""

    steps: bool = True
    workouts: bool = True
    weight: bool = False


def targets_payload(targets: Targets) -> dict[str, int]:
    """Serialize targets with the client's field names."""
    return {
        "calories": targets.calories,
        "proteinG": targets.protein_g,
        "carbsG": targets.carbs_g,
        "fatsG": targets.fats_g,
    }
