"""Domain models for logged meals."""

from dataclasses import dataclass, field
from enum import StrEnum


@dataclass(frozen=True)
class MacroTotals:
    """Component-wise calorie and macro sums."""

    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fats_g: float = 0.0

    def __add__(self, other: "MacroTotals") -> "MacroTotals":
        return MacroTotals(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            carbs_g=self.carbs_g + other.carbs_g,
            fats_g=self.fats_g + other.fats_g,
        )


@dataclass(frozen=True)
class MealItem:
    """Single logged food with its macros."""

    id: str
    name: str
    calories: float
    protein_g: float
    carbs_g: float
    fats_g: float

    def macros(self) -> MacroTotals:
        """Return the item's contribution to totals."""
        return MacroTotals(
            calories=self.calories,
            protein_g=self.protein_g,
            carbs_g=self.carbs_g,
            fats_g=self.fats_g,
        )


@dataclass
class Meal:
    """A named group of logged items."""

    id: str
    name: str
    items: dict[str, MealItem] = field(default_factory=dict)


class AdherenceStatus(StrEnum):
    """Logged intake classified against the calorie target."""

    OK = "ok"
    OVER = "over"
    UNDER = "under"


@dataclass(frozen=True)
class AdherenceReport:
    """Calorie delta and its classification."""

    delta: float
    status: AdherenceStatus


class UnknownMeal(KeyError):
    """Raised when a meal id is not tracked."""


class UnknownMealItem(KeyError):
    """Raised when an item id is not part of a meal."""
