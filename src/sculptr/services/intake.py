"""Daily intake tracking against targets."""

import logging
import math
from dataclasses import dataclass, field
from uuid import uuid4

from sculptr.domain.meals import (
    AdherenceReport,
    AdherenceStatus,
    MacroTotals,
    Meal,
    MealItem,
    UnknownMeal,
    UnknownMealItem,
)
from sculptr.domain.nutrition import FoodItem
from sculptr.domain.targets import Targets

OVER_THRESHOLD_KCAL = 50
UNDER_THRESHOLD_KCAL = -75

_logger = logging.getLogger(__name__)


@dataclass
class IntakeTracker:
    """In-memory meal log for a single day.

    Totals are folded from the current items on every call, so no stored sum
    can drift from the items it describes.
    """

    targets: Targets
    _meals: dict[str, Meal] = field(default_factory=dict)

    def add_meal(self, name: str, meal_id: str | None = None) -> Meal:
        """Create an empty meal and return it."""
        resolved_id = meal_id or str(uuid4())
        if resolved_id in self._meals:
            raise ValueError(f"Meal {resolved_id} already exists")
        meal = Meal(id=resolved_id, name=name)
        self._meals[resolved_id] = meal
        return meal

    def add_item(self, meal_id: str, item: MealItem) -> MealItem:
        """Append an item to a meal."""
        meal = self._get_meal(meal_id)
        _ensure_valid_amounts(item)
        if item.id in meal.items:
            raise ValueError(f"Item {item.id} already logged in meal {meal_id}")
        meal.items[item.id] = item
        return item

    def add_food(
        self, meal_id: str, food: FoodItem, servings: float = 1.0
    ) -> MealItem:
        """Log a looked-up food, scaled by the number of servings."""
        if not math.isfinite(servings) or servings <= 0:
            raise ValueError("servings must be positive")
        label = f"{food.name} ({food.brand})" if food.brand else food.name
        item = MealItem(
            id=str(uuid4()),
            name=label,
            calories=food.calories * servings,
            protein_g=food.protein_g * servings,
            carbs_g=food.carbs_g * servings,
            fats_g=food.fats_g * servings,
        )
        return self.add_item(meal_id, item)

    def remove_item(self, meal_id: str, item_id: str) -> MealItem:
        """Remove an item from a meal and return it."""
        meal = self._get_meal(meal_id)
        if item_id not in meal.items:
            raise UnknownMealItem(item_id)
        return meal.items.pop(item_id)

    def remove_meal(self, meal_id: str) -> Meal:
        """Remove a meal with all of its items."""
        if meal_id not in self._meals:
            raise UnknownMeal(meal_id)
        return self._meals.pop(meal_id)

    def meals(self) -> list[Meal]:
        """Return the tracked meals."""
        return list(self._meals.values())

    def set_targets(self, targets: Targets) -> None:
        """Replace the targets used for adherence classification."""
        self.targets = targets

    def totals(self) -> MacroTotals:
        """Sum every item of every meal."""
        total = MacroTotals()
        for meal in self._meals.values():
            for item in meal.items.values():
                total = total + item.macros()
        return total

    def over_under_status(self) -> AdherenceReport:
        """Classify logged calories against the calorie target."""
        delta = self.totals().calories - self.targets.calories
        if delta > OVER_THRESHOLD_KCAL:
            status = AdherenceStatus.OVER
        elif delta < UNDER_THRESHOLD_KCAL:
            status = AdherenceStatus.UNDER
        else:
            status = AdherenceStatus.OK
        _logger.debug("Intake delta=%s status=%s", delta, status)
        return AdherenceReport(delta=delta, status=status)

    def _get_meal(self, meal_id: str) -> Meal:
        meal = self._meals.get(meal_id)
        if meal is None:
            raise UnknownMeal(meal_id)
        return meal


def _ensure_valid_amounts(item: MealItem) -> None:
    for field_name in ("calories", "protein_g", "carbs_g", "fats_g"):
        value = getattr(item, field_name)
        if not math.isfinite(value):
            raise ValueError(f"{field_name} must be a finite number")
        if value < 0:
            raise ValueError(f"{field_name} must not be negative")
