"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FoodItem:
    """Canonical food shape shared by every lookup provider."""

    id: str
    name: str
    calories: float
    protein_g: float
    carbs_g: float
    fats_g: float
    brand: str | None = None


@dataclass(frozen=True)
class FoodSearchResult:
    """Foods found for a query; ``error`` is set when the provider was down."""

    foods: list[FoodItem]
    error: str | None = None

    @property
    def degraded(self) -> bool:
        """True when the result stands in for an unavailable provider."""
        return self.error is not None


@dataclass(frozen=True)
class BarcodeLookupResult:
    """Product found for a barcode, if any."""

    food: FoodItem | None
    error: str | None = None

    @property
    def degraded(self) -> bool:
        """True when the result stands in for an unavailable provider."""
        return self.error is not None
