"""Nutritionix food provider."""

import math
from dataclasses import dataclass

import httpx

from sculptr.domain.nutrition import FoodItem
from sculptr.services.nutrition import FoodProvider


@dataclass
class HttpxNutritionixProvider(FoodProvider):
    """HTTPX-backed Nutritionix client mapped to canonical food items."""

    app_id: str
    app_key: str
    base_url: str
    http_client: httpx.AsyncClient
    name: str = "nutritionix"

    @classmethod
    def create(
        cls, app_id: str, app_key: str, base_url: str
    ) -> "HttpxNutritionixProvider":
        """Create a provider with a managed httpx session."""
        return cls(
            app_id=app_id,
            app_key=app_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
        )

    async def search_food(self, query: str) -> list[FoodItem]:
        """Resolve a natural-language query into foods."""
        response = await self.http_client.post(
            f"{self.base_url}/natural/nutrients",
            headers=self._headers(),
            json={"query": query},
            timeout=15,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return []
        response.raise_for_status()
        foods = response.json().get("foods") or []
        return [_map_food(food, str(index)) for index, food in enumerate(foods)]

    async def lookup_barcode(self, code: str) -> FoodItem | None:
        """Look up a branded item by UPC."""
        response = await self.http_client.get(
            f"{self.base_url}/search/item",
            headers=self._headers(),
            params={"upc": code},
            timeout=15,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        foods = response.json().get("foods") or []
        if not foods:
            return None
        return _map_food(foods[0], code)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    def _headers(self) -> dict[str, str]:
        return {"x-app-id": self.app_id, "x-app-key": self.app_key}


def _map_food(food: dict[str, object], fallback_id: str) -> FoodItem:
    food_id = food.get("nix_item_id") or food.get("tag_id") or fallback_id
    return FoodItem(
        id=str(food_id),
        name=str(food.get("food_name") or ""),
        brand=_optional_str(food.get("brand_name")),
        calories=_to_float(food.get("nf_calories")),
        protein_g=_to_float(food.get("nf_protein")),
        carbs_g=_to_float(food.get("nf_total_carbohydrate")),
        fats_g=_to_float(food.get("nf_total_fat")),
    )


def _optional_str(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _to_float(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0
