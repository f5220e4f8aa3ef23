"""Open Food Facts food provider."""

import math
from dataclasses import dataclass

import httpx

from sculptr.domain.nutrition import FoodItem
from sculptr.services.nutrition import FoodProvider

_PRODUCT_FOUND = 1
KJ_PER_KCAL = 4.184


@dataclass
class HttpxOpenFoodFactsProvider(FoodProvider):
    """HTTPX-backed Open Food Facts client; nutrients are per 100 g."""

    base_url: str
    http_client: httpx.AsyncClient
    page_size: int = 10
    name: str = "off"

    @classmethod
    def create(cls, base_url: str) -> "HttpxOpenFoodFactsProvider":
        """Create a provider with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient())

    async def search_food(self, query: str) -> list[FoodItem]:
        """Search products by free text."""
        response = await self.http_client.get(
            f"{self.base_url}/cgi/search.pl",
            params={
                "search_terms": query,
                "search_simple": 1,
                "action": "process",
                "json": 1,
                "page_size": self.page_size,
            },
            timeout=15,
        )
        response.raise_for_status()
        products = response.json().get("products") or []
        foods = [_map_product(product) for product in products]
        return [food for food in foods if food is not None]

    async def lookup_barcode(self, code: str) -> FoodItem | None:
        """Fetch a product by barcode."""
        response = await self.http_client.get(
            f"{self.base_url}/api/v0/product/{code}.json", timeout=15
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        payload = response.json()
        product = payload.get("product")
        if payload.get("status") != _PRODUCT_FOUND or not product:
            return None
        return _map_product(product, fallback_id=code)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _map_product(
    product: dict[str, object], fallback_id: str | None = None
) -> FoodItem | None:
    brands_tags = product.get("brands_tags") or []
    name = (
        product.get("product_name")
        or product.get("generic_name")
        or (brands_tags[0] if isinstance(brands_tags, list) and brands_tags else None)
    )
    if not name:
        return None
    nutriments = product.get("nutriments") or {}
    brand = product.get("brands")
    return FoodItem(
        id=str(product.get("_id") or product.get("code") or fallback_id or name),
        name=str(name),
        brand=str(brand) if brand else None,
        calories=_energy_kcal(nutriments),
        protein_g=_to_float(nutriments.get("proteins_100g")),
        carbs_g=_to_float(nutriments.get("carbohydrates_100g")),
        fats_g=_to_float(nutriments.get("fat_100g")),
    )


def _energy_kcal(nutriments: dict[str, object]) -> float:
    for key in ("energy-kcal_100g", "energy-kcal"):
        if nutriments.get(key) is not None:
            return _to_float(nutriments[key])
    # Products labelled only in kilojoules.
    if nutriments.get("energy-kj_100g") is not None:
        return _to_float(nutriments["energy-kj_100g"]) / KJ_PER_KCAL
    return 0.0


def _to_float(value: object) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    else:
        try:
            number = float(str(value))
        except ValueError:
            return 0.0
    return number if math.isfinite(number) else 0.0
