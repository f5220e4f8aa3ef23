"""Food lookup gateway over interchangeable nutrition providers."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol, TypeVar

from sculptr.domain.nutrition import BarcodeLookupResult, FoodItem, FoodSearchResult
from sculptr.services.cache import Cache

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class FoodProvider(Protocol):
    """Capability shared by every food database provider."""

    name: str

    async def search_food(self, query: str) -> list[FoodItem]:
        """Return candidate foods; an empty list when nothing matches."""

    async def lookup_barcode(self, code: str) -> FoodItem | None:
        """Return the product for a barcode, or None when unknown."""

    async def close(self) -> None:
        """Release network resources."""


@dataclass
class NutritionLookupGateway:
    """Cached, retrying lookups that degrade to empty results on failure.

    The gateway is shared across requests, so a provider failure is reported
    on the result it degraded and never kept as gateway state.
    """

    provider: FoodProvider
    cache: Cache
    search_ttl_seconds: int = 3600
    barcode_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search_food(self, query: str) -> FoodSearchResult:
        """Search foods by free text."""
        cleaned = query.strip()
        if not cleaned:
            return FoodSearchResult(foods=[])
        cache_key = f"{self.provider.name}:search:{cleaned.lower()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return FoodSearchResult(foods=cached)

        try:
            foods = await self._call_with_retry(
                lambda: self.provider.search_food(cleaned), action="search"
            )
        except Exception as exc:
            return FoodSearchResult(
                foods=[], error=self._record_failure("search", exc)
            )
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        _logger.debug(
            "Food search %s: query=%s results=%s",
            self.provider.name,
            cleaned,
            len(foods),
        )
        return FoodSearchResult(foods=foods)

    async def lookup_barcode(self, code: str) -> BarcodeLookupResult:
        """Look up a single product by barcode."""
        cleaned = code.strip()
        if not cleaned:
            return BarcodeLookupResult(food=None)
        cache_key = f"{self.provider.name}:barcode:{cleaned}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodItem):
            return BarcodeLookupResult(food=cached)

        try:
            food = await self._call_with_retry(
                lambda: self.provider.lookup_barcode(cleaned),
                action=f"barcode:{cleaned}",
            )
        except Exception as exc:
            return BarcodeLookupResult(
                food=None, error=self._record_failure(f"barcode:{cleaned}", exc)
            )
        if food is not None:
            self.cache.set(cache_key, food, ttl_seconds=self.barcode_ttl_seconds)
        return BarcodeLookupResult(food=food)

    async def _call_with_retry(
        self, func: Callable[[], Awaitable[T]], *, action: str
    ) -> T:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                _logger.debug(
                    "Food %s %s failed (attempt %s/%s, status=%s): %s",
                    self.provider.name,
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)

    def _record_failure(self, action: str, exc: Exception) -> str:
        _logger.warning(
            "Food provider %s unavailable for %s (status=%s)",
            self.provider.name,
            action,
            _status_code_from_exception(exc),
        )
        return f"{self.provider.name} unavailable: {exc}"


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
