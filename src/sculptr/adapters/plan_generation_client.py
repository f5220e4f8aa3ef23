"""Callable-function client for the external plan generator."""

from dataclasses import dataclass
from typing import Any

import httpx

from sculptr.services.plan_generation import PlanGenerator


@dataclass
class HttpxPlanGenerationClient(PlanGenerator):
    """HTTPX-backed client for the plan generation callable functions."""

    base_url: str
    http_client: httpx.AsyncClient
    id_token: str | None = None
    timeout_seconds: float = 120.0

    @classmethod
    def create(
        cls,
        base_url: str,
        id_token: str | None = None,
        timeout_seconds: float = 120.0,
    ) -> "HttpxPlanGenerationClient":
        """Create a plan generation client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(timeout=timeout_seconds),
            id_token=id_token,
            timeout_seconds=timeout_seconds,
        )

    async def generate_workout_program(self, payload: dict[str, Any]) -> Any:
        """Call the workout program generator."""
        return await self._invoke("generateWorkoutProgram", payload)

    async def generate_meal_plan(self, payload: dict[str, Any]) -> Any:
        """Call the meal plan generator."""
        return await self._invoke("generateMealPlan", payload)

    async def _invoke(self, function: str, payload: dict[str, Any]) -> Any:
        headers = {"Authorization": f"Bearer {self.id_token}"} if self.id_token else {}
        response = await self.http_client.post(
            f"{self.base_url}/{function}",
            json={"data": payload},
            headers=headers,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict) or "result" not in body:
            error = body.get("error") if isinstance(body, dict) else None
            raise RuntimeError(f"{function} returned no result: {error or body!r}")
        return body["result"]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
