"""HTTP bridge to a device health store (HealthKit or Google Fit)."""

from dataclasses import dataclass
from datetime import datetime

import httpx

from sculptr.domain.health import PermissionScopes, StepSample, WorkoutRecord
from sculptr.services.health_sync import HealthCapability

WORKOUT_ACTIVITY_TYPES = {
    "strength": "TraditionalStrengthTraining",
    "cardio": "Running",
}


@dataclass
class HttpxHealthBridgeCapability(HealthCapability):
    """HTTPX-backed health capability exposed by the device companion bridge."""

    platform: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15.0

    @classmethod
    def create(
        cls, platform: str, base_url: str, timeout_seconds: float = 15.0
    ) -> "HttpxHealthBridgeCapability":
        """Create a bridge capability with a managed httpx session."""
        return cls(
            platform=platform,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(timeout=timeout_seconds),
            timeout_seconds=timeout_seconds,
        )

    async def request_permissions(self, scopes: PermissionScopes) -> bool:
        """Ask the device for read/write access to the requested data types."""
        read = [
            name
            for name, wanted in (("steps", scopes.steps), ("weight", scopes.weight))
            if wanted
        ]
        write = ["workouts"] if scopes.workouts else []
        response = await self.http_client.post(
            f"{self.base_url}/permissions",
            json={"platform": self.platform, "read": read, "write": write},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return bool(response.json().get("granted"))

    async def read_step_samples(
        self, start: datetime, end: datetime
    ) -> list[StepSample]:
        """Read raw step samples between two instants."""
        response = await self.http_client.get(
            f"{self.base_url}/steps",
            params={"startDate": start.isoformat(), "endDate": end.isoformat()},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        samples = response.json().get("samples") or []
        return [
            StepSample(
                value=float(sample.get("value") or 0),
                start=datetime.fromisoformat(sample["startDate"]),
                end=datetime.fromisoformat(sample["endDate"]),
            )
            for sample in samples
        ]

    async def save_workout(self, workout: WorkoutRecord) -> None:
        """Append a completed workout to the device store."""
        payload: dict[str, object] = {
            "type": WORKOUT_ACTIVITY_TYPES.get(workout.type, "Other"),
            "startDate": workout.start.isoformat(),
            "endDate": workout.end.isoformat(),
            "name": workout.name,
        }
        if workout.calories is not None:
            payload["energyBurned"] = workout.calories
        if workout.distance_km is not None:
            payload["distance"] = workout.distance_km
        response = await self.http_client.post(
            f"{self.base_url}/workouts", json=payload, timeout=self.timeout_seconds
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
