"""Device health sync coordination.

The coordinator never branches on platform identity. A capability slot is
resolved once at startup and is either available (wrapping an
implementation) or unavailable (with a reason). Every failure is converted to
a ``SyncOutcome`` so callers can degrade to "sync skipped".
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from datetime import UTC, date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID

import httpx

from sculptr.domain.health import (
    DailySteps,
    HealthSyncSettings,
    PermissionScopes,
    StepSample,
    SyncOutcome,
    SyncState,
    SyncStatus,
    WorkoutRecord,
)

_SETTINGS_FIELDS = frozenset(item.name for item in fields(HealthSyncSettings))

_logger = logging.getLogger(__name__)


class HealthCapability(Protocol):
    """Platform health store integration."""

    platform: str

    async def request_permissions(self, scopes: PermissionScopes) -> bool:
        """Ask the user for access; False means the user declined."""

    async def read_step_samples(
        self, start: datetime, end: datetime
    ) -> list[StepSample]:
        """Return step samples in the range; raise when the store can't be read."""

    async def save_workout(self, workout: WorkoutRecord) -> None:
        """Append a completed workout to the store."""

    async def close(self) -> None:
        """Release the connection to the store."""


@dataclass(frozen=True)
class AvailableCapability:
    """A health integration present on this platform."""

    impl: HealthCapability


@dataclass(frozen=True)
class UnavailableCapability:
    """No health integration is present on this platform."""

    reason: str


CapabilitySlot = AvailableCapability | UnavailableCapability
CapabilityFactory = Callable[[], HealthCapability]


@dataclass
class CapabilityRegistry:
    """Maps platform tags to capability factories."""

    factories: dict[str, CapabilityFactory] = field(default_factory=dict)

    def register(self, platform: str, factory: CapabilityFactory) -> None:
        """Register a factory for a platform tag."""
        self.factories[platform] = factory

    def resolve(self, platform: str | None) -> CapabilitySlot:
        """Resolve the capability for a platform once, at startup."""
        if platform is None:
            return UnavailableCapability("no health platform configured")
        factory = self.factories.get(platform)
        if factory is None:
            return UnavailableCapability(f"no native integration for {platform}")
        try:
            return AvailableCapability(factory())
        except Exception as exc:
            _logger.warning("Health capability %s failed to load: %s", platform, exc)
            return UnavailableCapability(f"{platform} integration failed to load")


class HealthSyncRepository(Protocol):
    """Persistence interface for health sync settings and daily steps."""

    def get_settings(self, user_id: UUID) -> HealthSyncSettings | None:
        """Return stored settings for a user, if any."""

    def upsert_settings(self, user_id: UUID, changes: dict[str, object]) -> None:
        """Create or merge settings fields for a user."""

    def upsert_steps(self, user_id: UUID, record: DailySteps) -> None:
        """Create or overwrite the steps record for a user and date."""

    def get_steps(self, user_id: UUID, date_iso: str) -> DailySteps | None:
        """Return the steps record for a user and date, if any."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class HealthSyncCoordinator:
    """Reads and writes device health data and persists sync state."""

    repository: HealthSyncRepository
    capability: CapabilitySlot
    timeout_seconds: float = 15.0
    clock: Callable[[], datetime] = _utcnow
    _states: dict[UUID, SyncState] = field(default_factory=dict)

    def state(self, user_id: UUID) -> SyncState:
        """Return the current sync state for a user."""
        return self._states.get(user_id, SyncState.DISABLED)

    def get_settings(self, user_id: UUID) -> HealthSyncSettings:
        """Return stored settings or defaults when absent or unreadable."""
        try:
            stored = self.repository.get_settings(user_id)
        except Exception:
            _logger.warning(
                "Failed to load health sync settings", extra={"user_id": user_id}
            )
            return HealthSyncSettings()
        return stored or HealthSyncSettings()

    def update_settings(self, user_id: UUID, **changes: object) -> bool:
        """Merge the given settings fields; return False when not persisted."""
        unknown = set(changes) - _SETTINGS_FIELDS
        if unknown:
            raise ValueError(f"Unknown health sync settings: {sorted(unknown)}")
        try:
            self.repository.upsert_settings(user_id, dict(changes))
        except Exception:
            _logger.warning(
                "Failed to save health sync settings", extra={"user_id": user_id}
            )
            return False
        return True

    async def opt_in(
        self, user_id: UUID, scopes: PermissionScopes | None = None
    ) -> SyncOutcome:
        """Request permissions and enable sync when granted."""
        resolved_scopes = scopes or PermissionScopes()
        self._states[user_id] = SyncState.REQUESTING
        if isinstance(self.capability, UnavailableCapability):
            self._states[user_id] = SyncState.DISABLED
            return SyncOutcome(
                status=SyncStatus.CAPABILITY_UNAVAILABLE,
                detail=self.capability.reason,
            )
        try:
            granted = await asyncio.wait_for(
                self.capability.impl.request_permissions(resolved_scopes),
                timeout=self.timeout_seconds,
            )
        except (TimeoutError, httpx.TimeoutException):
            self._states[user_id] = SyncState.DISABLED
            return SyncOutcome(status=SyncStatus.TIMED_OUT)
        except Exception as exc:
            _logger.warning("Health permission request failed: %s", exc)
            self._states[user_id] = SyncState.DISABLED
            return SyncOutcome(status=SyncStatus.SYNC_FAILED, detail=str(exc))

        if not granted:
            self._states[user_id] = SyncState.DENIED
            return SyncOutcome(status=SyncStatus.DENIED)

        self._states[user_id] = SyncState.GRANTED
        self.update_settings(
            user_id,
            enabled=True,
            sync_steps=resolved_scopes.steps,
            sync_workouts=resolved_scopes.workouts,
            sync_weight=resolved_scopes.weight,
        )
        return SyncOutcome(status=SyncStatus.GRANTED)

    def opt_out(self, user_id: UUID) -> None:
        """Disable sync for a user."""
        self.update_settings(user_id, enabled=False)
        self._states[user_id] = SyncState.DISABLED

    async def sync_steps(self, user_id: UUID, day: date | None = None) -> SyncOutcome:
        """Read the day's steps from the device and persist them."""
        now = self.clock()
        resolved_day = day or now.date()
        settings = self.get_settings(user_id)
        if not settings.enabled or not settings.sync_steps:
            return SyncOutcome(status=SyncStatus.SKIPPED, day=resolved_day)
        if isinstance(self.capability, UnavailableCapability):
            return SyncOutcome(
                status=SyncStatus.CAPABILITY_UNAVAILABLE,
                day=resolved_day,
                detail=self.capability.reason,
            )

        self._states[user_id] = SyncState.SYNCING
        start = datetime.combine(resolved_day, time.min, tzinfo=UTC)
        end = start + timedelta(days=1)
        try:
            samples = await asyncio.wait_for(
                self.capability.impl.read_step_samples(start, end),
                timeout=self.timeout_seconds,
            )
        except (TimeoutError, httpx.TimeoutException):
            self._states[user_id] = SyncState.SYNC_FAILED
            return SyncOutcome(status=SyncStatus.TIMED_OUT, day=resolved_day)
        except Exception as exc:
            _logger.warning("Failed to read steps for %s: %s", resolved_day, exc)
            self._states[user_id] = SyncState.SYNC_FAILED
            return SyncOutcome(
                status=SyncStatus.SYNC_FAILED, day=resolved_day, detail=str(exc)
            )

        steps = round(sum(max(sample.value, 0.0) for sample in samples))
        record = DailySteps(
            steps=steps,
            date_iso=resolved_day.isoformat(),
            synced_at=now,
            source=self.capability.impl.platform,
        )
        try:
            self.repository.upsert_steps(user_id, record)
            self.repository.upsert_settings(
                user_id, {"last_sync_date": now.isoformat()}
            )
        except Exception as exc:
            _logger.warning("Failed to persist steps for %s: %s", resolved_day, exc)
            self._states[user_id] = SyncState.SYNC_FAILED
            return SyncOutcome(
                status=SyncStatus.SYNC_FAILED,
                steps=steps,
                day=resolved_day,
                detail=str(exc),
            )

        self._states[user_id] = SyncState.SYNCED
        return SyncOutcome(status=SyncStatus.SYNCED, steps=steps, day=resolved_day)

    async def write_workout(
        self, user_id: UUID, workout: WorkoutRecord
    ) -> SyncOutcome:
        """Append a completed workout to the device store."""
        settings = self.get_settings(user_id)
        if not settings.enabled or not settings.sync_workouts:
            return SyncOutcome(status=SyncStatus.SKIPPED)
        if isinstance(self.capability, UnavailableCapability):
            return SyncOutcome(
                status=SyncStatus.CAPABILITY_UNAVAILABLE,
                detail=self.capability.reason,
            )
        try:
            await asyncio.wait_for(
                self.capability.impl.save_workout(workout),
                timeout=self.timeout_seconds,
            )
        except (TimeoutError, httpx.TimeoutException):
            return SyncOutcome(status=SyncStatus.TIMED_OUT)
        except Exception as exc:
            _logger.warning("Failed to write workout %s: %s", workout.name, exc)
            return SyncOutcome(status=SyncStatus.SYNC_FAILED, detail=str(exc))
        return SyncOutcome(status=SyncStatus.SYNCED)

    def get_synced_steps(self, user_id: UUID, day: date) -> int | None:
        """Return persisted steps for a date, or None when absent."""
        try:
            record = self.repository.get_steps(user_id, day.isoformat())
        except Exception:
            _logger.warning("Failed to load synced steps", extra={"user_id": user_id})
            return None
        return record.steps if record else None
