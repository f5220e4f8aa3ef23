"""Domain models for device health sync."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Literal


@dataclass(frozen=True)
class HealthSyncSettings:
    """Per-user health sync preferences."""

    enabled: bool = False
    sync_steps: bool = True
    sync_workouts: bool = True
    sync_weight: bool = False
    last_sync_date: str | None = None


@dataclass(frozen=True)
class DailySteps:
    """Step count for one user and one calendar date."""

    steps: int
    date_iso: str
    synced_at: datetime
    source: str


@dataclass(frozen=True)
class StepSample:
    """Raw step sample read from a device store."""

    value: float
    start: datetime
    end: datetime


@dataclass(frozen=True)
class WorkoutRecord:
    """Completed workout written back to a device store."""

    name: str
    start: datetime
    end: datetime
    type: Literal["strength", "cardio"]
    calories: float | None = None
    distance_km: float | None = None

    @property
    def duration_seconds(self) -> int:
        """Elapsed time of the workout."""
        return round((self.end - self.start).total_seconds())


@dataclass(frozen=True)
class PermissionScopes:
    """Data types the user agrees to share."""

    steps: bool = True
    workouts: bool = True
    weight: bool = False


class SyncState(StrEnum):
    """Lifecycle of a user's health sync."""

    DISABLED = "disabled"
    REQUESTING = "requesting"
    GRANTED = "granted"
    DENIED = "denied"
    SYNCING = "syncing"
    SYNCED = "synced"
    SYNC_FAILED = "sync_failed"


class SyncStatus(StrEnum):
    """Terminal outcome of a health sync operation."""

    GRANTED = "granted"
    DENIED = "denied"
    CAPABILITY_UNAVAILABLE = "capability_unavailable"
    TIMED_OUT = "timed_out"
    SYNCED = "synced"
    SKIPPED = "skipped"
    SYNC_FAILED = "sync_failed"


@dataclass(frozen=True)
class SyncOutcome:
    """Result returned to callers instead of raising."""

    status: SyncStatus
    steps: int | None = None
    day: date | None = None
    detail: str | None = None
