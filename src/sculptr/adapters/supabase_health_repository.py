"""Supabase repository for health sync settings and daily steps."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from sculptr.domain.health import DailySteps, HealthSyncSettings
from sculptr.services.health_sync import HealthSyncRepository

_SETTINGS_COLUMNS = "enabled, sync_steps, sync_workouts, sync_weight, last_sync_date"


@dataclass
class SupabaseHealthSyncRepository(HealthSyncRepository):
    """Supabase implementation for health sync persistence."""

    client: Client

    def get_settings(self, user_id: UUID) -> HealthSyncSettings | None:
        """Return stored settings for a user, if any."""
        response = (
            self.client.table("health_sync_settings")
            .select(_SETTINGS_COLUMNS)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        defaults = HealthSyncSettings()
        return HealthSyncSettings(
            enabled=_flag(row.get("enabled"), defaults.enabled),
            sync_steps=_flag(row.get("sync_steps"), defaults.sync_steps),
            sync_workouts=_flag(row.get("sync_workouts"), defaults.sync_workouts),
            sync_weight=_flag(row.get("sync_weight"), defaults.sync_weight),
            last_sync_date=row.get("last_sync_date"),
        )

    def upsert_settings(self, user_id: UUID, changes: dict[str, object]) -> None:
        """Merge the given columns into the user's settings row."""
        self.client.table("health_sync_settings").upsert(
            {
                **changes,
                "user_id": str(user_id),
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()

    def upsert_steps(self, user_id: UUID, record: DailySteps) -> None:
        """Create or overwrite the steps row for the record's date."""
        self.client.table("daily_steps").upsert(
            {
                "user_id": str(user_id),
                "date_iso": record.date_iso,
                "steps": record.steps,
                "synced_at": record.synced_at.isoformat(),
                "source": record.source,
            },
            on_conflict="user_id,date_iso",
        ).execute()

    def get_steps(self, user_id: UUID, date_iso: str) -> DailySteps | None:
        """Return the steps row for a user and date, if any."""
        response = (
            self.client.table("daily_steps")
            .select("steps, date_iso, synced_at, source")
            .eq("user_id", str(user_id))
            .eq("date_iso", date_iso)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return DailySteps(
            steps=int(row["steps"]),
            date_iso=row["date_iso"],
            synced_at=datetime.fromisoformat(row["synced_at"]),
            source=row["source"],
        )


def _flag(value: object, default: bool) -> bool:
    return default if value is None else bool(value)
