"""Supabase-backed profile repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from sculptr.domain.targets import Targets
from sculptr.services.profiles import ProfileRepository, StoredProfile

_TARGET_COLUMNS = ("calories", "protein_g", "carbs_g", "fats_g")


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for profile persistence."""

    client: Client

    def get_profile(self, user_id: UUID) -> StoredProfile | None:
        """Return the stored profile row for a user, if present."""
        response = (
            self.client.table("profiles")
            .select("profile, targets")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return StoredProfile(
            profile=row.get("profile"), targets=_parse_targets(row.get("targets"))
        )

    def save_targets(self, user_id: UUID, targets: Targets) -> None:
        """Store computed targets on the user's profile row."""
        self.client.table("profiles").update(
            {
                "targets": {
                    "calories": targets.calories,
                    "protein_g": targets.protein_g,
                    "carbs_g": targets.carbs_g,
                    "fats_g": targets.fats_g,
                },
                "updated_at": datetime.now(tz=UTC).isoformat(),
            }
        ).eq("user_id", str(user_id)).execute()


def _parse_targets(raw: object) -> Targets | None:
    if not isinstance(raw, dict):
        return None
    values = []
    for column in _TARGET_COLUMNS:
        value = raw.get(column)
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
        values.append(int(value))
    return Targets(*values)
