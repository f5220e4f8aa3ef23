"""Stored profile targets."""

import logging
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import UUID

from sculptr.domain.targets import InvalidProfile, Profile, Targets
from sculptr.services.targets import TargetCalculator

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredProfile:
    """Profile document with whatever targets were last saved."""

    profile: dict[str, Any] | None
    targets: Targets | None


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    def get_profile(self, user_id: UUID) -> StoredProfile | None:
        """Return the stored profile document, if the user exists."""

    def save_targets(self, user_id: UUID, targets: Targets) -> None:
        """Merge targets into the user's profile document."""


@dataclass
class ProfileService:
    """Keep stored targets in sync with the user's profile."""

    repository: ProfileRepository
    calculator: TargetCalculator

    def ensure_targets(self, user_id: UUID) -> Targets | None:
        """Return usable targets, computing and saving them when missing.

        Stored targets are returned untouched when every field is positive.
        Otherwise targets are derived from the stored profile and merged back.
        Returns None when the user is unknown or the profile cannot produce
        targets.
        """
        stored = self.repository.get_profile(user_id)
        if stored is None or not stored.profile:
            return None
        if stored.targets is not None and stored.targets.is_complete():
            return stored.targets

        try:
            targets = self.calculator.calculate(Profile.from_mapping(stored.profile))
        except InvalidProfile as exc:
            _logger.warning(
                "Could not compute targets, profile may be incomplete: %s",
                exc,
                extra={"user_id": user_id},
            )
            return None
        self.repository.save_targets(user_id, targets)
        _logger.info("Targets computed and saved", extra={"user_id": user_id})
        return targets
