"""Tests for profile target maintenance."""

from uuid import uuid4

from sculptr.domain.targets import Targets
from sculptr.services.profiles import ProfileService, StoredProfile
from sculptr.services.targets import TargetCalculator
from tests.conftest import SCENARIO_PROFILE, SCENARIO_TARGETS, InMemoryProfileRepository


def _service(repository: InMemoryProfileRepository) -> ProfileService:
    return ProfileService(repository, TargetCalculator())


def test_complete_targets_are_returned_untouched(
    profile_repository: InMemoryProfileRepository,
) -> None:
    user_id = uuid4()
    stored = Targets(calories=2000, protein_g=150, carbs_g=200, fats_g=60)
    profile_repository.profiles[user_id] = StoredProfile(
        profile=dict(SCENARIO_PROFILE), targets=stored
    )

    assert _service(profile_repository).ensure_targets(user_id) == stored
    assert profile_repository.saved == []


def test_missing_targets_are_computed_and_saved(
    profile_repository: InMemoryProfileRepository,
) -> None:
    user_id = uuid4()
    profile_repository.profiles[user_id] = StoredProfile(
        profile=dict(SCENARIO_PROFILE), targets=None
    )

    targets = _service(profile_repository).ensure_targets(user_id)

    assert targets == SCENARIO_TARGETS
    assert profile_repository.saved == [(user_id, SCENARIO_TARGETS)]


def test_zero_calorie_targets_are_recomputed(
    profile_repository: InMemoryProfileRepository,
) -> None:
    user_id = uuid4()
    profile_repository.profiles[user_id] = StoredProfile(
        profile=dict(SCENARIO_PROFILE),
        targets=Targets(calories=0, protein_g=150, carbs_g=200, fats_g=60),
    )

    assert _service(profile_repository).ensure_targets(user_id) == SCENARIO_TARGETS


def test_negative_macro_targets_are_recomputed(
    profile_repository: InMemoryProfileRepository,
) -> None:
    user_id = uuid4()
    profile_repository.profiles[user_id] = StoredProfile(
        profile=dict(SCENARIO_PROFILE),
        targets=Targets(calories=2000, protein_g=150, carbs_g=-5, fats_g=60),
    )

    assert _service(profile_repository).ensure_targets(user_id) == SCENARIO_TARGETS


def test_zero_carb_targets_are_kept(
    profile_repository: InMemoryProfileRepository,
) -> None:
    user_id = uuid4()
    stored = Targets(calories=1800, protein_g=160, carbs_g=0, fats_g=129)
    profile_repository.profiles[user_id] = StoredProfile(
        profile=dict(SCENARIO_PROFILE), targets=stored
    )
    service = _service(profile_repository)

    assert service.ensure_targets(user_id) == stored
    assert service.ensure_targets(user_id) == stored
    assert profile_repository.saved == []


def test_incomplete_profile_returns_none(
    profile_repository: InMemoryProfileRepository,
) -> None:
    user_id = uuid4()
    profile_repository.profiles[user_id] = StoredProfile(
        profile={"goal": "Fat Loss", "sex": "Male"}, targets=None
    )

    assert _service(profile_repository).ensure_targets(user_id) is None
    assert profile_repository.saved == []


def test_unknown_user_returns_none(
    profile_repository: InMemoryProfileRepository,
) -> None:
    assert _service(profile_repository).ensure_targets(uuid4()) is None
