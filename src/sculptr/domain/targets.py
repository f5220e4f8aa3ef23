"""Domain models for profiles and calorie/macro targets."""

import re
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import TypeVar


class Goal(StrEnum):
    """Fitness goal selected by the user."""

    FAT_LOSS = "Fat Loss"
    MUSCLE_GAIN = "Muscle Gain"
    STRENGTH_CONDITIONING = "Strength & Conditioning"
    MAINTENANCE = "Maintenance"


class Sex(StrEnum):
    """Sex used by the basal rate equation."""

    MALE = "Male"
    FEMALE = "Female"


class ActivityLevel(StrEnum):
    """Weekly training frequency."""

    NONE = "None"
    LIGHT = "1-3/wk"
    MODERATE = "4-5/wk"
    HIGH = "6-7/wk or manual"


class Tier(StrEnum):
    """Subscription tier used for policy selection."""

    FREE = "free"
    PREMIUM = "premium"


class InvalidProfile(ValueError):
    """Raised when a profile cannot produce targets."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


@dataclass(frozen=True)
class Profile:
    """Physiological profile used to derive targets."""

    goal: Goal
    sex: Sex
    weight_kg: float
    height_cm: float
    age: int
    activity: ActivityLevel

    @classmethod
    def from_mapping(
        cls, data: dict[str, object], today: date | None = None
    ) -> "Profile":
        """Build a profile from a loosely shaped mapping.

        Accepts enum names (``FAT_LOSS``, ``FatLoss``) as well as display
        labels (``"Fat Loss"``, ``"4-5/wk"``). When ``age`` is missing it is
        derived from ``dob`` (``YYYY-MM-DD``).
        """
        age = data.get("age")
        if age in (None, "", 0) and data.get("dob"):
            age = age_from_birth_date(str(data["dob"]), today=today)
        return cls(
            goal=parse_enum(Goal, data.get("goal"), "goal"),
            sex=parse_enum(Sex, data.get("sex"), "sex"),
            weight_kg=_to_number(
                data.get("weight_kg", data.get("weightKg")), "weight_kg"
            ),
            height_cm=_to_number(
                data.get("height_cm", data.get("heightCm")), "height_cm"
            ),
            age=int(_to_number(age, "age")),
            activity=parse_enum(ActivityLevel, data.get("activity"), "activity"),
        )


@dataclass(frozen=True)
class Targets:
    """Daily calorie and macro targets."""

    calories: int
    protein_g: int
    carbs_g: int
    fats_g: int

    def is_complete(self) -> bool:
        """Return True when calories are positive and no macro is negative.

        A zero macro is a valid computed target (carbs clip at 0).
        """
        return (
            self.calories > 0
            and self.protein_g >= 0
            and self.carbs_g >= 0
            and self.fats_g >= 0
        )


@dataclass(frozen=True)
class TargetBreakdown:
    """Intermediate values of a target computation."""

    basal: float
    activity_multiplier: float
    expenditure: float
    calorie_target: float
    floor_applied: bool
    rest_day: bool
    targets: Targets


_NORMALIZE = re.compile(r"[^a-z0-9]")

E = TypeVar("E", bound=StrEnum)


def parse_enum(enum_type: type[E], value: object, field: str) -> E:
    """Parse an enum from its value or name, ignoring case and punctuation."""
    if isinstance(value, enum_type):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidProfile(field, f"expected one of {_choices(enum_type)}")
    wanted = _NORMALIZE.sub("", value.lower())
    for member in enum_type:
        if wanted in {
            _NORMALIZE.sub("", member.value.lower()),
            _NORMALIZE.sub("", member.name.lower()),
        }:
            return member
    raise InvalidProfile(
        field, f"unknown value {value!r}, expected one of {_choices(enum_type)}"
    )


def age_from_birth_date(dob: str, today: date | None = None) -> int:
    """Return completed years between a ``YYYY-MM-DD`` birth date and today."""
    try:
        born = date.fromisoformat(dob[:10])
    except ValueError as exc:
        raise InvalidProfile("dob", f"not an ISO date: {dob!r}") from exc
    current = today or date.today()
    years = current.year - born.year
    if (current.month, current.day) < (born.month, born.day):
        years -= 1
    return years


def _to_number(value: object, field: str) -> float:
    if isinstance(value, bool) or value is None:
        raise InvalidProfile(field, "is required")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as exc:
            raise InvalidProfile(field, f"not a number: {value!r}") from exc
    raise InvalidProfile(field, f"not a number: {value!r}")


def _choices(enum_type: type[StrEnum]) -> str:
    return ", ".join(member.value for member in enum_type)
