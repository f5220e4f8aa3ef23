"""Domain models for the weekly check-in."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Literal

EscalationLevel = Literal[0, 1, 2]
Drift = Literal["up", "down"]


class WeightStatus(StrEnum):
    """Classification of the last week's weight change."""

    INSUFFICIENT = "insufficient"
    ON_TRACK = "on_track"
    STAGNANT = "stagnant"
    GAIN_TOO_FAST = "gain_too_fast"
    LOSS_TOO_FAST = "loss_too_fast"


@dataclass(frozen=True)
class WeightEntry:
    """Logged body weight for a date."""

    day: date
    kg: float


@dataclass(frozen=True)
class WeightTrend:
    status: WeightStatus
    delta: float


@dataclass(frozen=True)
class CheckinPlan:
    """Activity prescription adjusted at check-in."""

    step_target: int
    liss_min_per_session: int
    liss_sessions_per_week: int


@dataclass(frozen=True)
class AdjustmentProposal:
    """Changes suggested for the coming week."""

    calories_delta: int = 0
    cardio_minutes_delta: int = 0
    steps_delta: int = 0
    macro_shift: Literal["carbs", "none"] = "none"

    def is_noop(self) -> bool:
        """True when nothing would change."""
        return (
            self.calories_delta == 0
            and self.cardio_minutes_delta == 0
            and self.steps_delta == 0
        )
