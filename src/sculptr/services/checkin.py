"""Weekly check-in: weight trend analysis and target adjustments."""

from collections.abc import Iterable
from dataclasses import replace
from datetime import date

from sculptr.domain.checkin import (
    AdjustmentProposal,
    CheckinPlan,
    Drift,
    EscalationLevel,
    WeightEntry,
    WeightStatus,
    WeightTrend,
)
from sculptr.domain.targets import Goal, Targets
from sculptr.services.targets import (
    KCAL_PER_G_CARBS,
    REST_DAY_REDUCTION,
    round_half_up,
)

WINDOW_DAYS = 7
STAGNANT_KG = 0.1
MAINTENANCE_DRIFT_KG = 0.3
CARDIO_STEP_MIN = 5
CALORIE_STEP = 100
STEP_REDUCTION = 700

_GAIN_GOALS = frozenset({Goal.MUSCLE_GAIN, Goal.STRENGTH_CONDITIONING})


def analyze_weights(
    entries: Iterable[WeightEntry], goal: Goal, today: date | None = None
) -> WeightTrend:
    """Classify the change between the oldest and newest entry of the week."""
    current = today or date.today()
    window = sorted(
        (entry for entry in entries if (current - entry.day).days <= WINDOW_DAYS),
        key=lambda entry: entry.day,
    )
    if len(window) < 2:
        return WeightTrend(WeightStatus.INSUFFICIENT, 0.0)

    delta = window[-1].kg - window[0].kg
    if abs(delta) <= STAGNANT_KG:
        return WeightTrend(WeightStatus.STAGNANT, delta)
    if goal is Goal.MAINTENANCE:
        if delta > MAINTENANCE_DRIFT_KG:
            return WeightTrend(WeightStatus.GAIN_TOO_FAST, delta)
        if delta < -MAINTENANCE_DRIFT_KG:
            return WeightTrend(WeightStatus.LOSS_TOO_FAST, delta)
        return WeightTrend(WeightStatus.ON_TRACK, delta)
    if goal is Goal.FAT_LOSS:
        stagnant = delta >= -STAGNANT_KG
    else:
        stagnant = delta <= STAGNANT_KG
    return WeightTrend(
        WeightStatus.STAGNANT if stagnant else WeightStatus.ON_TRACK, delta
    )


def propose_adjustments(
    status: WeightStatus,
    goal: Goal,
    level: EscalationLevel,
    drift: Drift | None = None,
) -> AdjustmentProposal:
    """Suggest changes for a stagnant week.

    Escalation goes from cardio minutes (level 0) to calories (level 1) to the
    daily step target (level 2). Maintenance only reacts at level 1, and only
    when a drift direction is known.
    """
    if status is not WeightStatus.STAGNANT:
        return AdjustmentProposal()

    cut = goal is Goal.FAT_LOSS or (goal is Goal.MAINTENANCE and drift == "down")
    bulk = goal in _GAIN_GOALS or (goal is Goal.MAINTENANCE and drift == "up")
    if level == 0:
        if goal is Goal.FAT_LOSS:
            return AdjustmentProposal(cardio_minutes_delta=CARDIO_STEP_MIN)
        if goal in _GAIN_GOALS:
            return AdjustmentProposal(cardio_minutes_delta=-CARDIO_STEP_MIN)
        return AdjustmentProposal()
    if level == 1:
        if cut:
            return AdjustmentProposal(calories_delta=-CALORIE_STEP, macro_shift="carbs")
        if bulk:
            return AdjustmentProposal(calories_delta=CALORIE_STEP)
        return AdjustmentProposal()
    if goal is Goal.MAINTENANCE:
        return AdjustmentProposal()
    return AdjustmentProposal(steps_delta=-STEP_REDUCTION)


def apply_adjustments(
    targets: Targets, checkin: CheckinPlan, proposal: AdjustmentProposal
) -> tuple[Targets, CheckinPlan]:
    """Apply a proposal; calorie changes move carbs only."""
    new_targets = targets
    if proposal.calories_delta:
        carbs_delta = round(proposal.calories_delta / KCAL_PER_G_CARBS)
        new_targets = replace(
            targets,
            calories=targets.calories + proposal.calories_delta,
            carbs_g=max(0, targets.carbs_g + carbs_delta),
        )
    new_checkin = replace(
        checkin,
        liss_min_per_session=max(
            0, checkin.liss_min_per_session + proposal.cardio_minutes_delta
        ),
        step_target=max(0, checkin.step_target + proposal.steps_delta),
    )
    return new_targets, new_checkin


def rest_day_calories(
    targets: Targets, goal: Goal, *, floor_kcal: float | None = None
) -> int:
    """Calories for a rest day; only fat loss eats less.

    ``floor_kcal`` is the basal floor used by ``TargetCalculator``. With it the
    result matches ``calculate(profile, rest_day=True).calories``; without it
    the reduction is applied unfloored.
    """
    if goal is not Goal.FAT_LOSS:
        return targets.calories
    reduced = targets.calories - REST_DAY_REDUCTION
    if floor_kcal is None:
        return reduced
    return max(reduced, round_half_up(floor_kcal))
