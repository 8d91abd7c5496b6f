"""
Default progression strategy for custom (non-preset) training programs.

Two rule sets, selected by plan type:
- Hypertrophy (double progression): add reps within the range, then weight
- Strength (weight progression): add weight every successful session

Both react to the previous set's performance label, the running
underperformance streak and the gap since the last session.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from backend.core.loadable_weight import WeightRounder, round_to_increment
from backend.core.performance_evaluator import (
    DEFAULT_THRESHOLDS,
    EvaluationThresholds,
    evaluate_set,
    summarize_exercise_performance,
)
from domain.models.training import (
    PerformanceStatus,
    PlanSettings,
    PlanType,
    SetRecord,
    TargetCalculation,
)

logger = logging.getLogger(__name__)

# Weight multipliers for the 2nd and 3rd+ consecutive underperformance
FIRST_REDUCTION = 0.975
SECOND_REDUCTION = 0.95

# Gaps (days) outside which targets are held at the previous actuals
SAME_DAY_GAP = 1
RETURNING_GAP = 14


@dataclass(frozen=True)
class _Prescription:
    weight: float
    reps: float
    rpe: float


def is_recency_hold(days_since_last_session: Optional[int]) -> bool:
    """Same-day repeats and returns after a long break hold the previous actuals."""
    return days_since_last_session is not None and (
        days_since_last_session <= SAME_DAY_GAP or days_since_last_session >= RETURNING_GAP
    )


def _clamp_reps(reps: float, settings: PlanSettings) -> float:
    return max(settings.rep_range_min, min(reps, settings.rep_range_max))


def _underperformance_step(
    weight: float,
    reps: float,
    settings: PlanSettings,
    underperformance_count: int,
) -> _Prescription:
    """Hold, then trim, then trim harder as the streak grows."""
    if underperformance_count <= 0:
        return _Prescription(weight, reps, settings.target_rpe_max)
    if underperformance_count == 1:
        return _Prescription(
            weight * FIRST_REDUCTION,
            max(reps - 1, settings.rep_range_min),
            settings.target_rpe_max,
        )
    return _Prescription(
        weight * SECOND_REDUCTION,
        max(reps - 1, settings.rep_range_min),
        settings.target_rpe_min,
    )


def _hypertrophy_step(
    status: PerformanceStatus,
    weight: float,
    reps: float,
    settings: PlanSettings,
    underperformance_count: int,
) -> _Prescription:
    at_rep_max = reps >= settings.rep_range_max
    full_bump = 1 + settings.weight_increase_percent / 100
    half_bump = 1 + settings.weight_increase_percent / 200

    if status == PerformanceStatus.OVERPERFORMED:
        if at_rep_max:
            return _Prescription(weight * full_bump, settings.rep_range_min, settings.target_rpe_max)
        return _Prescription(
            weight,
            min(reps + settings.rep_increase, settings.rep_range_max),
            settings.target_rpe_max,
        )
    if status == PerformanceStatus.UNDERPERFORMED:
        return _underperformance_step(weight, reps, settings, underperformance_count)

    if at_rep_max:
        return _Prescription(weight * half_bump, settings.rep_range_min, settings.target_rpe_max)
    return _Prescription(weight, reps, settings.target_rpe_max)


def _strength_step(
    status: PerformanceStatus,
    weight: float,
    reps: float,
    settings: PlanSettings,
    underperformance_count: int,
) -> _Prescription:
    at_rep_max = reps >= settings.rep_range_max
    full_bump = 1 + settings.weight_increase_percent / 100
    half_bump = 1 + settings.weight_increase_percent / 200

    if status == PerformanceStatus.OVERPERFORMED:
        bump = half_bump if at_rep_max else full_bump
        return _Prescription(
            weight * bump,
            min(reps + 1, settings.rep_range_max),
            settings.target_rpe_max,
        )
    if status == PerformanceStatus.UNDERPERFORMED:
        return _underperformance_step(weight, reps, settings, underperformance_count)

    return _Prescription(weight * half_bump, reps, settings.target_rpe_max)


def _progress(
    status: PerformanceStatus,
    weight: float,
    reps: float,
    rpe: float,
    plan_type: PlanType,
    settings: PlanSettings,
    underperformance_count: int,
    days_since_last_session: Optional[int],
) -> Tuple[_Prescription, bool]:
    """Apply the plan rules and both overrides; returns (prescription, high_rpe)."""
    if PlanType(plan_type) == PlanType.HYPERTROPHY:
        step = _hypertrophy_step(status, weight, reps, settings, underperformance_count)
    else:
        step = _strength_step(status, weight, reps, settings, underperformance_count)

    step = _Prescription(step.weight, _clamp_reps(step.reps, settings), step.rpe)
    held = _Prescription(weight, reps, rpe if rpe > 0 else settings.target_rpe_max)

    # Effort was already above the ceiling: don't progress
    high_rpe = rpe > settings.target_rpe_max and status != PerformanceStatus.UNDERPERFORMED
    if high_rpe:
        logger.debug("RPE %.1f above ceiling %.1f, holding targets", rpe, settings.target_rpe_max)
        step = held

    # Recency is checked last, so it wins over the RPE override
    if is_recency_hold(days_since_last_session):
        logger.debug("Gap of %s days, holding targets", days_since_last_session)
        step = held

    return step, high_rpe


def _finalize(
    step: _Prescription,
    settings: PlanSettings,
    round_weight: WeightRounder,
    high_rpe: bool,
    status: PerformanceStatus,
) -> TargetCalculation:
    reps = int(_clamp_reps(round(step.reps), settings))
    return TargetCalculation(
        target_weight=round_weight(step.weight),
        target_reps=reps,
        target_rpe=step.rpe,
        high_rpe_last_time=high_rpe,
        performance_status=status,
    )


def calculate_set_target(
    previous_set: Optional[SetRecord],
    plan_type: PlanType,
    settings: PlanSettings,
    underperformance_count: int = 0,
    days_since_last_session: Optional[int] = None,
    round_weight: WeightRounder = round_to_increment,
    thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
) -> TargetCalculation:
    """
    Calculate the target for a set from the same set's previous performance.

    Args:
        previous_set: The set performed last time, or None (no history)
        plan_type: hypertrophy (double progression) or strength
        settings: Plan settings for the plan type
        underperformance_count: Consecutive underperformed sessions before
            the one ``previous_set`` belongs to
        days_since_last_session: Gap since ``previous_set`` was performed
        round_weight: Loadable-weight rounder
        thresholds: Evaluation tolerances

    Returns:
        TargetCalculation; all-None when there is no previous set
    """
    if previous_set is None:
        return TargetCalculation.baseline()

    status = evaluate_set(previous_set, thresholds)
    step, high_rpe = _progress(
        status,
        previous_set.weight,
        previous_set.reps,
        previous_set.rpe,
        plan_type,
        settings,
        underperformance_count,
        days_since_last_session,
    )
    return _finalize(step, settings, round_weight, high_rpe, status)


def calculate_exercise_target(
    previous_sets: Sequence[SetRecord],
    plan_type: PlanType,
    settings: PlanSettings,
    underperformance_count: int = 0,
    days_since_last_session: Optional[int] = None,
    round_weight: WeightRounder = round_to_increment,
    thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
) -> TargetCalculation:
    """
    Calculate one target for a whole exercise from last session's averages.

    Uses the average weight/reps/RPE of the previous working sets and the
    exercise-level performance summary.
    """
    sets = [s for s in previous_sets if s.is_working and s.is_resistance]
    if not sets:
        return TargetCalculation.baseline()

    n = len(sets)
    avg_weight = sum(s.weight for s in sets) / n
    avg_reps = sum(s.reps for s in sets) / n
    rated = [s.rpe for s in sets if s.rpe > 0]
    avg_rpe = sum(rated) / len(rated) if rated else 0.0

    status = summarize_exercise_performance(sets, thresholds).status
    step, high_rpe = _progress(
        status,
        avg_weight,
        avg_reps,
        avg_rpe,
        plan_type,
        settings,
        underperformance_count,
        days_since_last_session,
    )
    return _finalize(step, settings, round_weight, high_rpe, status)
