"""
Performance evaluation for logged sets.

Classifies a completed set against the target it was prescribed:
- overperformed: beat the target by a wide margin
- met_target: within tolerance
- underperformed: missed weight/reps, or effort ran too high

This three-way label is the single input every progression strategy
branches on. Also provides exercise-level summaries, the consecutive
underperformance counter and hit-rate helpers used by the deload advisor.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from backend.core.estimated_max import estimated_1rm
from domain.models.training import PerformanceStatus, SessionRecord, SetRecord

logger = logging.getLogger(__name__)

# Sessions inspected when counting an underperformance streak
UNDERPERFORMANCE_LOOKBACK = 5


@dataclass(frozen=True)
class EvaluationThresholds:
    """Tolerances used by evaluate_set_performance."""

    weight_tolerance: float = 0.95  # weight >= target * this counts as met
    weight_overshoot: float = 1.05  # weight > target * this is overperformance
    rep_overshoot: int = 1  # reps > target + this is overperformance
    rpe_tolerance: float = 1.0  # rpe <= target + this counts as met
    rpe_undershoot: float = 1.0  # rpe < target - this is overperformance
    rpe_fatigue_margin: float = 2.0  # rpe > target + this is underperformance
    # Heavier-but-fewer-reps reclassification bands (tunable, not derived)
    e1rm_overperform_band: float = 1.05
    e1rm_met_band: float = 0.95


DEFAULT_THRESHOLDS = EvaluationThresholds()


def evaluate_set_performance(
    weight: float,
    reps: int,
    rpe: float,
    target_weight: Optional[float],
    target_reps: Optional[int],
    target_rpe: Optional[float],
    thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
) -> PerformanceStatus:
    """
    Determine performance status for a set.

    An actual RPE of 0 means "not recorded" and leaves every RPE condition
    neutral.

    Args:
        weight: Actual weight lifted
        reps: Actual reps completed
        rpe: Actual RPE (0 = unspecified)
        target_weight: Prescribed weight, or None
        target_reps: Prescribed reps, or None
        target_rpe: Prescribed RPE, or None
        thresholds: Tolerances

    Returns:
        PerformanceStatus; met_target when any target is missing (baseline)
    """
    if target_weight is None or target_reps is None or target_rpe is None:
        return PerformanceStatus.MET_TARGET

    rpe_known = rpe > 0
    weight_met = weight >= target_weight * thresholds.weight_tolerance
    reps_met = reps >= target_reps
    rpe_met = not rpe_known or rpe <= target_rpe + thresholds.rpe_tolerance
    rpe_too_high = rpe_known and rpe > target_rpe + thresholds.rpe_fatigue_margin

    if weight_met and reps_met and rpe_met:
        if (
            weight > target_weight * thresholds.weight_overshoot
            or reps > target_reps + thresholds.rep_overshoot
            or (rpe_known and rpe < target_rpe - thresholds.rpe_undershoot)
        ):
            return PerformanceStatus.OVERPERFORMED
        if rpe_too_high:
            return PerformanceStatus.UNDERPERFORMED
        return PerformanceStatus.MET_TARGET

    if rpe_too_high:
        return PerformanceStatus.UNDERPERFORMED

    # Heavier but fewer reps: compare estimated maxes
    if weight > target_weight and not reps_met:
        actual_e1rm = estimated_1rm(weight, reps)
        target_e1rm = estimated_1rm(target_weight, target_reps)
        if actual_e1rm >= target_e1rm * thresholds.e1rm_overperform_band:
            return PerformanceStatus.OVERPERFORMED
        if actual_e1rm >= target_e1rm * thresholds.e1rm_met_band:
            return PerformanceStatus.MET_TARGET

    return PerformanceStatus.UNDERPERFORMED


def evaluate_set(
    set_record: SetRecord,
    thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
) -> PerformanceStatus:
    """Evaluate a SetRecord against its own stored targets."""
    return evaluate_set_performance(
        set_record.weight,
        set_record.reps,
        set_record.rpe,
        set_record.target_weight,
        set_record.target_reps,
        set_record.target_rpe,
        thresholds,
    )


@dataclass
class ExercisePerformance:
    """Overall performance of one exercise in one session."""

    status: PerformanceStatus
    overperformed_count: int = 0
    met_target_count: int = 0
    underperformed_count: int = 0

    @property
    def total(self) -> int:
        return self.overperformed_count + self.met_target_count + self.underperformed_count


def summarize_exercise_performance(
    sets: Iterable[SetRecord],
    thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
) -> ExercisePerformance:
    """
    Calculate overall exercise performance from its working sets.

    Overperformed wins when it outnumbers underperformed sets;
    underperformed wins when it outnumbers met-target sets.
    """
    over = met = under = 0
    for s in sets:
        if not s.is_working or not s.is_resistance:
            continue
        status = evaluate_set(s, thresholds)
        if status == PerformanceStatus.OVERPERFORMED:
            over += 1
        elif status == PerformanceStatus.MET_TARGET:
            met += 1
        else:
            under += 1

    overall = PerformanceStatus.MET_TARGET
    if over > under:
        overall = PerformanceStatus.OVERPERFORMED
    elif under > met:
        overall = PerformanceStatus.UNDERPERFORMED

    return ExercisePerformance(
        status=overall,
        overperformed_count=over,
        met_target_count=met,
        underperformed_count=under,
    )


def count_consecutive_underperformance(
    sessions: Sequence[SessionRecord],
    lookback: int = UNDERPERFORMANCE_LOOKBACK,
    thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
) -> int:
    """
    Count consecutive underperformed sessions, most recent first.

    ``sessions`` is ordered oldest -> newest. A session with no prescribed
    working sets cannot be judged and ends the streak.
    """
    streak = 0
    for session in list(sessions)[-lookback:][::-1]:
        prescribed = [s for s in session.working_sets if s.has_targets]
        if not prescribed:
            break
        summary = summarize_exercise_performance(prescribed, thresholds)
        if summary.status != PerformanceStatus.UNDERPERFORMED:
            break
        streak += 1

    logger.debug("Underperformance streak: %s (lookback=%s)", streak, lookback)
    return streak


def hit_rate(
    sets: Iterable[SetRecord],
    thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
) -> Optional[float]:
    """
    Percentage (0-100) of prescribed working sets that met or beat target.

    Returns None when no set carried a target.
    """
    statuses: List[PerformanceStatus] = [
        evaluate_set(s, thresholds)
        for s in sets
        if s.is_working and s.is_resistance and s.has_targets
    ]
    if not statuses:
        return None
    met = sum(1 for st in statuses if st != PerformanceStatus.UNDERPERFORMED)
    return met / len(statuses) * 100
