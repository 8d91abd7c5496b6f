"""Short (~80 char) explanations for why a target was suggested."""
from typing import Mapping, Optional, Sequence

from backend.core.program_strategies import ExerciseContext
from backend.core.progression_strategy import RETURNING_GAP, is_recency_hold
from domain.models.training import (
    DEFAULT_PLAN_SETTINGS,
    PerformanceStatus,
    PlanSettings,
    PlanType,
    ProgramStrategy,
    SetRecord,
    TargetCalculation,
    TargetStrategy,
)

FIVE_THREE_ONE_BANDS = {1: "65-85%", 2: "70-90%", 3: "75-95%"}


def _program_explanation(
    strategy: TargetStrategy,
    cycle_week: Optional[int],
    day_label: Optional[str],
) -> str:
    if strategy == TargetStrategy.FIVE_THREE_ONE:
        week = cycle_week or 1
        return f"5/3/1 Week {week}: {FIVE_THREE_ONE_BANDS.get(week, '75-95%')} of training max."
    if strategy == TargetStrategy.LINEAR:
        return "Linear progression: +5 lb upper / +10 lb lower."
    if strategy == TargetStrategy.GZCLP:
        return "GZCLP: AMRAP on T1, progression based on reps."
    if strategy == TargetStrategy.TEXAS_METHOD:
        return f"Texas Method {day_label}." if day_label else "Texas Method: volume/intensity rotation."
    if strategy == TargetStrategy.PHUL:
        focus = "power" if day_label and "power" in day_label.lower() else "hypertrophy"
        return f"PHUL {focus} day: progression from your last session."
    return "Program-based target."


def explain_target(
    status: Optional[PerformanceStatus],
    plan_type: PlanType,
    underperformance_count: int,
    strategy: TargetStrategy = TargetStrategy.DEFAULT,
    cycle_week: Optional[int] = None,
    day_label: Optional[str] = None,
    at_rep_max: bool = False,
    high_rpe_last_time: bool = False,
    days_since_last_session: Optional[int] = None,
) -> str:
    """
    Explain a target in one sentence.

    Holds are explained in the order the default strategy applies them, so
    a recency hold wins over a high-RPE hold.

    Args:
        status: Performance label of the previous session (None = baseline)
        plan_type: Plan type the default strategy ran with
        underperformance_count: Current underperformance streak
        strategy: Strategy that produced the target
        cycle_week: 5/3/1 cycle week
        day_label: Program day label (Texas Method / PHUL)
        at_rep_max: Previous reps were at the top of the rep range
        high_rpe_last_time: Target was held because RPE exceeded the ceiling
        days_since_last_session: Gap since the previous session
    """
    if strategy != TargetStrategy.DEFAULT:
        return _program_explanation(strategy, cycle_week, day_label)

    if status is None:
        return "No history yet. Log this session to set your baseline."
    if is_recency_hold(days_since_last_session):
        if days_since_last_session >= RETURNING_GAP:
            return "First session in a while. Repeating last numbers to ease back in."
        return "Trained this lift very recently. Repeating last session's numbers."
    if high_rpe_last_time:
        return "Last time felt hard (high RPE). Holding weight and reps."

    hypertrophy = PlanType(plan_type) == PlanType.HYPERTROPHY
    if status == PerformanceStatus.OVERPERFORMED:
        if hypertrophy and at_rep_max:
            return "Beat the top of the rep range. Weight goes up, reps reset."
        if hypertrophy:
            return "You beat last time. One more rep at the same weight."
        return "You beat last time. Slightly higher target to keep progressing."
    if status == PerformanceStatus.MET_TARGET:
        if hypertrophy and at_rep_max:
            return "Hit the top of the rep range. Small weight bump, reps reset."
        if hypertrophy:
            return "Met target. Same weight and reps, beat them to move up."
        return "Met target. Small weight bump this week."
    if underperformance_count <= 0:
        return "Holding steady. Aim for this again next time."
    if underperformance_count == 1:
        return "Reduced slightly to allow recovery."
    return "Lightened to support recovery. Consider a deload week."


def _first_previous_set(context: ExerciseContext) -> Optional[SetRecord]:
    for session in reversed(list(context.history)):
        if session.working_sets:
            return session.working_sets[0]
    return None


def explain_exercise_targets(
    targets: Sequence[TargetCalculation],
    context: ExerciseContext,
    plan_type: PlanType,
    strategy: ProgramStrategy,
    day_label: str = "",
    plan_settings: Optional[Mapping[PlanType, PlanSettings]] = None,
) -> str:
    """Explain an exercise's targets from its first set and the slot's state."""
    first = targets[0] if targets else None
    previous = _first_previous_set(context)
    plan_type = PlanType(plan_type)
    settings = (plan_settings or DEFAULT_PLAN_SETTINGS).get(plan_type) or DEFAULT_PLAN_SETTINGS[plan_type]
    return explain_target(
        first.performance_status if first else None,
        plan_type,
        context.underperformance_count,
        strategy=strategy.kind,
        cycle_week=strategy.cycle_week,
        day_label=day_label,
        at_rep_max=previous is not None and previous.reps >= settings.rep_range_max,
        high_rpe_last_time=bool(first and first.high_rpe_last_time),
        days_since_last_session=context.days_since_last_session,
    )
