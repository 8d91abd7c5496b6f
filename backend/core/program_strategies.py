"""
Named program target strategies.

Preset templates declare a target strategy; each one prescribes sets with
its own method but honours the same contract as the default strategy:
- input: an ExerciseContext (slot history + streak/gap state)
- output: one TargetCalculation per prescribed set
- no history for the slot -> all-None (baseline) targets
- weights rounded with the injected WeightRounder

Strategies:
- default: per-set double/weight progression (progression_strategy)
- 5/3/1: percentages of a training max, 3-week cycle
- Linear (Starting Strength / StrongLifts): flat increment per session
- GZCLP: tiered by exercise position, AMRAP-driven
- Texas Method: volume / recovery / intensity day rotation
- PHUL: default progression with power or hypertrophy settings per day
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from backend.core.estimated_max import best_estimated_1rm
from backend.core.loadable_weight import WeightRounder, round_to_increment
from backend.core.performance_evaluator import (
    DEFAULT_THRESHOLDS,
    EvaluationThresholds,
    count_consecutive_underperformance,
    summarize_exercise_performance,
)
from backend.core.presets import get_preset, get_preset_target_strategy
from backend.core.progression_strategy import calculate_set_target
from domain.models.training import (
    DEFAULT_PLAN_SETTINGS,
    LinearVariant,
    PerformanceStatus,
    PHULFocus,
    PlanSettings,
    PlanType,
    ProgramStrategy,
    SessionRecord,
    SetRecord,
    TargetCalculation,
    TargetStrategy,
    TexasDay,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

TRAINING_MAX_FRACTION = 0.9

# 5/3/1: Week 1 = 5/5/5+, Week 2 = 3/3/3+, Week 3 = 5/3/1+
FIVE_THREE_ONE_PERCENTAGES = {
    1: (0.65, 0.75, 0.85),
    2: (0.70, 0.80, 0.90),
    3: (0.75, 0.85, 0.95),
}
FIVE_THREE_ONE_REPS = {
    1: (5, 5, 5),
    2: (3, 3, 3),
    3: (5, 3, 1),
}

UPPER_BODY_INCREMENT = 5.0
LOWER_BODY_INCREMENT = 10.0
LOWER_BODY_KEYWORDS = ("squat", "deadlift", "leg press", "lunge", "hip thrust", "romanian", "rdl")

LINEAR_REPS = 5
LINEAR_RPE = 8.0
LINEAR_DELOAD = 0.9

GZCLP_T1_SETS, GZCLP_T1_REPS = 5, 3
GZCLP_T2_SETS, GZCLP_T2_REPS = 3, 10
GZCLP_T3_SETS, GZCLP_T3_REPS = 3, 15
GZCLP_T1_RESET = 0.85
GZCLP_T2_RESET = 0.9
GZCLP_T3_AMRAP_GOAL = 25
GZCLP_T3_INCREMENT = 2.5

TEXAS_VOLUME_SETS = 5
TEXAS_RECOVERY_SETS = 2
TEXAS_INTENSITY_SETS = 1
TEXAS_RECOVERY_FRACTION = 0.8
TEXAS_INTENSITY_FACTOR = 1 / 0.9

AMRAP_RPE = 9.0
STANDARD_RPE = 8.0
RECOVERY_RPE = 6.0


# =============================================================================
# Context
# =============================================================================


@dataclass(frozen=True)
class ExerciseContext:
    """
    Everything a strategy knows about one exercise slot.

    Attributes:
        exercise_name: Exact exercise name
        history: Prior sessions for this exercise in this program day,
            oldest -> newest
        position: 0-based order of the exercise within the day
        planned_sets: Set count to prescribe when the method doesn't fix one
        underperformance_count: Consecutive underperformed sessions before
            the most recent one
        days_since_last_session: Gap since the most recent session
        reference_history: Texas Method only; the same lift's volume-day
            sessions
    """

    exercise_name: str
    history: Sequence[SessionRecord] = ()
    position: int = 0
    planned_sets: int = 3
    underperformance_count: int = 0
    days_since_last_session: Optional[int] = None
    reference_history: Sequence[SessionRecord] = ()


def build_exercise_context(
    exercise_name: str,
    history: Sequence[SessionRecord],
    workout_date: Optional[date] = None,
    position: int = 0,
    planned_sets: int = 3,
    reference_history: Sequence[SessionRecord] = (),
    thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
) -> ExerciseContext:
    """
    Derive streak and recency state from a slot's history.

    The underperformance count covers the sessions before the most recent
    one, so the third straight miss is planned with a count of 2.
    """
    history = list(history)
    days_since = None
    if history and workout_date is not None:
        days_since = (workout_date - history[-1].workout_date).days
    return ExerciseContext(
        exercise_name=exercise_name,
        history=history,
        position=position,
        planned_sets=planned_sets,
        underperformance_count=count_consecutive_underperformance(
            history[:-1], thresholds=thresholds
        ),
        days_since_last_session=days_since,
        reference_history=list(reference_history),
    )


@dataclass(frozen=True)
class _Inputs:
    plan_type: PlanType
    plan_settings: Mapping[PlanType, PlanSettings]
    round_weight: WeightRounder
    thresholds: EvaluationThresholds

    def settings_for(self, plan_type: PlanType) -> PlanSettings:
        return self.plan_settings.get(plan_type) or DEFAULT_PLAN_SETTINGS[plan_type]


# =============================================================================
# Classification helpers
# =============================================================================


def is_lower_body(exercise_name: str) -> bool:
    lower = exercise_name.lower()
    return any(k in lower for k in LOWER_BODY_KEYWORDS)


def is_deadlift_pattern(exercise_name: str) -> bool:
    return "deadlift" in exercise_name.lower()


def linear_increment(exercise_name: str) -> float:
    """+10 for lower-body lifts, +5 otherwise."""
    return LOWER_BODY_INCREMENT if is_lower_body(exercise_name) else UPPER_BODY_INCREMENT


def five_three_one_cycle_week(session_number: int) -> int:
    """Session 1 -> week 1, 2 -> 2, 3 -> 3, 4 -> 1, ..."""
    return (session_number % 3) or 3


def training_max_from_sets(sets: Sequence[SetRecord]) -> float:
    """90% of the best e1RM across the first three working sets."""
    return TRAINING_MAX_FRACTION * best_estimated_1rm(list(sets)[:3])


def gzclp_tier(position: int) -> int:
    """Tier 1 for the first lift of the day, tier 2 for the second, 3 after."""
    if position <= 0:
        return 1
    if position == 1:
        return 2
    return 3


def texas_day_type(day_label: str) -> TexasDay:
    lower = (day_label or "").lower()
    if "recovery" in lower or "light" in lower:
        return TexasDay.RECOVERY
    if "intensity" in lower:
        return TexasDay.INTENSITY
    return TexasDay.VOLUME


def phul_focus_for(day_label: str) -> PHULFocus:
    if "power" in (day_label or "").lower():
        return PHULFocus.POWER
    return PHULFocus.HYPERTROPHY


def _last_working_sets(history: Sequence[SessionRecord]) -> List[SetRecord]:
    if not history:
        return []
    return history[-1].working_sets


def _top_weight(sets: Sequence[SetRecord]) -> float:
    return max((s.weight for s in sets), default=0.0)


def _repeat(target: TargetCalculation, count: int) -> List[TargetCalculation]:
    return [target] * count


# =============================================================================
# Calculators
# =============================================================================


def _default_targets(
    strategy: ProgramStrategy,
    context: ExerciseContext,
    inputs: _Inputs,
    plan_type: Optional[PlanType] = None,
) -> List[TargetCalculation]:
    plan_type = plan_type or inputs.plan_type
    settings = inputs.settings_for(plan_type)
    previous = _last_working_sets(context.history)
    count = max(context.planned_sets, len(previous))
    if not previous:
        return _repeat(TargetCalculation.baseline(), count)

    return [
        calculate_set_target(
            previous[min(i, len(previous) - 1)],
            plan_type,
            settings,
            underperformance_count=context.underperformance_count,
            days_since_last_session=context.days_since_last_session,
            round_weight=inputs.round_weight,
            thresholds=inputs.thresholds,
        )
        for i in range(count)
    ]


def _five_three_one_targets(
    strategy: ProgramStrategy,
    context: ExerciseContext,
    inputs: _Inputs,
) -> List[TargetCalculation]:
    previous = _last_working_sets(context.history)
    count = max(3, context.planned_sets, len(previous))
    if not previous:
        return _repeat(TargetCalculation.baseline(), count)

    training_max = strategy.training_max or training_max_from_sets(previous)
    if training_max <= 0:
        return _repeat(TargetCalculation.baseline(), count)

    week = strategy.cycle_week or 1
    logger.debug(
        "5/3/1 %s: week %s, training max %.1f", context.exercise_name, week, training_max
    )
    targets = [
        TargetCalculation(
            target_weight=inputs.round_weight(training_max * pct),
            target_reps=reps,
            target_rpe=AMRAP_RPE if i == 2 else STANDARD_RPE,
        )
        for i, (pct, reps) in enumerate(
            zip(FIVE_THREE_ONE_PERCENTAGES[week], FIVE_THREE_ONE_REPS[week])
        )
    ]

    # Assistance/extra sets progress normally
    extra = _default_targets(strategy, context, inputs)
    targets.extend(extra[3:count])
    targets.extend(extra[-1:] * (count - len(targets)))
    return targets


def _linear_targets(
    strategy: ProgramStrategy,
    context: ExerciseContext,
    inputs: _Inputs,
) -> List[TargetCalculation]:
    variant = strategy.linear_variant or LinearVariant.STARTING_STRENGTH
    if is_deadlift_pattern(context.exercise_name):
        count = 1
    elif variant == LinearVariant.STRONGLIFTS:
        count = 5
    else:
        count = 3

    previous = _last_working_sets(context.history)
    if not previous:
        return _repeat(TargetCalculation.baseline(), count)

    base = _top_weight(previous)
    status = summarize_exercise_performance(previous, inputs.thresholds).status
    if status != PerformanceStatus.UNDERPERFORMED:
        weight = base + linear_increment(context.exercise_name)
    elif context.underperformance_count >= 2:
        weight = base * LINEAR_DELOAD
    else:
        weight = base

    target = TargetCalculation(
        target_weight=inputs.round_weight(weight),
        target_reps=LINEAR_REPS,
        target_rpe=LINEAR_RPE,
        performance_status=status,
    )
    return _repeat(target, count)


def _gzclp_targets(
    strategy: ProgramStrategy,
    context: ExerciseContext,
    inputs: _Inputs,
) -> List[TargetCalculation]:
    tier = gzclp_tier(context.position)
    sets, reps = {
        1: (GZCLP_T1_SETS, GZCLP_T1_REPS),
        2: (GZCLP_T2_SETS, GZCLP_T2_REPS),
        3: (GZCLP_T3_SETS, GZCLP_T3_REPS),
    }[tier]

    previous = _last_working_sets(context.history)
    if not previous:
        return _repeat(TargetCalculation.baseline(), sets)

    base = _top_weight(previous)
    last_reps = previous[-1].reps
    increment = linear_increment(context.exercise_name)
    status = summarize_exercise_performance(previous, inputs.thresholds).status
    streak = context.underperformance_count

    if tier == 1:
        if last_reps >= 2 * GZCLP_T1_REPS:
            weight = base + 2 * increment
        elif last_reps >= GZCLP_T1_REPS:
            weight = base + increment
        elif streak >= 1:
            weight = base * GZCLP_T1_RESET
        else:
            weight = base
    elif tier == 2:
        if all(s.reps >= GZCLP_T2_REPS for s in previous):
            weight = base + increment / 2
        elif streak >= 2:
            weight = base * GZCLP_T2_RESET
        else:
            weight = base
    else:
        weight = base + GZCLP_T3_INCREMENT if last_reps >= GZCLP_T3_AMRAP_GOAL else base

    logger.debug("GZCLP T%s %s: %.1f -> %.1f", tier, context.exercise_name, base, weight)
    rounded = inputs.round_weight(weight)
    amrap_last = tier in (1, 3)
    return [
        TargetCalculation(
            target_weight=rounded,
            target_reps=reps,
            target_rpe=AMRAP_RPE if amrap_last and i == sets - 1 else STANDARD_RPE,
            performance_status=status,
        )
        for i in range(sets)
    ]


def _texas_method_targets(
    strategy: ProgramStrategy,
    context: ExerciseContext,
    inputs: _Inputs,
) -> List[TargetCalculation]:
    day = strategy.texas_day or TexasDay.VOLUME
    count = {
        TexasDay.VOLUME: TEXAS_VOLUME_SETS,
        TexasDay.RECOVERY: TEXAS_RECOVERY_SETS,
        TexasDay.INTENSITY: TEXAS_INTENSITY_SETS,
    }[day]

    reference = context.reference_history or context.history
    previous = _last_working_sets(reference)
    if not previous:
        return _repeat(TargetCalculation.baseline(), count)

    base = _top_weight(previous)
    status = summarize_exercise_performance(previous, inputs.thresholds).status

    if day == TexasDay.VOLUME:
        weight = base
        if status != PerformanceStatus.UNDERPERFORMED:
            weight += linear_increment(context.exercise_name)
        rpe = STANDARD_RPE
    elif day == TexasDay.RECOVERY:
        weight = base * TEXAS_RECOVERY_FRACTION
        rpe = RECOVERY_RPE
    else:
        weight = base * TEXAS_INTENSITY_FACTOR
        rpe = AMRAP_RPE

    target = TargetCalculation(
        target_weight=inputs.round_weight(weight),
        target_reps=LINEAR_REPS,
        target_rpe=rpe,
        performance_status=status,
    )
    return _repeat(target, count)


def _phul_targets(
    strategy: ProgramStrategy,
    context: ExerciseContext,
    inputs: _Inputs,
) -> List[TargetCalculation]:
    focus = strategy.phul_focus or PHULFocus.HYPERTROPHY
    plan_type = PlanType.STRENGTH if focus == PHULFocus.POWER else PlanType.HYPERTROPHY
    return _default_targets(strategy, context, inputs, plan_type=plan_type)


_Calculator = Callable[[ProgramStrategy, ExerciseContext, _Inputs], List[TargetCalculation]]

_CALCULATORS: Dict[TargetStrategy, _Calculator] = {
    TargetStrategy.DEFAULT: _default_targets,
    TargetStrategy.FIVE_THREE_ONE: _five_three_one_targets,
    TargetStrategy.LINEAR: _linear_targets,
    TargetStrategy.GZCLP: _gzclp_targets,
    TargetStrategy.TEXAS_METHOD: _texas_method_targets,
    TargetStrategy.PHUL: _phul_targets,
}


# =============================================================================
# Public API
# =============================================================================


def calculate_exercise_targets(
    strategy: ProgramStrategy,
    context: ExerciseContext,
    plan_type: PlanType,
    plan_settings: Optional[Mapping[PlanType, PlanSettings]] = None,
    round_weight: WeightRounder = round_to_increment,
    thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
) -> List[TargetCalculation]:
    """
    Prescribe every set of one exercise under the selected strategy.

    Args:
        strategy: Strategy resolved for this workout
        context: The exercise slot's history and state
        plan_type: Template plan type (default strategy settings)
        plan_settings: Settings per plan type; defaults to built-ins
        round_weight: Loadable-weight rounder
        thresholds: Evaluation tolerances

    Returns:
        One TargetCalculation per prescribed set, in set order
    """
    inputs = _Inputs(
        plan_type=PlanType(plan_type),
        plan_settings=plan_settings or DEFAULT_PLAN_SETTINGS,
        round_weight=round_weight,
        thresholds=thresholds,
    )
    return _CALCULATORS[strategy.kind](strategy, context, inputs)


def calculate_program_set_target(
    strategy: ProgramStrategy,
    context: ExerciseContext,
    set_index: int,
    plan_type: PlanType,
    plan_settings: Optional[Mapping[PlanType, PlanSettings]] = None,
    round_weight: WeightRounder = round_to_increment,
    thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
) -> TargetCalculation:
    """
    Target for a single set (0-based). Sets added beyond the strategy's
    prescription progress from the last previous working set.
    """
    targets = calculate_exercise_targets(
        strategy, context, plan_type, plan_settings, round_weight, thresholds
    )
    if 0 <= set_index < len(targets):
        return targets[set_index]

    previous = _last_working_sets(context.history)
    if not previous:
        return TargetCalculation.baseline()
    inputs = _Inputs(
        plan_type=PlanType(plan_type),
        plan_settings=plan_settings or DEFAULT_PLAN_SETTINGS,
        round_weight=round_weight,
        thresholds=thresholds,
    )
    return calculate_set_target(
        previous[-1],
        inputs.plan_type,
        inputs.settings_for(inputs.plan_type),
        underperformance_count=context.underperformance_count,
        days_since_last_session=context.days_since_last_session,
        round_weight=round_weight,
        thresholds=thresholds,
    )


def resolve_strategy(
    preset_id: Optional[str],
    day_label: str = "",
    completed_sessions: int = 0,
    training_max: Optional[float] = None,
) -> ProgramStrategy:
    """
    Select the target strategy for a workout from its template's preset id.

    Custom templates (no preset) and presets without a declared strategy
    use the default. Resolve once per workout and hold it for the session.

    Args:
        preset_id: Template preset id, or None
        day_label: Program day label (Texas Method / PHUL day type)
        completed_sessions: Completed sessions of this program day (5/3/1 week)
        training_max: Host-persisted 5/3/1 training max, if any
    """
    kind = get_preset_target_strategy(preset_id) or TargetStrategy.DEFAULT

    if kind == TargetStrategy.FIVE_THREE_ONE:
        strategy = ProgramStrategy(
            kind=kind,
            cycle_week=five_three_one_cycle_week(completed_sessions + 1),
            training_max=training_max,
        )
    elif kind == TargetStrategy.LINEAR:
        strategy = ProgramStrategy(
            kind=kind,
            linear_variant=get_preset(preset_id).linear_variant or LinearVariant.STARTING_STRENGTH,
        )
    elif kind == TargetStrategy.TEXAS_METHOD:
        strategy = ProgramStrategy(kind=kind, texas_day=texas_day_type(day_label))
    elif kind == TargetStrategy.PHUL:
        strategy = ProgramStrategy(kind=kind, phul_focus=phul_focus_for(day_label))
    else:
        strategy = ProgramStrategy(kind=kind)

    logger.info("Resolved target strategy %s for preset %s", strategy.kind.value, preset_id)
    return strategy
