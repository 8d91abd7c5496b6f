"""
Plan Workout Use Case.

Computes next-session targets for every exercise of a program day:
1. resolve the target strategy once for the workout
2. fetch each exercise's history for the day
3. drop sessions logged inside the deload window
4. derive the underperformance streak and days since last session
5. compute targets with the resolved strategy
6. scale targets when the workout falls inside an active deload window
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Mapping, Optional, Sequence

from application.exceptions import TrainingHistoryError
from application.ports import TrainingHistoryRepository
from backend.core.deload_advisor import (
    DEFAULT_DELOAD_MULTIPLIER,
    apply_deload_to_targets,
    exclude_deload_sessions,
    is_in_deload,
)
from backend.core.loadable_weight import (
    PlateInventory,
    WeightRounder,
    round_to_increment,
    rounder_for_exercise,
)
from backend.core.performance_evaluator import DEFAULT_THRESHOLDS, EvaluationThresholds
from backend.core.program_strategies import (
    build_exercise_context,
    calculate_exercise_targets,
    resolve_strategy,
)
from backend.core.target_explanation import explain_exercise_targets
from domain.models.training import (
    DeloadWindow,
    PlanSettings,
    PlanType,
    ProgramStrategy,
    SessionRecord,
    TargetCalculation,
)

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 20


@dataclass(frozen=True)
class PlannedExercise:
    """An exercise slot of the program day, in day order."""

    exercise_name: str
    planned_sets: int = 3


@dataclass
class ExercisePlan:
    """Targets for one exercise."""

    exercise_name: str
    targets: List[TargetCalculation] = field(default_factory=list)
    explanation: str = ""
    underperformance_count: int = 0
    days_since_last_session: Optional[int] = None


@dataclass
class WorkoutPlan:
    """Result of planning a workout."""

    day_id: str
    workout_date: date
    strategy: ProgramStrategy
    in_deload: bool = False
    exercises: List[ExercisePlan] = field(default_factory=list)


class PlanWorkoutUseCase:
    """
    Use case for computing a workout's targets.

    The strategy is resolved once per call and held for every exercise of
    the session.
    """

    def __init__(
        self,
        history_repo: TrainingHistoryRepository,
        plan_settings: Optional[Mapping[PlanType, PlanSettings]] = None,
        round_weight: WeightRounder = round_to_increment,
        thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
        deload_multiplier: float = DEFAULT_DELOAD_MULTIPLIER,
        plate_inventory: Optional[PlateInventory] = None,
    ):
        """
        Initialize with required dependencies.

        Args:
            history_repo: Repository for training history
            plan_settings: Settings per plan type (built-in defaults if None)
            round_weight: Loadable-weight rounder
            thresholds: Evaluation tolerances
            deload_multiplier: Target scale during a deload week
            plate_inventory: Bar/plates for barbell lifts (None = no plate rounding)
        """
        self._history_repo = history_repo
        self._plan_settings = plan_settings
        self._round_weight = round_weight
        self._thresholds = thresholds
        self._deload_multiplier = deload_multiplier
        self._plate_inventory = plate_inventory

    def _fetch_history(
        self,
        user_id: str,
        day_id: str,
        exercise_name: str,
    ) -> List[SessionRecord]:
        try:
            return self._history_repo.get_exercise_sessions(
                user_id, day_id, exercise_name, limit=HISTORY_LIMIT
            )
        except Exception as e:
            logger.warning(
                "Failed to load history for %s (day %s): %s", exercise_name, day_id, e
            )
            raise TrainingHistoryError(
                f"Could not load history for {exercise_name}", user_id=user_id
            ) from e

    def _completed_sessions(self, user_id: str, day_id: str) -> int:
        try:
            return self._history_repo.count_completed_sessions(user_id, day_id)
        except Exception as e:
            logger.warning("Failed to count sessions for day %s: %s", day_id, e)
            raise TrainingHistoryError(
                f"Could not count sessions for day {day_id}", user_id=user_id
            ) from e

    def execute(
        self,
        user_id: str,
        day_id: str,
        exercises: Sequence[PlannedExercise],
        plan_type: PlanType,
        workout_date: date,
        preset_id: Optional[str] = None,
        day_label: str = "",
        deload_window: Optional[DeloadWindow] = None,
        training_max: Optional[float] = None,
        reference_day_id: Optional[str] = None,
    ) -> WorkoutPlan:
        """
        Plan targets for a program day.

        Args:
            user_id: User ID
            day_id: Program day ID
            exercises: Exercise slots in day order
            plan_type: Template plan type
            workout_date: Logical date of the workout
            preset_id: Template preset id, None for custom templates
            day_label: Program day label
            deload_window: Active deload window, if any
            training_max: Persisted 5/3/1 training max, if any
            reference_day_id: Texas Method volume day to derive
                recovery/intensity weights from

        Returns:
            WorkoutPlan with one ExercisePlan per exercise

        Raises:
            TrainingHistoryError: If history cannot be loaded
        """
        completed = self._completed_sessions(user_id, day_id) if preset_id else 0
        strategy = resolve_strategy(
            preset_id,
            day_label=day_label,
            completed_sessions=completed,
            training_max=training_max,
        )
        in_deload = is_in_deload(deload_window, workout_date)

        plan = WorkoutPlan(
            day_id=day_id,
            workout_date=workout_date,
            strategy=strategy,
            in_deload=in_deload,
        )

        for position, exercise in enumerate(exercises):
            history = exclude_deload_sessions(
                self._fetch_history(user_id, day_id, exercise.exercise_name),
                deload_window,
            )
            reference: List[SessionRecord] = []
            if reference_day_id and reference_day_id != day_id:
                reference = exclude_deload_sessions(
                    self._fetch_history(user_id, reference_day_id, exercise.exercise_name),
                    deload_window,
                )

            context = build_exercise_context(
                exercise.exercise_name,
                history,
                workout_date=workout_date,
                position=position,
                planned_sets=exercise.planned_sets,
                reference_history=reference,
                thresholds=self._thresholds,
            )
            targets = calculate_exercise_targets(
                strategy,
                context,
                plan_type,
                plan_settings=self._plan_settings,
                round_weight=rounder_for_exercise(
                    exercise.exercise_name, self._round_weight, self._plate_inventory
                ),
                thresholds=self._thresholds,
            )
            if in_deload:
                targets = apply_deload_to_targets(
                    targets, deload_window, workout_date, self._deload_multiplier
                )

            plan.exercises.append(
                ExercisePlan(
                    exercise_name=exercise.exercise_name,
                    targets=targets,
                    explanation=explain_exercise_targets(
                        targets,
                        context,
                        plan_type,
                        strategy,
                        day_label=day_label,
                        plan_settings=self._plan_settings,
                    ),
                    underperformance_count=context.underperformance_count,
                    days_since_last_session=context.days_since_last_session,
                )
            )

        logger.info(
            "Planned %d exercises for day %s (strategy=%s, deload=%s)",
            len(plan.exercises),
            day_id,
            strategy.kind.value,
            in_deload,
        )
        return plan
