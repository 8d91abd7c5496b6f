"""
Progression router for targets, deloads and personal records.

Most endpoints are stateless: the caller posts the history it holds and gets
engine output back. /workouts/plan, /deload/review and /prs/stored-session
read history through the TrainingHistoryRepository dependency.

This router provides endpoints for:
- Set performance evaluation
- Next-set and next-exercise targets (default and preset strategies)
- Deload suggestion, fatigue score and deload scaling
- Personal record checks and recent PRs
- Built-in preset templates
"""
import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel, Field

from api.deps import (
    get_detect_session_prs_use_case,
    get_evaluation_thresholds,
    get_plan_workout_use_case,
    get_plate_inventory,
    get_review_fatigue_use_case,
    get_settings,
    get_weight_rounder,
)
from application.exceptions import TrainingHistoryError
from application.use_cases import (
    DetectSessionPRsUseCase,
    FatigueReport,
    PlannedExercise,
    PlanWorkoutUseCase,
    ReviewFatigueUseCase,
)
from backend.core.deload_advisor import (
    apply_deload,
    apply_deload_to_targets,
    exclude_deload_sessions,
    is_in_deload,
    start_deload_window,
)
from backend.core.estimated_max import estimated_1rm
from backend.core.loadable_weight import PlateInventory, WeightRounder, rounder_for_exercise
from backend.core.performance_evaluator import EvaluationThresholds, evaluate_set
from backend.core.pr_detector import (
    DaySession,
    SessionExercise,
    check_set_pr,
    detect_session_prs,
    find_recent_prs,
)
from backend.core.presets import PresetDay, PresetTemplate, get_preset, list_presets
from backend.core.program_strategies import (
    ExerciseContext,
    build_exercise_context,
    calculate_exercise_targets,
    calculate_program_set_target,
    resolve_strategy,
)
from backend.core.progression_strategy import calculate_exercise_target, calculate_set_target
from backend.core.target_explanation import explain_exercise_targets, explain_target
from backend.settings import Settings
from domain.models.training import (
    DEFAULT_PLAN_SETTINGS,
    DeloadWindow,
    PerformanceStatus,
    PersonalRecord,
    PlanSettings,
    PlanType,
    PRType,
    ProgramStrategy,
    SessionRecord,
    SetRecord,
    TargetCalculation,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/progression",
    tags=["Progression"],
)


def _settings_for(plan_type: PlanType, override: Optional[PlanSettings]) -> PlanSettings:
    return override or DEFAULT_PLAN_SETTINGS[plan_type]


def _window(active_until: Optional[date]) -> Optional[DeloadWindow]:
    return DeloadWindow(active_until=active_until) if active_until else None


# =============================================================================
# Request / Response Models
# =============================================================================


class EvaluateResponse(BaseModel):
    """Response model for set evaluation."""
    status: PerformanceStatus
    estimated_1rm: float


class SetTargetRequest(BaseModel):
    """Request model for a single set target."""
    previous_set: Optional[SetRecord] = None
    plan_type: PlanType = PlanType.HYPERTROPHY
    plan_settings: Optional[PlanSettings] = None
    underperformance_count: int = Field(default=0, ge=0)
    days_since_last_session: Optional[int] = Field(default=None, ge=0)
    exercise_name: str = ""


class SessionTargetRequest(BaseModel):
    """Request model for one target from a whole previous session."""
    previous_sets: List[SetRecord] = Field(default_factory=list)
    plan_type: PlanType = PlanType.HYPERTROPHY
    plan_settings: Optional[PlanSettings] = None
    underperformance_count: int = Field(default=0, ge=0)
    days_since_last_session: Optional[int] = Field(default=None, ge=0)
    exercise_name: str = ""


class TargetResponse(BaseModel):
    """A target with its explanation."""
    target: TargetCalculation
    explanation: str


class ExerciseTargetsRequest(BaseModel):
    """Request model for all set targets of one exercise."""
    exercise_name: str
    history: List[SessionRecord] = Field(default_factory=list)
    plan_type: PlanType = PlanType.HYPERTROPHY
    plan_settings: Optional[Dict[PlanType, PlanSettings]] = None
    preset_id: Optional[str] = None
    day_label: str = ""
    completed_sessions: int = Field(default=0, ge=0)
    training_max: Optional[float] = Field(default=None, gt=0)
    position: int = Field(default=0, ge=0)
    planned_sets: int = Field(default=3, ge=1, le=20)
    workout_date: Optional[date] = None
    reference_history: List[SessionRecord] = Field(default_factory=list)
    deload_active_until: Optional[date] = None


class ProgramSetTargetRequest(ExerciseTargetsRequest):
    """Request model for one set of an exercise, including added sets."""
    set_index: int = Field(..., ge=0, description="0-based set number")


class ExerciseTargetsResponse(BaseModel):
    """Response model for exercise targets."""
    exercise_name: str
    strategy: ProgramStrategy
    targets: List[TargetCalculation]
    explanation: str
    underperformance_count: int
    days_since_last_session: Optional[int] = None
    in_deload: bool = False


class PlanExerciseItem(BaseModel):
    exercise_name: str
    planned_sets: int = Field(default=3, ge=1, le=20)


class PlanWorkoutRequest(BaseModel):
    """Request model for planning a stored program day."""
    user_id: str
    day_id: str
    exercises: List[PlanExerciseItem]
    plan_type: PlanType = PlanType.HYPERTROPHY
    workout_date: date
    preset_id: Optional[str] = None
    day_label: str = ""
    training_max: Optional[float] = Field(default=None, gt=0)
    reference_day_id: Optional[str] = None
    deload_active_until: Optional[date] = None


class PlannedExerciseResponse(BaseModel):
    exercise_name: str
    targets: List[TargetCalculation]
    explanation: str
    underperformance_count: int
    days_since_last_session: Optional[int] = None


class WorkoutPlanResponse(BaseModel):
    """Response model for a planned workout."""
    day_id: str
    workout_date: date
    strategy: ProgramStrategy
    in_deload: bool
    exercises: List[PlannedExerciseResponse]


class DeloadSuggestionRequest(BaseModel):
    """Request model for the deload suggestion."""
    sessions: List[SessionRecord] = Field(default_factory=list)
    today: date
    plan_type: PlanType = PlanType.HYPERTROPHY
    deload_frequency_weeks: Optional[int] = Field(default=None, ge=1)
    deload_active_until: Optional[date] = None


class DeloadReviewRequest(BaseModel):
    """Request model for the deload review over stored history."""
    user_id: str
    today: date
    plan_type: PlanType = PlanType.HYPERTROPHY
    deload_frequency_weeks: Optional[int] = Field(default=None, ge=1)
    deload_active_until: Optional[date] = None


class WeeklyAggregateItem(BaseModel):
    week_start: date
    hit_rate: Optional[float] = None
    avg_rpe: Optional[float] = None
    total_volume: float = 0.0


class DeloadSuggestionResponse(BaseModel):
    """Response model for the deload suggestion and fatigue score."""
    should_deload: bool
    reason: Optional[str] = None
    trigger: Optional[str] = None
    in_deload: bool = False
    fatigue_score: int
    fatigue_zone: str
    insight: str
    weeks: List[WeeklyAggregateItem]


class DeloadApplyRequest(BaseModel):
    """Request model for deload scaling."""
    targets: List[TargetCalculation]
    session_date: date
    active_until: Optional[date] = Field(
        default=None,
        description="End of the active window; omitted starts a window ending this Sunday",
    )


class DeloadApplyResponse(BaseModel):
    active_until: date
    starts_on: date
    targets: List[TargetCalculation]


class PRCheckRequest(BaseModel):
    """Request model for a single set PR check."""
    weight: float
    reps: int
    history: List[SessionRecord] = Field(default_factory=list)
    current_sets: List[SetRecord] = Field(default_factory=list)


class PRCheckResponse(BaseModel):
    is_heaviest_set_pr: bool
    is_e1rm_pr: bool


class SessionExerciseItem(BaseModel):
    exercise_name: str
    sets: List[SetRecord] = Field(default_factory=list)


class SessionPRsRequest(BaseModel):
    """Request model for the session PR summary."""
    exercises: List[SessionExerciseItem]
    history: Dict[str, List[SessionRecord]] = Field(default_factory=dict)


class StoredSessionPRsRequest(BaseModel):
    """Request model for the session PR summary against stored history."""
    user_id: str
    day_id: str
    exercises: List[SessionExerciseItem]
    exclude_session_id: Optional[str] = Field(
        default=None,
        description="Session being edited; left out of the comparison history",
    )


class SessionPRsResponse(BaseModel):
    records: List[PersonalRecord]


class DaySessionItem(BaseModel):
    day_id: str
    workout_date: date
    exercises: List[SessionExerciseItem] = Field(default_factory=list)


class RecentPRsRequest(BaseModel):
    """Request model for the recent PR feed."""
    sessions: List[DaySessionItem] = Field(default_factory=list)
    limit: int = Field(default=5, ge=0, le=50)


class RecentPRItem(BaseModel):
    exercise_name: str
    day_id: str
    pr_type: PRType
    value: float
    workout_date: date


class RecentPRsResponse(BaseModel):
    records: List[RecentPRItem]


class PresetsResponse(BaseModel):
    presets: List[PresetTemplate]
    total: int


def _session_exercises(items: List[SessionExerciseItem]) -> List[SessionExercise]:
    return [SessionExercise(e.exercise_name, e.sets) for e in items]


def _deload_response(report: FatigueReport) -> DeloadSuggestionResponse:
    suggestion = report.suggestion
    return DeloadSuggestionResponse(
        should_deload=bool(suggestion and suggestion.should_deload),
        reason=suggestion.reason if suggestion else None,
        trigger=suggestion.trigger.value if suggestion else None,
        in_deload=report.in_deload,
        fatigue_score=report.fatigue.score,
        fatigue_zone=report.fatigue.zone.value,
        insight=report.fatigue.insight,
        weeks=[
            WeeklyAggregateItem(
                week_start=w.week_start,
                hit_rate=w.hit_rate,
                avg_rpe=w.avg_rpe,
                total_volume=w.total_volume,
            )
            for w in report.weeks
        ],
    )


def _exercise_context(
    request: ExerciseTargetsRequest,
    thresholds: EvaluationThresholds,
) -> Tuple[ProgramStrategy, Optional[DeloadWindow], date, ExerciseContext]:
    """Resolve the strategy and build the slot context, without deload-week sessions."""
    strategy = resolve_strategy(
        request.preset_id,
        day_label=request.day_label,
        completed_sessions=request.completed_sessions,
        training_max=request.training_max,
    )
    window = _window(request.deload_active_until)
    workout_date = request.workout_date or date.today()

    context = build_exercise_context(
        request.exercise_name,
        exclude_deload_sessions(request.history, window),
        workout_date=workout_date,
        position=request.position,
        planned_sets=request.planned_sets,
        reference_history=exclude_deload_sessions(request.reference_history, window),
        thresholds=thresholds,
    )
    return strategy, window, workout_date, context


# =============================================================================
# Evaluation & Targets
# =============================================================================


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate_set_performance(
    set_record: SetRecord,
    thresholds: EvaluationThresholds = Depends(get_evaluation_thresholds),
) -> EvaluateResponse:
    """
    Classify a logged set against its targets.

    A set without targets (baseline) is always met_target.
    """
    return EvaluateResponse(
        status=evaluate_set(set_record, thresholds),
        estimated_1rm=round(estimated_1rm(set_record.weight, set_record.reps), 1),
    )


@router.post("/targets/set", response_model=TargetResponse)
async def get_set_target(
    request: SetTargetRequest,
    thresholds: EvaluationThresholds = Depends(get_evaluation_thresholds),
    round_weight: WeightRounder = Depends(get_weight_rounder),
    plate_inventory: Optional[PlateInventory] = Depends(get_plate_inventory),
) -> TargetResponse:
    """
    Next target for one set under the default progression strategy.
    """
    settings = _settings_for(request.plan_type, request.plan_settings)
    target = calculate_set_target(
        request.previous_set,
        request.plan_type,
        settings,
        underperformance_count=request.underperformance_count,
        days_since_last_session=request.days_since_last_session,
        round_weight=rounder_for_exercise(request.exercise_name, round_weight, plate_inventory),
        thresholds=thresholds,
    )
    previous = request.previous_set
    return TargetResponse(
        target=target,
        explanation=explain_target(
            target.performance_status,
            request.plan_type,
            request.underperformance_count,
            at_rep_max=previous is not None and previous.reps >= settings.rep_range_max,
            high_rpe_last_time=target.high_rpe_last_time,
            days_since_last_session=request.days_since_last_session,
        ),
    )


@router.post("/targets/session", response_model=TargetResponse)
async def get_session_target(
    request: SessionTargetRequest,
    thresholds: EvaluationThresholds = Depends(get_evaluation_thresholds),
    round_weight: WeightRounder = Depends(get_weight_rounder),
    plate_inventory: Optional[PlateInventory] = Depends(get_plate_inventory),
) -> TargetResponse:
    """
    One target for a whole exercise from the previous session's averages.
    """
    settings = _settings_for(request.plan_type, request.plan_settings)
    target = calculate_exercise_target(
        request.previous_sets,
        request.plan_type,
        settings,
        underperformance_count=request.underperformance_count,
        days_since_last_session=request.days_since_last_session,
        round_weight=rounder_for_exercise(request.exercise_name, round_weight, plate_inventory),
        thresholds=thresholds,
    )
    working = [s for s in request.previous_sets if s.is_working and s.is_resistance]
    avg_reps = sum(s.reps for s in working) / len(working) if working else 0
    return TargetResponse(
        target=target,
        explanation=explain_target(
            target.performance_status,
            request.plan_type,
            request.underperformance_count,
            at_rep_max=bool(working) and avg_reps >= settings.rep_range_max,
            high_rpe_last_time=target.high_rpe_last_time,
            days_since_last_session=request.days_since_last_session,
        ),
    )


@router.post("/targets/exercise", response_model=ExerciseTargetsResponse)
async def get_exercise_targets(
    request: ExerciseTargetsRequest,
    settings: Settings = Depends(get_settings),
    thresholds: EvaluationThresholds = Depends(get_evaluation_thresholds),
    round_weight: WeightRounder = Depends(get_weight_rounder),
    plate_inventory: Optional[PlateInventory] = Depends(get_plate_inventory),
) -> ExerciseTargetsResponse:
    """
    Targets for every set of an exercise.

    The strategy is resolved from the preset id; custom templates use the
    default strategy. Sessions logged inside the deload window are left out
    of both histories. When ``deload_active_until`` covers ``workout_date``
    the targets are scaled for the deload week.
    """
    strategy, window, workout_date, context = _exercise_context(request, thresholds)
    targets = calculate_exercise_targets(
        strategy,
        context,
        request.plan_type,
        plan_settings=request.plan_settings,
        round_weight=rounder_for_exercise(request.exercise_name, round_weight, plate_inventory),
        thresholds=thresholds,
    )
    in_deload = is_in_deload(window, workout_date)
    if in_deload:
        targets = apply_deload_to_targets(targets, window, workout_date, settings.deload_multiplier)

    return ExerciseTargetsResponse(
        exercise_name=request.exercise_name,
        strategy=strategy,
        targets=targets,
        explanation=explain_exercise_targets(
            targets,
            context,
            request.plan_type,
            strategy,
            day_label=request.day_label,
            plan_settings=request.plan_settings,
        ),
        underperformance_count=context.underperformance_count,
        days_since_last_session=context.days_since_last_session,
        in_deload=in_deload,
    )


@router.post("/targets/program-set", response_model=TargetResponse)
async def get_program_set_target(
    request: ProgramSetTargetRequest,
    settings: Settings = Depends(get_settings),
    thresholds: EvaluationThresholds = Depends(get_evaluation_thresholds),
    round_weight: WeightRounder = Depends(get_weight_rounder),
    plate_inventory: Optional[PlateInventory] = Depends(get_plate_inventory),
) -> TargetResponse:
    """
    Target for one set of an exercise under its resolved strategy.

    Sets added beyond the strategy's prescription progress from the last
    previous working set.
    """
    strategy, window, workout_date, context = _exercise_context(request, thresholds)
    target = calculate_program_set_target(
        strategy,
        context,
        request.set_index,
        request.plan_type,
        plan_settings=request.plan_settings,
        round_weight=rounder_for_exercise(request.exercise_name, round_weight, plate_inventory),
        thresholds=thresholds,
    )
    target = apply_deload(target, window, workout_date, settings.deload_multiplier)
    return TargetResponse(
        target=target,
        explanation=explain_exercise_targets(
            [target],
            context,
            request.plan_type,
            strategy,
            day_label=request.day_label,
            plan_settings=request.plan_settings,
        ),
    )


@router.post("/workouts/plan", response_model=WorkoutPlanResponse)
async def plan_workout(
    request: PlanWorkoutRequest,
    use_case: PlanWorkoutUseCase = Depends(get_plan_workout_use_case),
) -> WorkoutPlanResponse:
    """
    Targets for every exercise of a stored program day.

    Returns 503 when training history cannot be loaded.
    """
    try:
        plan = use_case.execute(
            user_id=request.user_id,
            day_id=request.day_id,
            exercises=[PlannedExercise(e.exercise_name, e.planned_sets) for e in request.exercises],
            plan_type=request.plan_type,
            workout_date=request.workout_date,
            preset_id=request.preset_id,
            day_label=request.day_label,
            deload_window=_window(request.deload_active_until),
            training_max=request.training_max,
            reference_day_id=request.reference_day_id,
        )
    except TrainingHistoryError as e:
        logger.error("Workout plan failed for user %s: %s", e.user_id, e)
        raise HTTPException(status_code=503, detail="Training history is unavailable")

    return WorkoutPlanResponse(
        day_id=plan.day_id,
        workout_date=plan.workout_date,
        strategy=plan.strategy,
        in_deload=plan.in_deload,
        exercises=[
            PlannedExerciseResponse(
                exercise_name=e.exercise_name,
                targets=e.targets,
                explanation=e.explanation,
                underperformance_count=e.underperformance_count,
                days_since_last_session=e.days_since_last_session,
            )
            for e in plan.exercises
        ],
    )


# =============================================================================
# Deload
# =============================================================================


@router.post("/deload/suggestion", response_model=DeloadSuggestionResponse)
async def get_deload_suggestion(
    request: DeloadSuggestionRequest,
    use_case: ReviewFatigueUseCase = Depends(get_review_fatigue_use_case),
) -> DeloadSuggestionResponse:
    """
    Deload suggestion and fatigue score from posted sessions.

    No deload is suggested while one is already active.
    """
    report = use_case.review(
        request.sessions,
        request.plan_type,
        request.today,
        deload_window=_window(request.deload_active_until),
        deload_frequency_weeks=request.deload_frequency_weeks,
    )
    return _deload_response(report)


@router.post("/deload/review", response_model=DeloadSuggestionResponse)
async def review_deload(
    request: DeloadReviewRequest,
    use_case: ReviewFatigueUseCase = Depends(get_review_fatigue_use_case),
) -> DeloadSuggestionResponse:
    """
    Deload suggestion and fatigue score from the user's stored sessions.

    Returns 503 when training history cannot be loaded.
    """
    try:
        report = use_case.execute(
            request.user_id,
            request.plan_type,
            request.today,
            deload_window=_window(request.deload_active_until),
            deload_frequency_weeks=request.deload_frequency_weeks,
        )
    except TrainingHistoryError as e:
        logger.error("Deload review failed for user %s: %s", e.user_id, e)
        raise HTTPException(status_code=503, detail="Training history is unavailable")
    return _deload_response(report)


@router.post("/deload/apply", response_model=DeloadApplyResponse)
async def apply_deload_week(
    request: DeloadApplyRequest,
    settings: Settings = Depends(get_settings),
) -> DeloadApplyResponse:
    """
    Scale targets for a session inside the deload window.

    Targets for sessions outside the window are returned unchanged.
    """
    window = _window(request.active_until) or start_deload_window(request.session_date)
    return DeloadApplyResponse(
        active_until=window.active_until,
        starts_on=window.starts_on,
        targets=apply_deload_to_targets(
            request.targets, window, request.session_date, settings.deload_multiplier
        ),
    )


# =============================================================================
# Personal Records
# =============================================================================


@router.post("/prs/check", response_model=PRCheckResponse)
async def check_personal_record(request: PRCheckRequest) -> PRCheckResponse:
    """Check one set for heaviest-set and e1RM records."""
    status = check_set_pr(request.weight, request.reps, request.history, request.current_sets)
    return PRCheckResponse(
        is_heaviest_set_pr=status.is_heaviest_set_pr,
        is_e1rm_pr=status.is_e1rm_pr,
    )


@router.post("/prs/session", response_model=SessionPRsResponse)
async def get_session_prs(request: SessionPRsRequest) -> SessionPRsResponse:
    """PRs set in a session, first occurrence per type and exercise."""
    records = detect_session_prs(_session_exercises(request.exercises), request.history)
    return SessionPRsResponse(records=records)


@router.post("/prs/stored-session", response_model=SessionPRsResponse)
async def get_stored_session_prs(
    request: StoredSessionPRsRequest,
    use_case: DetectSessionPRsUseCase = Depends(get_detect_session_prs_use_case),
) -> SessionPRsResponse:
    """
    PRs set in a session, compared against the user's stored history.

    Returns 503 when training history cannot be loaded.
    """
    try:
        records = use_case.execute(
            request.user_id,
            request.day_id,
            _session_exercises(request.exercises),
            exclude_session_id=request.exclude_session_id,
        )
    except TrainingHistoryError as e:
        logger.error("PR detection failed for user %s: %s", e.user_id, e)
        raise HTTPException(status_code=503, detail="Training history is unavailable")
    return SessionPRsResponse(records=records)


@router.post("/prs/recent", response_model=RecentPRsResponse)
async def get_recent_prs(request: RecentPRsRequest) -> RecentPRsResponse:
    """Newest PR events first, replayed from the posted sessions."""
    sessions = [
        DaySession(s.day_id, s.workout_date, _session_exercises(s.exercises))
        for s in request.sessions
    ]
    return RecentPRsResponse(
        records=[
            RecentPRItem(
                exercise_name=pr.exercise_name,
                day_id=pr.day_id,
                pr_type=pr.pr_type,
                value=pr.value,
                workout_date=pr.workout_date,
            )
            for pr in find_recent_prs(sessions, limit=request.limit)
        ]
    )


# =============================================================================
# Presets
# =============================================================================


@router.get("/presets", response_model=PresetsResponse)
async def get_presets() -> PresetsResponse:
    """Built-in program templates."""
    presets = list_presets()
    return PresetsResponse(presets=presets, total=len(presets))


def _preset_or_404(preset_id: str) -> PresetTemplate:
    preset = get_preset(preset_id)
    if preset is None:
        raise HTTPException(status_code=404, detail=f"Preset '{preset_id}' not found")
    return preset


@router.get("/presets/{preset_id}", response_model=PresetTemplate)
async def get_preset_template(
    preset_id: str = Path(..., description="Preset template ID"),
) -> PresetTemplate:
    return _preset_or_404(preset_id)


@router.get("/presets/{preset_id}/days/{day_label}", response_model=PresetDay)
async def get_preset_day(
    preset_id: str = Path(..., description="Preset template ID"),
    day_label: str = Path(..., description="Program day label, e.g. 'Push A'"),
) -> PresetDay:
    day = _preset_or_404(preset_id).get_day(day_label)
    if day is None:
        raise HTTPException(
            status_code=404, detail=f"Day '{day_label}' not found in preset '{preset_id}'"
        )
    return day
