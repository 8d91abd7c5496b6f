"""
Review Fatigue Use Case.

Builds weekly aggregates from the user's recent sessions and returns the
deload suggestion together with the fatigue score.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Mapping, Optional, Sequence

from application.exceptions import TrainingHistoryError
from application.ports import TrainingHistoryRepository
from backend.core.deload_advisor import (
    DEFAULT_LOOKBACK_WEEKS,
    DeloadSuggestion,
    FatigueScore,
    WeeklyAggregate,
    build_weekly_aggregates,
    calculate_fatigue_score,
    is_in_deload,
    suggest_deload,
)
from backend.core.performance_evaluator import DEFAULT_THRESHOLDS, EvaluationThresholds
from domain.models.training import (
    DEFAULT_PLAN_SETTINGS,
    DeloadWindow,
    PlanSettings,
    PlanType,
    SessionRecord,
)

logger = logging.getLogger(__name__)

MIN_LOOKBACK_WEEKS = 6
MAX_LOOKBACK_WEEKS = 12


@dataclass
class FatigueReport:
    """Weekly aggregates, the deload suggestion and the fatigue score."""

    weeks: List[WeeklyAggregate] = field(default_factory=list)
    suggestion: Optional[DeloadSuggestion] = None
    fatigue: Optional[FatigueScore] = None
    in_deload: bool = False


class ReviewFatigueUseCase:
    """Use case for the fatigue / deload panel."""

    def __init__(
        self,
        history_repo: TrainingHistoryRepository,
        plan_settings: Optional[Mapping[PlanType, PlanSettings]] = None,
        thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
        lookback_weeks: int = DEFAULT_LOOKBACK_WEEKS,
    ):
        self._history_repo = history_repo
        self._plan_settings = plan_settings or DEFAULT_PLAN_SETTINGS
        self._thresholds = thresholds
        self._lookback_weeks = max(MIN_LOOKBACK_WEEKS, min(lookback_weeks, MAX_LOOKBACK_WEEKS))

    def execute(
        self,
        user_id: str,
        plan_type: PlanType,
        today: date,
        deload_window: Optional[DeloadWindow] = None,
        deload_frequency_weeks: Optional[int] = None,
    ) -> FatigueReport:
        """
        Review the user's stored sessions over the lookback.

        Raises:
            TrainingHistoryError: If history cannot be loaded
        """
        start = today - timedelta(days=self._lookback_weeks * 7 - 1)
        try:
            sessions = self._history_repo.get_sessions_between(user_id, start, today)
        except Exception as e:
            logger.warning("Failed to load sessions for fatigue review: %s", e)
            raise TrainingHistoryError("Could not load training history", user_id=user_id) from e

        report = self.review(sessions, plan_type, today, deload_window, deload_frequency_weeks)
        if report.suggestion is not None:
            logger.info("Deload suggested for user %s (%s)", user_id, report.suggestion.trigger.value)
        return report

    def review(
        self,
        sessions: Sequence[SessionRecord],
        plan_type: PlanType,
        today: date,
        deload_window: Optional[DeloadWindow] = None,
        deload_frequency_weeks: Optional[int] = None,
    ) -> FatigueReport:
        """
        Review caller-supplied sessions.

        No suggestion is made while a deload week is already active.
        ``deload_frequency_weeks`` overrides the plan type's setting.
        """
        settings = self._plan_settings.get(PlanType(plan_type)) or DEFAULT_PLAN_SETTINGS[PlanType(plan_type)]
        frequency = deload_frequency_weeks or settings.deload_frequency_weeks
        weeks = build_weekly_aggregates(
            sessions, today, weeks=self._lookback_weeks, thresholds=self._thresholds
        )
        in_deload = is_in_deload(deload_window, today)
        suggestion = None if in_deload else suggest_deload(weeks, frequency)

        return FatigueReport(
            weeks=weeks,
            suggestion=suggestion,
            fatigue=calculate_fatigue_score(weeks, frequency),
            in_deload=in_deload,
        )
