"""
FastAPI Dependency Providers for the Progressive Overload API.

This module provides FastAPI dependency injection functions that return
interface types (Protocols) and engine collaborators rather than concrete
construction logic in routers.

Architecture:
- Settings and the history repository are cached per-process (lru_cache)
- Engine collaborators (thresholds, rounder) derive from settings per-request
- Use cases are created per-request with injected dependencies

Usage in routers:
    from api.deps import get_evaluation_thresholds
    from backend.core.performance_evaluator import EvaluationThresholds

    @router.post("/evaluate")
    def evaluate(
        thresholds: EvaluationThresholds = Depends(get_evaluation_thresholds),
    ):
        ...

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_training_history_repo] = lambda: FakeTrainingHistoryRepository()
"""

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends

from application.ports import TrainingHistoryRepository
from application.use_cases import (
    DetectSessionPRsUseCase,
    PlanWorkoutUseCase,
    ReviewFatigueUseCase,
)
from backend.core.loadable_weight import (
    PlateInventory,
    WeightRounder,
    make_increment_rounder,
)
from backend.core.performance_evaluator import EvaluationThresholds
from backend.settings import Settings, get_settings as _get_settings
from infrastructure import InMemoryTrainingHistoryRepository

logger = logging.getLogger(__name__)


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.
    Use this as a FastAPI dependency for settings access.

    Returns:
        Settings: Application settings instance
    """
    return _get_settings()


# =============================================================================
# Engine Collaborators
# =============================================================================


def get_evaluation_thresholds(
    settings: Settings = Depends(get_settings),
) -> EvaluationThresholds:
    """Evaluator tolerances with the configured e1RM bands."""
    return settings.evaluation_thresholds()


def get_weight_rounder(
    settings: Settings = Depends(get_settings),
) -> WeightRounder:
    """Default rounder: nearest multiple of the configured increment."""
    return make_increment_rounder(settings.weight_increment)


def get_plate_inventory(
    settings: Settings = Depends(get_settings),
) -> Optional[PlateInventory]:
    """
    Get the bar/plate inventory used for barbell lifts.

    Returns None when plate rounding is disabled.
    """
    if not settings.use_plate_rounding:
        return None
    return settings.plate_inventory()


# =============================================================================
# Repository Providers
# =============================================================================


@lru_cache
def get_training_history_repo() -> TrainingHistoryRepository:
    """
    Get the training history repository (cached per process).

    Hosts with persistent storage override this dependency with their own
    adapter.

    Returns:
        TrainingHistoryRepository implementation
    """
    logger.warning(
        "Using the in-memory training history repository; stored-history endpoints "
        "plan from empty history until get_training_history_repo is overridden"
    )
    return InMemoryTrainingHistoryRepository()


# =============================================================================
# Use Case Providers
# =============================================================================


def get_plan_workout_use_case(
    history_repo: TrainingHistoryRepository = Depends(get_training_history_repo),
    settings: Settings = Depends(get_settings),
    thresholds: EvaluationThresholds = Depends(get_evaluation_thresholds),
    round_weight: WeightRounder = Depends(get_weight_rounder),
    plate_inventory: Optional[PlateInventory] = Depends(get_plate_inventory),
) -> PlanWorkoutUseCase:
    """
    Get PlanWorkoutUseCase with injected dependencies.

    Returns:
        PlanWorkoutUseCase instance
    """
    return PlanWorkoutUseCase(
        history_repo=history_repo,
        round_weight=round_weight,
        thresholds=thresholds,
        deload_multiplier=settings.deload_multiplier,
        plate_inventory=plate_inventory,
    )


def get_review_fatigue_use_case(
    history_repo: TrainingHistoryRepository = Depends(get_training_history_repo),
    settings: Settings = Depends(get_settings),
    thresholds: EvaluationThresholds = Depends(get_evaluation_thresholds),
) -> ReviewFatigueUseCase:
    """
    Get ReviewFatigueUseCase with the configured lookback.

    Returns:
        ReviewFatigueUseCase instance
    """
    return ReviewFatigueUseCase(
        history_repo=history_repo,
        thresholds=thresholds,
        lookback_weeks=settings.deload_lookback_weeks,
    )


def get_detect_session_prs_use_case(
    history_repo: TrainingHistoryRepository = Depends(get_training_history_repo),
) -> DetectSessionPRsUseCase:
    """
    Get DetectSessionPRsUseCase with injected dependencies.

    Returns:
        DetectSessionPRsUseCase instance
    """
    return DetectSessionPRsUseCase(history_repo=history_repo)
