"""
API package for the Progressive Overload API.

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_settings,
    get_evaluation_thresholds,
    get_weight_rounder,
    get_plate_inventory,
    get_training_history_repo,
    get_plan_workout_use_case,
    get_review_fatigue_use_case,
    get_detect_session_prs_use_case,
)

__all__ = [
    # Settings
    "get_settings",
    # Engine collaborators
    "get_evaluation_thresholds",
    "get_weight_rounder",
    "get_plate_inventory",
    # Repositories
    "get_training_history_repo",
    # Use cases
    "get_plan_workout_use_case",
    "get_review_fatigue_use_case",
    "get_detect_session_prs_use_case",
]
