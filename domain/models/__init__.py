"""
Domain models for the Progressive Overload API.

This package contains pure domain models that are independent of
infrastructure concerns (database, API, external services).

These models represent the core training concepts:
- SetRecord / SessionRecord: logged history the engine reads
- PlanSettings: progression parameters per plan type
- ProgramStrategy: the target methodology chosen for a workout
- TargetCalculation: the engine's prescription for the next set
- DeloadWindow / PersonalRecord: derived fatigue and record values

Usage:
    >>> from datetime import date
    >>> from domain.models import SessionRecord, SetRecord

    >>> session = SessionRecord(
    ...     workout_date=date(2024, 1, 1),
    ...     sets=[SetRecord(weight=135, reps=10, rpe=7)],
    ... )

    >>> # Serialize to JSON
    >>> json_str = session.model_dump_json(indent=2)

    >>> # Deserialize from JSON
    >>> session = SessionRecord.model_validate_json(json_str)
"""

from domain.models.training import (
    DEFAULT_PLAN_SETTINGS,
    DeloadWindow,
    LinearVariant,
    PerformanceStatus,
    PersonalRecord,
    PHULFocus,
    PlanSettings,
    PlanType,
    PRType,
    ProgramStrategy,
    SessionRecord,
    SetRecord,
    SetType,
    TargetCalculation,
    TargetStrategy,
    TexasDay,
    default_plan_settings,
)

__all__ = [
    # History
    "SetRecord",
    "SessionRecord",
    # Configuration
    "PlanSettings",
    "ProgramStrategy",
    "DEFAULT_PLAN_SETTINGS",
    "default_plan_settings",
    # Outputs
    "TargetCalculation",
    "DeloadWindow",
    "PersonalRecord",
    # Enums
    "SetType",
    "PlanType",
    "PerformanceStatus",
    "TargetStrategy",
    "LinearVariant",
    "TexasDay",
    "PHULFocus",
    "PRType",
]
