"""
Domain layer for the Progressive Overload API.

This package contains pure domain models that are independent of
infrastructure concerns (database, API, external services).
"""

from domain.models import (
    DeloadWindow,
    PerformanceStatus,
    PersonalRecord,
    PlanSettings,
    PlanType,
    ProgramStrategy,
    SessionRecord,
    SetRecord,
    TargetCalculation,
    TargetStrategy,
)

__all__ = [
    "DeloadWindow",
    "PerformanceStatus",
    "PersonalRecord",
    "PlanSettings",
    "PlanType",
    "ProgramStrategy",
    "SessionRecord",
    "SetRecord",
    "TargetCalculation",
    "TargetStrategy",
]
