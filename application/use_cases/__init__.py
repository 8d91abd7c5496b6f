"""
Application Use Cases for the Progressive Overload API.

Use cases orchestrate the progression engine and the training history port:
- Dependencies are injected via constructors for testability
- Use cases return engine/domain values, not API responses

Usage:
    from application.use_cases import PlanWorkoutUseCase, PlannedExercise

    use_case = PlanWorkoutUseCase(history_repo=history_repo)
    plan = use_case.execute(
        user_id="user-123",
        day_id="day-1",
        exercises=[PlannedExercise("Barbell Squat")],
        plan_type=PlanType.STRENGTH,
        workout_date=date.today(),
        preset_id="531-4day",
        day_label="Squat Day",
    )
"""

from application.use_cases.plan_workout import (
    ExercisePlan,
    PlannedExercise,
    PlanWorkoutUseCase,
    WorkoutPlan,
)
from application.use_cases.detect_session_prs import DetectSessionPRsUseCase
from application.use_cases.review_fatigue import FatigueReport, ReviewFatigueUseCase

__all__ = [
    # Planning
    "PlanWorkoutUseCase",
    "PlannedExercise",
    "ExercisePlan",
    "WorkoutPlan",
    # PRs
    "DetectSessionPRsUseCase",
    # Fatigue
    "ReviewFatigueUseCase",
    "FatigueReport",
]
