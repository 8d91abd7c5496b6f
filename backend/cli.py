import json
import argparse
import sys
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from application.use_cases import PlannedExercise, PlanWorkoutUseCase, WorkoutPlan
from backend.core.loadable_weight import make_increment_rounder
from backend.settings import get_settings
from domain.models.training import DeloadWindow, PlanType, SessionRecord
from infrastructure import InMemoryTrainingHistoryRepository

CLI_USER = "cli"
REFERENCE_DAY = "reference"


class ExerciseInput(BaseModel):
    exercise_name: str
    planned_sets: int = Field(default=3, ge=1)
    history: List[SessionRecord] = Field(default_factory=list)


class WorkoutInput(BaseModel):
    """Workout description read from the input JSON file."""

    day_id: str = "day"
    preset_id: Optional[str] = None
    day_label: str = ""
    plan_type: PlanType = PlanType.HYPERTROPHY
    workout_date: date = Field(default_factory=date.today)
    training_max: Optional[float] = Field(default=None, gt=0)
    deload_active_until: Optional[date] = None
    exercises: List[ExerciseInput] = Field(default_factory=list)
    reference_history: Dict[str, List[SessionRecord]] = Field(default_factory=dict)


def plan_from_input(workout: WorkoutInput) -> WorkoutPlan:
    """Load the input's history into memory and plan the workout."""
    repo = InMemoryTrainingHistoryRepository()
    for exercise in workout.exercises:
        repo.add_sessions(CLI_USER, workout.day_id, exercise.exercise_name, exercise.history)
    for exercise_name, sessions in workout.reference_history.items():
        repo.add_sessions(CLI_USER, REFERENCE_DAY, exercise_name, sessions)

    settings = get_settings()
    use_case = PlanWorkoutUseCase(
        history_repo=repo,
        round_weight=make_increment_rounder(settings.weight_increment),
        thresholds=settings.evaluation_thresholds(),
        deload_multiplier=settings.deload_multiplier,
        plate_inventory=settings.plate_inventory() if settings.use_plate_rounding else None,
    )
    return use_case.execute(
        user_id=CLI_USER,
        day_id=workout.day_id,
        exercises=[PlannedExercise(e.exercise_name, e.planned_sets) for e in workout.exercises],
        plan_type=workout.plan_type,
        workout_date=workout.workout_date,
        preset_id=workout.preset_id,
        day_label=workout.day_label,
        deload_window=(
            DeloadWindow(active_until=workout.deload_active_until)
            if workout.deload_active_until
            else None
        ),
        training_max=workout.training_max,
        reference_day_id=REFERENCE_DAY if workout.reference_history else None,
    )


def plan_to_dict(plan: WorkoutPlan) -> dict:
    return {
        "day_id": plan.day_id,
        "workout_date": plan.workout_date.isoformat(),
        "strategy": plan.strategy.model_dump(mode="json", exclude_none=True),
        "in_deload": plan.in_deload,
        "exercises": [
            {
                "exercise_name": e.exercise_name,
                "explanation": e.explanation,
                "underperformance_count": e.underperformance_count,
                "days_since_last_session": e.days_since_last_session,
                "targets": [t.model_dump(mode="json") for t in e.targets],
            }
            for e in plan.exercises
        ],
    }


def main():
    parser = argparse.ArgumentParser(description="Compute next-workout targets from a JSON workout description")
    parser.add_argument("input", help="Input JSON file path")
    parser.add_argument("-o", "--output", help="Output JSON file path (default: stdout)")

    args = parser.parse_args()

    try:
        # Load input JSON
        with open(args.input, 'r') as f:
            data = json.load(f)

        workout = WorkoutInput.model_validate(data)
        result = json.dumps(plan_to_dict(plan_from_input(workout)), indent=2)

        # Output result
        if args.output:
            with open(args.output, 'w') as f:
                f.write(result)
        else:
            print(result)

    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON: {e}", file=sys.stderr)
        sys.exit(1)
    except ValidationError as e:
        print(f"Error: Invalid workout description: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
