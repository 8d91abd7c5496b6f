"""
Repository Interfaces (Ports) for the Progressive Overload API.

This package defines abstract interfaces that decouple the progression
engine from storage. Implementations live with the host application; tests
use the in-memory fakes in tests/fakes.

Usage:
    from application.ports import TrainingHistoryRepository

    class PlanWorkoutUseCase:
        def __init__(self, history_repo: TrainingHistoryRepository):
            self._history_repo = history_repo
"""

from application.ports.training_history_repository import TrainingHistoryRepository

__all__ = [
    "TrainingHistoryRepository",
]
