"""
Infrastructure Layer for the Progressive Overload API.

Concrete implementations of the repository interfaces in application.ports.
"""

from infrastructure.training_history_repository import InMemoryTrainingHistoryRepository

__all__ = [
    "InMemoryTrainingHistoryRepository",
]
