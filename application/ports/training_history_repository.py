"""
Training History Repository Interface (Port).

Read-only access to logged sessions. The progression engine never touches
storage; use cases fetch history through this port and hand plain
SessionRecord values to the engine.
"""
from datetime import date
from typing import List, Optional, Protocol

from domain.models.training import SessionRecord


class TrainingHistoryRepository(Protocol):
    """
    Abstract interface for training history data access.

    Implementations raise on infrastructure failures; use cases wrap those
    in TrainingHistoryError.
    """

    def get_exercise_sessions(
        self,
        user_id: str,
        day_id: str,
        exercise_name: str,
        *,
        limit: Optional[int] = 20,
    ) -> List[SessionRecord]:
        """
        Get completed sessions of one exercise within one program day.

        Args:
            user_id: User ID
            day_id: Program (template) day ID
            exercise_name: Exact exercise name
            limit: Maximum sessions to return (most recent kept);
                None returns the full history

        Returns:
            SessionRecords ordered oldest -> newest
        """
        ...

    def count_completed_sessions(
        self,
        user_id: str,
        day_id: str,
    ) -> int:
        """
        Count completed sessions of a program day.

        Used to derive the 5/3/1 cycle week.
        """
        ...

    def get_sessions_between(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
    ) -> List[SessionRecord]:
        """
        Get every exercise session logged between two dates (inclusive).

        Args:
            user_id: User ID
            start_date: First day of the range
            end_date: Last day of the range

        Returns:
            SessionRecords ordered oldest -> newest
        """
        ...
