"""
Detect Session PRs Use Case.

Loads each exercise's full history for the program day and reports the
personal records set in the session being completed.
"""
import logging
from typing import Dict, List, Optional, Sequence

from application.exceptions import TrainingHistoryError
from application.ports import TrainingHistoryRepository
from backend.core.pr_detector import SessionExercise, detect_session_prs
from domain.models.training import PersonalRecord, SessionRecord

logger = logging.getLogger(__name__)


class DetectSessionPRsUseCase:
    """Use case for the workout-complete PR summary."""

    def __init__(self, history_repo: TrainingHistoryRepository):
        self._history_repo = history_repo

    def execute(
        self,
        user_id: str,
        day_id: str,
        exercises: Sequence[SessionExercise],
        exclude_session_id: Optional[str] = None,
    ) -> List[PersonalRecord]:
        """
        Detect PRs for a session.

        Args:
            user_id: User ID
            day_id: Program day ID
            exercises: The session's exercises and sets, in session order
            exclude_session_id: Session being edited; left out of history

        Returns:
            PersonalRecords, first occurrence per type and exercise

        Raises:
            TrainingHistoryError: If history cannot be loaded
        """
        history: Dict[str, List[SessionRecord]] = {}
        for exercise in exercises:
            try:
                sessions = self._history_repo.get_exercise_sessions(
                    user_id, day_id, exercise.exercise_name, limit=None
                )
            except Exception as e:
                logger.warning("Failed to load PR history for %s: %s", exercise.exercise_name, e)
                raise TrainingHistoryError(
                    f"Could not load history for {exercise.exercise_name}", user_id=user_id
                ) from e
            history[exercise.exercise_name] = [
                s for s in sessions
                if exclude_session_id is None or s.session_id != exclude_session_id
            ]

        records = detect_session_prs(exercises, history)
        if records:
            logger.info("User %s set %d PRs on day %s", user_id, len(records), day_id)
        return records
