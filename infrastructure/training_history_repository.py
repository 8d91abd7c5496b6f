"""
In-memory implementation of TrainingHistoryRepository.

Backs the CLI (history supplied in a JSON file) and the test fakes. Hosts
with a database provide their own adapter for the same port.
"""
import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Set, Tuple

from domain.models.training import SessionRecord

logger = logging.getLogger(__name__)

_Key = Tuple[str, str, str]


class InMemoryTrainingHistoryRepository:
    """
    Stores SessionRecords keyed by (user_id, day_id, exercise_name).
    """

    def __init__(self):
        self._sessions: Dict[_Key, List[SessionRecord]] = defaultdict(list)

    def add_sessions(
        self,
        user_id: str,
        day_id: str,
        exercise_name: str,
        sessions: Iterable[SessionRecord],
    ) -> None:
        """Add sessions for one exercise; kept ordered oldest -> newest."""
        bucket = self._sessions[(user_id, day_id, exercise_name)]
        bucket.extend(sessions)
        bucket.sort(key=lambda s: s.workout_date)

    def get_exercise_sessions(
        self,
        user_id: str,
        day_id: str,
        exercise_name: str,
        *,
        limit: Optional[int] = 20,
    ) -> List[SessionRecord]:
        sessions = self._sessions.get((user_id, day_id, exercise_name), [])
        if limit is None:
            return list(sessions)
        return list(sessions[-limit:]) if limit > 0 else []

    def count_completed_sessions(
        self,
        user_id: str,
        day_id: str,
    ) -> int:
        """Distinct sessions logged for the day across all its exercises."""
        seen: Set[Tuple[date, str]] = set()
        for (uid, did, _), sessions in self._sessions.items():
            if uid == user_id and did == day_id:
                seen.update((s.workout_date, s.session_id or "") for s in sessions)
        return len(seen)

    def get_sessions_between(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
    ) -> List[SessionRecord]:
        found = [
            s
            for (uid, _, _), sessions in self._sessions.items()
            if uid == user_id
            for s in sessions
            if start_date <= s.workout_date <= end_date
        ]
        logger.debug("Found %d sessions between %s and %s", len(found), start_date, end_date)
        return sorted(found, key=lambda s: s.workout_date)
