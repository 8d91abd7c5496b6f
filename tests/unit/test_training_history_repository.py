"""
Unit tests for InMemoryTrainingHistoryRepository.

Tests cover:
- Ordering and the per-exercise session limit
- Unlimited reads
- Completed session counts and date-range reads
"""

from datetime import date

import pytest

from infrastructure import InMemoryTrainingHistoryRepository
from tests.fakes import make_session, weekly_sessions

USER = "user-1"
DAY = "day-1"
START = date(2024, 1, 1)


@pytest.fixture
def repo():
    repo = InMemoryTrainingHistoryRepository()
    repo.add_sessions(USER, DAY, "Barbell Squat", weekly_sessions(START, 25, [(225, 5, 8)]))
    return repo


@pytest.mark.unit
class TestExerciseSessions:
    """Tests for get_exercise_sessions."""

    def test_default_limit_keeps_newest(self, repo):
        sessions = repo.get_exercise_sessions(USER, DAY, "Barbell Squat")
        assert len(sessions) == 20
        assert sessions[-1].workout_date == date(2024, 6, 17)

    def test_no_limit_returns_everything(self, repo):
        sessions = repo.get_exercise_sessions(USER, DAY, "Barbell Squat", limit=None)
        assert len(sessions) == 25
        assert sessions[0].workout_date == START

    def test_zero_limit(self, repo):
        assert repo.get_exercise_sessions(USER, DAY, "Barbell Squat", limit=0) == []

    def test_sorted_oldest_first(self, repo):
        repo.add_sessions(USER, DAY, "Barbell Squat", [make_session(date(2023, 12, 25), [(200, 5, 8)])])
        sessions = repo.get_exercise_sessions(USER, DAY, "Barbell Squat", limit=None)
        assert sessions[0].workout_date == date(2023, 12, 25)


@pytest.mark.unit
class TestUserQueries:
    """Tests for session counts and date-range reads."""

    def test_count_completed_sessions(self, repo):
        repo.add_sessions(USER, DAY, "Bench Press", [make_session(START, [(135, 5, 8)])])
        assert repo.count_completed_sessions(USER, DAY) == 25

    def test_sessions_between(self, repo):
        sessions = repo.get_sessions_between(USER, date(2024, 1, 8), date(2024, 1, 22))
        assert [s.workout_date.day for s in sessions] == [8, 15, 22]
