"""
Fake Repository Implementations for Testing.

This package provides in-memory fake implementations of repository interfaces
for fast, isolated testing. No database or external dependencies required.

Features:
- Fakes implement the same Protocol interfaces as real implementations
- Supports seeding with test data
- Supports reset() for test isolation
- Builders for SessionRecord test data

Usage:
    from tests.fakes import FakeTrainingHistoryRepository, make_session

    repo = FakeTrainingHistoryRepository()
    repo.seed("user1", "day1", "Barbell Squat", [
        make_session(date(2024, 1, 1), [(225, 5, 8)]),
    ])
"""

from tests.fakes.training_history_repository import (
    FakeTrainingHistoryRepository,
    make_session,
    weekly_sessions,
)

__all__ = [
    "FakeTrainingHistoryRepository",
    "make_session",
    "weekly_sessions",
]
