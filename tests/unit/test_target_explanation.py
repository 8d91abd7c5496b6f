"""
Unit tests for target explanations.

Tests cover:
- Default strategy messages per performance status and streak
- Rep-range top, high-RPE and recency hold messages
- Named strategy messages
- Exercise-level explanations from a slot's context
"""

from datetime import date

import pytest

from backend.core.program_strategies import ExerciseContext
from backend.core.target_explanation import explain_exercise_targets, explain_target
from domain.models.training import (
    PerformanceStatus,
    PlanType,
    ProgramStrategy,
    TargetCalculation,
    TargetStrategy,
)
from tests.fakes import make_session


@pytest.mark.unit
class TestDefaultExplanations:
    """Tests for default-strategy explanations."""

    def test_baseline(self):
        assert "baseline" in explain_target(None, PlanType.HYPERTROPHY, 0)

    def test_overperformed(self):
        text = explain_target(PerformanceStatus.OVERPERFORMED, PlanType.STRENGTH, 0)
        assert text.startswith("You beat last time")

    def test_met_target_strength(self):
        text = explain_target(PerformanceStatus.MET_TARGET, PlanType.STRENGTH, 0)
        assert "weight bump" in text

    @pytest.mark.parametrize(
        "count,fragment",
        [(0, "Holding steady"), (1, "Reduced slightly"), (3, "Consider a deload")],
    )
    def test_underperformed_by_streak(self, count, fragment):
        text = explain_target(PerformanceStatus.UNDERPERFORMED, PlanType.HYPERTROPHY, count)
        assert fragment in text

    @pytest.mark.parametrize("status", [None, *PerformanceStatus])
    def test_short(self, status):
        assert len(explain_target(status, PlanType.HYPERTROPHY, 2)) <= 80


@pytest.mark.unit
class TestStrategyExplanations:
    """Tests for named-strategy explanations."""

    def test_five_three_one_week(self):
        text = explain_target(
            None, PlanType.STRENGTH, 0, strategy=TargetStrategy.FIVE_THREE_ONE, cycle_week=2
        )
        assert text == "5/3/1 Week 2: 70-90% of training max."

    def test_linear(self):
        text = explain_target(None, PlanType.STRENGTH, 0, strategy=TargetStrategy.LINEAR)
        assert "+10 lb lower" in text

    def test_texas_day(self):
        text = explain_target(
            None, PlanType.STRENGTH, 0, strategy=TargetStrategy.TEXAS_METHOD, day_label="Recovery Day"
        )
        assert text == "Texas Method Recovery Day."

    def test_phul_power(self):
        text = explain_target(
            None, PlanType.HYPERTROPHY, 0, strategy=TargetStrategy.PHUL, day_label="Power Lower"
        )
        assert "power day" in text

    def test_strategy_wins_over_status(self):
        text = explain_target(
            PerformanceStatus.UNDERPERFORMED, PlanType.STRENGTH, 3, strategy=TargetStrategy.GZCLP
        )
        assert text.startswith("GZCLP")


@pytest.mark.unit
class TestHoldExplanations:
    """Tests for rep-range top and hold messages."""

    def test_overperformed_at_rep_max(self):
        text = explain_target(PerformanceStatus.OVERPERFORMED, PlanType.HYPERTROPHY, 0, at_rep_max=True)
        assert text == "Beat the top of the rep range. Weight goes up, reps reset."

    def test_met_at_rep_max(self):
        text = explain_target(PerformanceStatus.MET_TARGET, PlanType.HYPERTROPHY, 0, at_rep_max=True)
        assert text.startswith("Hit the top of the rep range")

    def test_met_below_rep_max_holds(self):
        text = explain_target(PerformanceStatus.MET_TARGET, PlanType.HYPERTROPHY, 0)
        assert text.startswith("Met target. Same weight and reps")

    def test_rep_max_ignored_for_strength(self):
        text = explain_target(PerformanceStatus.MET_TARGET, PlanType.STRENGTH, 0, at_rep_max=True)
        assert text == "Met target. Small weight bump this week."

    def test_high_rpe_hold(self):
        text = explain_target(
            PerformanceStatus.OVERPERFORMED, PlanType.HYPERTROPHY, 0, high_rpe_last_time=True
        )
        assert text.startswith("Last time felt hard")

    @pytest.mark.parametrize("gap", [0, 1])
    def test_same_day_hold(self, gap):
        text = explain_target(PerformanceStatus.MET_TARGET, PlanType.HYPERTROPHY, 0, days_since_last_session=gap)
        assert text.startswith("Trained this lift very recently")

    def test_returning_hold_wins_over_high_rpe(self):
        text = explain_target(
            PerformanceStatus.MET_TARGET,
            PlanType.STRENGTH,
            0,
            high_rpe_last_time=True,
            days_since_last_session=14,
        )
        assert text.startswith("First session in a while")

    def test_normal_gap_has_no_hold(self):
        text = explain_target(PerformanceStatus.MET_TARGET, PlanType.STRENGTH, 0, days_since_last_session=7)
        assert text == "Met target. Small weight bump this week."

    def test_hold_does_not_replace_baseline(self):
        assert "baseline" in explain_target(None, PlanType.HYPERTROPHY, 0, days_since_last_session=30)


@pytest.mark.unit
class TestExerciseExplanations:
    """Tests for explanations built from an exercise slot's context."""

    def _context(self, reps, days=7):
        return ExerciseContext(
            exercise_name="Cable Row",
            history=[make_session(date(2024, 1, 1), [(100, reps, 7)] * 2)],
            days_since_last_session=days,
        )

    def _targets(self, **fields):
        target = TargetCalculation(
            target_weight=100, target_reps=8, target_rpe=8,
            performance_status=PerformanceStatus.MET_TARGET, **fields,
        )
        return [target, target]

    def test_rep_max_from_previous_first_set(self):
        text = explain_exercise_targets(
            self._targets(), self._context(reps=15), PlanType.HYPERTROPHY, ProgramStrategy()
        )
        assert text.startswith("Hit the top of the rep range")

    def test_below_rep_max(self):
        text = explain_exercise_targets(
            self._targets(), self._context(reps=10), PlanType.HYPERTROPHY, ProgramStrategy()
        )
        assert text.startswith("Met target. Same weight and reps")

    def test_high_rpe_from_first_target(self):
        text = explain_exercise_targets(
            self._targets(high_rpe_last_time=True),
            self._context(reps=10),
            PlanType.HYPERTROPHY,
            ProgramStrategy(),
        )
        assert text.startswith("Last time felt hard")

    def test_recency_from_context(self):
        text = explain_exercise_targets(
            self._targets(), self._context(reps=10, days=1), PlanType.HYPERTROPHY, ProgramStrategy()
        )
        assert text.startswith("Trained this lift very recently")

    def test_no_targets_is_baseline(self):
        text = explain_exercise_targets(
            [], ExerciseContext(exercise_name="Cable Row"), PlanType.HYPERTROPHY, ProgramStrategy()
        )
        assert "baseline" in text

    def test_program_strategy(self):
        strategy = ProgramStrategy(kind=TargetStrategy.FIVE_THREE_ONE, cycle_week=3)
        text = explain_exercise_targets(
            self._targets(), self._context(reps=5), PlanType.STRENGTH, strategy
        )
        assert text.startswith("5/3/1 Week 3")
