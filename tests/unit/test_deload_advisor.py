"""
Unit tests for the deload advisor.

Tests cover:
- Each suggestion rule and rule precedence
- Weekly aggregation of sessions
- Deload window start and scaling
- Exclusion of deload-week sessions from progression history
- Fatigue score and zones
"""

from datetime import date, timedelta

import pytest

from backend.core.deload_advisor import (
    DeloadTrigger,
    FatigueZone,
    WeeklyAggregate,
    apply_deload,
    apply_deload_to_targets,
    build_weekly_aggregates,
    calculate_fatigue_score,
    exclude_deload_sessions,
    is_in_deload,
    start_deload_window,
    suggest_deload,
)
from backend.core.progression_strategy import calculate_set_target
from domain.models.training import (
    DEFAULT_PLAN_SETTINGS,
    DeloadWindow,
    PlanType,
    TargetCalculation,
)
from tests.fakes import make_session

WEEK_ONE = date(2024, 1, 1)


def _weeks(hit_rates=None, rpes=None, volumes=None):
    n = len(hit_rates or rpes or volumes)
    hit_rates = hit_rates or [None] * n
    rpes = rpes or [None] * n
    volumes = volumes or [0.0] * n
    return [
        WeeklyAggregate(
            week_start=WEEK_ONE + timedelta(weeks=i),
            hit_rate=hit_rates[i],
            avg_rpe=rpes[i],
            total_volume=volumes[i],
        )
        for i in range(n)
    ]


# =============================================================================
# Suggestion Rules
# =============================================================================


@pytest.mark.unit
class TestSuggestDeload:
    """Tests for the rule chain."""

    def test_rpe_trend(self):
        weeks = _weeks(rpes=[7.0, 7.2, 7.5, 7.8])
        suggestion = suggest_deload(weeks, deload_frequency_weeks=5)
        assert suggestion.should_deload
        assert suggestion.trigger == DeloadTrigger.RPE_TREND

    def test_flat_rpe_no_trend(self):
        assert suggest_deload(_weeks(rpes=[8.0, 8.0, 8.0, 8.0]), 5) is None

    def test_volume_spike_with_struggling_hit_rate(self):
        weeks = _weeks(
            hit_rates=[80, 80, 80, 50, 50, 50],
            volumes=[1000, 1000, 1000, 1300, 1300, 1300],
        )
        assert suggest_deload(weeks, 12).trigger == DeloadTrigger.VOLUME_SPIKE

    def test_volume_spike_while_hitting_targets(self):
        weeks = _weeks(
            hit_rates=[90] * 6,
            volumes=[1000, 1000, 1000, 1300, 1300, 1300],
        )
        assert suggest_deload(weeks, 12) is None

    def test_low_hit_rate_streak(self):
        suggestion = suggest_deload(_weeks(hit_rates=[80, 80, 40, 45]), 12)
        assert suggestion.trigger == DeloadTrigger.LOW_HIT_RATE_STREAK
        assert "tough weeks" in suggestion.reason

    def test_recent_dip(self):
        weeks = _weeks(hit_rates=[80, 80, 80, 80, 55, 55])
        assert suggest_deload(weeks, 12).trigger == DeloadTrigger.RECENT_DIP

    def test_small_dip_ignored(self):
        weeks = _weeks(hit_rates=[80, 80, 80, 80, 70, 70])
        assert suggest_deload(weeks, 12) is None

    def test_time_based(self):
        suggestion = suggest_deload(_weeks(hit_rates=[70, 70, 60, 60, 60]), 5)
        assert suggestion.trigger == DeloadTrigger.TIME_BASED
        assert "5+ weeks" in suggestion.reason

    def test_time_based_needs_enough_weeks(self):
        assert suggest_deload(_weeks(hit_rates=[70, 60, 60, 60]), 5) is None

    def test_healthy_training(self):
        assert suggest_deload(_weeks(hit_rates=[90] * 8), 5) is None

    def test_zero_hit_rate_weeks_are_ignored(self):
        """Weeks without valid data don't count toward the streak."""
        assert suggest_deload(_weeks(hit_rates=[80, 40, 0, 0]), 12) is None

    def test_rpe_trend_checked_first(self):
        weeks = _weeks(hit_rates=[80, 80, 40, 45], rpes=[7.0, 7.2, 7.5, 7.8])
        assert suggest_deload(weeks, 12).trigger == DeloadTrigger.RPE_TREND


# =============================================================================
# Aggregation
# =============================================================================


@pytest.mark.unit
class TestBuildWeeklyAggregates:
    """Tests for bucketing sessions into weeks."""

    END = date(2024, 3, 31)

    def test_oldest_first(self):
        weeks = build_weekly_aggregates([], self.END, weeks=6)
        assert len(weeks) == 6
        assert weeks[0].week_start == self.END - timedelta(days=41)
        assert weeks[-1].week_start == self.END - timedelta(days=6)

    def test_buckets_sessions(self):
        sessions = [
            make_session(self.END, [(100, 10, 8), (100, 8, 9)], targets=(100, 10, 8)),
            make_session(self.END - timedelta(days=10), [(100, 10, 7)], targets=(100, 10, 8)),
        ]
        weeks = build_weekly_aggregates(sessions, self.END, weeks=6)
        assert weeks[-1].hit_rate == pytest.approx(50.0)
        assert weeks[-1].avg_rpe == pytest.approx(8.5)
        assert weeks[-1].total_volume == 1800
        assert weeks[-2].hit_rate == pytest.approx(100.0)
        assert weeks[0].hit_rate is None

    def test_ignores_sessions_out_of_range(self):
        sessions = [
            make_session(self.END + timedelta(days=1), [(100, 10, 8)]),
            make_session(self.END - timedelta(days=60), [(100, 10, 8)]),
        ]
        weeks = build_weekly_aggregates(sessions, self.END, weeks=6)
        assert all(w.total_volume == 0 for w in weeks)


# =============================================================================
# Deload Window
# =============================================================================


@pytest.mark.unit
class TestDeloadWindow:
    """Tests for starting and applying a deload week."""

    def test_window_ends_on_coming_sunday(self):
        window = start_deload_window(date(2024, 1, 3))
        assert window.active_until == date(2024, 1, 7)
        assert window.starts_on == date(2024, 1, 1)

    def test_window_started_on_sunday(self):
        assert start_deload_window(date(2024, 1, 7)).active_until == date(2024, 1, 7)

    def test_is_in_deload(self):
        window = DeloadWindow(active_until=date(2024, 1, 7))
        assert is_in_deload(window, date(2024, 1, 5))
        assert not is_in_deload(window, date(2024, 1, 8))
        assert not is_in_deload(None, date(2024, 1, 5))

    def test_apply_scales_weight(self):
        window = DeloadWindow(active_until=date(2024, 1, 7))
        target = TargetCalculation(target_weight=135, target_reps=10, target_rpe=8)
        scaled = apply_deload(target, window, date(2024, 1, 5))
        assert scaled.target_weight == 88.0
        assert scaled.target_reps == 10

    def test_apply_outside_window_unchanged(self):
        window = DeloadWindow(active_until=date(2024, 1, 7))
        target = TargetCalculation(target_weight=135, target_reps=10, target_rpe=8)
        assert apply_deload(target, window, date(2024, 1, 9)) == target

    def test_apply_baseline_unchanged(self):
        window = DeloadWindow(active_until=date(2024, 1, 7))
        assert apply_deload(TargetCalculation.baseline(), window, date(2024, 1, 5)).is_baseline

    def test_apply_to_targets_custom_multiplier(self):
        window = DeloadWindow(active_until=date(2024, 1, 7))
        targets = [TargetCalculation(target_weight=200, target_reps=5, target_rpe=8)] * 2
        scaled = apply_deload_to_targets(targets, window, date(2024, 1, 5), multiplier=0.5)
        assert [t.target_weight for t in scaled] == [100.0, 100.0]


@pytest.mark.unit
class TestDeloadIdempotence:
    """Deload-week weights never become next week's base."""

    def test_excludes_sessions_inside_window(self):
        window = DeloadWindow(active_until=date(2024, 1, 14))
        history = [
            make_session(date(2024, 1, 1), [(200, 5, 8)]),
            make_session(date(2024, 1, 10), [(130, 5, 5)]),
        ]
        kept = exclude_deload_sessions(history, window)
        assert [s.workout_date for s in kept] == [date(2024, 1, 1)]

    def test_no_window_keeps_everything(self):
        history = [make_session(date(2024, 1, 1), [(200, 5, 8)])]
        assert exclude_deload_sessions(history, None) == history

    def test_week_after_deload_progresses_from_pre_deload_weight(self):
        window = DeloadWindow(active_until=date(2024, 1, 14))
        history = [
            make_session(date(2024, 1, 1), [(200, 5, 8)], targets=(200, 5, 8)),
            make_session(date(2024, 1, 10), [(130, 5, 5)], targets=(130, 5, 8)),
        ]
        previous = exclude_deload_sessions(history, window)[-1].working_sets[0]
        target = calculate_set_target(
            previous, PlanType.STRENGTH, DEFAULT_PLAN_SETTINGS[PlanType.STRENGTH]
        )
        assert target.target_weight >= 200


# =============================================================================
# Fatigue Score
# =============================================================================


@pytest.mark.unit
class TestFatigueScore:
    """Tests for the fatigue score and zones."""

    def test_fresh_lifter_is_green(self):
        fatigue = calculate_fatigue_score(_weeks(hit_rates=[90, 90]), 5)
        assert fatigue.score == 16
        assert fatigue.zone == FatigueZone.GREEN
        assert "well-recovered" in fatigue.insight

    def test_dip_and_short_streak_is_yellow(self):
        fatigue = calculate_fatigue_score(_weeks(hit_rates=[90, 90, 90, 90, 90, 40]), 7)
        assert fatigue.score == 69
        assert fatigue.zone == FatigueZone.YELLOW

    def test_long_block_with_misses_is_red(self):
        fatigue = calculate_fatigue_score(_weeks(hit_rates=[80, 80, 80, 80, 40, 40]), 5)
        assert fatigue.zone == FatigueZone.RED
        assert fatigue.weeks_trained == 6

    def test_score_capped_at_100(self):
        fatigue = calculate_fatigue_score(_weeks(hit_rates=[80] * 8 + [30, 30, 30]), 5)
        assert fatigue.score == 100
