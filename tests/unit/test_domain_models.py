"""
Unit tests for domain models.

These tests verify:
- Model validation
- Model serialization/deserialization
- Computed properties
- Domain methods
"""

import json
import pytest
from datetime import date
from pydantic import ValidationError


@pytest.mark.unit
class TestSetRecordModel:
    """Tests for the SetRecord value object."""

    def test_set_creation(self):
        """SetRecord can be created without targets (baseline)."""
        from domain.models import SetRecord

        s = SetRecord(weight=135, reps=10, rpe=7)
        assert s.weight == 135
        assert s.has_targets is False
        assert s.is_working is True
        assert s.is_resistance is True

    def test_set_with_targets(self):
        from domain.models import SetRecord

        s = SetRecord(weight=135, reps=10, rpe=7, target_weight=135, target_reps=10, target_rpe=8)
        assert s.has_targets is True

    def test_partial_targets_rejected(self):
        """Targets must be all set or all null."""
        from domain.models import SetRecord

        with pytest.raises(ValidationError):
            SetRecord(weight=100, reps=5, target_weight=100, target_reps=5)

    def test_validation_ranges(self):
        from domain.models import SetRecord

        with pytest.raises(ValidationError):
            SetRecord(weight=-5, reps=5)

        with pytest.raises(ValidationError):
            SetRecord(weight=100, reps=5, rpe=11)

    def test_set_is_immutable(self):
        from domain.models import SetRecord

        s = SetRecord(weight=100, reps=5)
        with pytest.raises(ValidationError):
            s.weight = 110

    def test_timed_set_is_not_resistance(self):
        from domain.models import SetRecord

        assert SetRecord(duration_seconds=60).is_resistance is False


@pytest.mark.unit
class TestSessionRecordModel:
    """Tests for the SessionRecord model."""

    def test_working_sets_filter(self):
        """Warmups and timed sets are excluded from working sets."""
        from domain.models import SessionRecord, SetRecord, SetType

        session = SessionRecord(
            workout_date=date(2024, 1, 1),
            sets=[
                SetRecord(weight=45, reps=10, set_type=SetType.WARMUP),
                SetRecord(weight=135, reps=8),
                SetRecord(duration_seconds=300),
                SetRecord(weight=135, reps=7),
            ],
        )

        assert [s.reps for s in session.working_sets] == [8, 7]

    def test_session_serialization(self):
        """SessionRecord round-trips through JSON."""
        from domain.models import SessionRecord, SetRecord

        session = SessionRecord(
            workout_date=date(2024, 1, 1),
            sets=[SetRecord(weight=135, reps=10, rpe=7)],
            session_id="s1",
        )

        data = json.loads(session.model_dump_json())
        assert data["workout_date"] == "2024-01-01"
        assert SessionRecord.model_validate(data) == session


@pytest.mark.unit
class TestPlanSettingsModel:
    """Tests for PlanSettings and the built-in defaults."""

    def test_default_hypertrophy_settings(self):
        from domain.models import PlanType, default_plan_settings

        settings = default_plan_settings(PlanType.HYPERTROPHY)
        assert (settings.rep_range_min, settings.rep_range_max) == (8, 15)
        assert (settings.target_rpe_min, settings.target_rpe_max) == (6, 8)
        assert settings.weight_increase_percent == 2.5

    def test_default_strength_settings(self):
        from domain.models import PlanType, default_plan_settings

        settings = default_plan_settings("strength")
        assert (settings.rep_range_min, settings.rep_range_max) == (3, 6)
        assert settings.weight_increase_percent == 5.0

    def test_inverted_rep_range_rejected(self):
        from domain.models import PlanSettings

        with pytest.raises(ValidationError):
            PlanSettings(
                rep_range_min=10, rep_range_max=8,
                target_rpe_min=6, target_rpe_max=8,
                weight_increase_percent=2.5,
            )

    def test_inverted_rpe_range_rejected(self):
        from domain.models import PlanSettings

        with pytest.raises(ValidationError):
            PlanSettings(
                rep_range_min=8, rep_range_max=10,
                target_rpe_min=9, target_rpe_max=7,
                weight_increase_percent=2.5,
            )


@pytest.mark.unit
class TestOutputModels:
    """Tests for TargetCalculation, DeloadWindow and ProgramStrategy."""

    def test_baseline_target(self):
        from domain.models import TargetCalculation

        target = TargetCalculation.baseline()
        assert target.is_baseline is True
        assert target.target_reps is None

    def test_deload_window_is_seven_days(self):
        from domain.models import DeloadWindow

        window = DeloadWindow(active_until=date(2024, 1, 7))
        assert window.starts_on == date(2024, 1, 1)
        assert window.contains(date(2024, 1, 1))
        assert window.contains(date(2024, 1, 7))
        assert not window.contains(date(2023, 12, 31))
        assert not window.contains(date(2024, 1, 8))

    def test_program_strategy_cycle_week_bounds(self):
        from domain.models import ProgramStrategy, TargetStrategy

        with pytest.raises(ValidationError):
            ProgramStrategy(kind=TargetStrategy.FIVE_THREE_ONE, cycle_week=4)

    def test_program_strategy_defaults(self):
        from domain.models import ProgramStrategy, TargetStrategy

        strategy = ProgramStrategy()
        assert strategy.kind == TargetStrategy.DEFAULT
        assert strategy.cycle_week is None
