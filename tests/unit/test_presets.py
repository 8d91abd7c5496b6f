"""
Unit tests for the built-in preset catalog.

Tests cover:
- Catalog loading and validation
- Declared target strategies
- Lookup helpers
"""

import pytest

from backend.core.presets import (
    get_preset,
    get_preset_target_strategy,
    list_presets,
    load_presets,
)
from domain.models.training import LinearVariant, PlanType, TargetStrategy


@pytest.mark.unit
class TestCatalog:
    """Tests for the YAML catalog."""

    def test_loads_all_presets(self):
        assert len(load_presets()) == 10

    def test_ids_unique(self):
        ids = [p.id for p in list_presets()]
        assert len(ids) == len(set(ids))

    def test_every_preset_has_days(self):
        for preset in list_presets():
            assert preset.days, preset.id
            orders = [d.day_order for d in preset.days]
            assert orders == sorted(orders), preset.id
            assert all(d.exercises for d in preset.days), preset.id

    def test_plan_types(self):
        assert get_preset("ppl-6day").plan_type == PlanType.HYPERTROPHY
        assert get_preset("531-4day").plan_type == PlanType.STRENGTH


@pytest.mark.unit
class TestTargetStrategies:
    """Tests for declared strategies."""

    @pytest.mark.parametrize(
        "preset_id,strategy",
        [
            ("phul-4day", TargetStrategy.PHUL),
            ("531-4day", TargetStrategy.FIVE_THREE_ONE),
            ("starting-strength-3day", TargetStrategy.LINEAR),
            ("stronglifts-3day", TargetStrategy.LINEAR),
            ("gzclp-4day", TargetStrategy.GZCLP),
            ("texas-method-style-3day", TargetStrategy.TEXAS_METHOD),
            ("ppl-6day", TargetStrategy.DEFAULT),
            ("upper-lower-4day", TargetStrategy.DEFAULT),
        ],
    )
    def test_declared_strategy(self, preset_id, strategy):
        assert get_preset_target_strategy(preset_id) == strategy

    def test_unknown_preset(self):
        assert get_preset_target_strategy("nope") is None
        assert get_preset_target_strategy(None) is None

    def test_linear_variant(self):
        assert get_preset("stronglifts-3day").linear_variant == LinearVariant.STRONGLIFTS


@pytest.mark.unit
class TestLookup:
    """Tests for lookup helpers."""

    def test_get_preset_missing(self):
        assert get_preset("nope") is None
        assert get_preset("") is None

    def test_get_day(self):
        preset = get_preset("texas-method-style-3day")
        day = preset.get_day("Recovery Day")
        assert day is not None
        assert day.day_order == 2
        assert preset.get_day("Leg Day") is None
