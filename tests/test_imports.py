"""Verify all modules can be imported without errors."""
import pytest

# All tests in this module are pure import checks - mark as unit tests
pytestmark = pytest.mark.unit


def test_core_module_imports():
    """Import core backend modules to catch bad import paths."""
    import backend.main
    import backend.settings
    import backend.cli


def test_core_logic_imports():
    """Import progression engine modules."""
    import backend.core.estimated_max
    import backend.core.loadable_weight
    import backend.core.performance_evaluator
    import backend.core.progression_strategy
    import backend.core.program_strategies
    import backend.core.presets
    import backend.core.deload_advisor
    import backend.core.pr_detector
    import backend.core.target_explanation


def test_layer_imports():
    """Import domain, application and infrastructure packages."""
    import domain.models.training
    import application.exceptions
    import application.ports
    import application.use_cases
    import infrastructure


def test_api_imports():
    """Import API packages."""
    import api.deps
    import api.routers.health
    import api.routers.progression
