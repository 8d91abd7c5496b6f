"""
Built-in program templates.

The catalog lives in preset_templates.yaml next to this module and is
validated into PresetTemplate models on first use. A preset's
``target_strategy`` selects the named strategy used for its workouts;
presets without one use default plan-type progression.
"""
import logging
import pathlib
from functools import lru_cache
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

from domain.models.training import LinearVariant, PlanType, TargetStrategy

logger = logging.getLogger(__name__)

CATALOG_PATH = pathlib.Path(__file__).resolve().parent / "preset_templates.yaml"


class PresetDay(BaseModel):
    """One training day of a preset."""

    model_config = ConfigDict(frozen=True)

    day_order: int = Field(..., ge=1)
    day_label: str
    exercises: List[str] = Field(default_factory=list)


class PresetTemplate(BaseModel):
    """A built-in program template."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    plan_type: PlanType
    description: str = ""
    target_strategy: TargetStrategy = TargetStrategy.DEFAULT
    linear_variant: Optional[LinearVariant] = None
    days: List[PresetDay] = Field(default_factory=list)

    def get_day(self, day_label: str) -> Optional[PresetDay]:
        return next((d for d in self.days if d.day_label == day_label), None)


@lru_cache
def load_presets() -> Dict[str, PresetTemplate]:
    """Load and validate the catalog, keyed by preset id."""
    raw = yaml.safe_load(CATALOG_PATH.read_text(encoding="utf-8")) or []
    presets = {p.id: p for p in (PresetTemplate.model_validate(item) for item in raw)}
    logger.debug("Loaded %d preset templates", len(presets))
    return presets


def list_presets() -> List[PresetTemplate]:
    return list(load_presets().values())


def get_preset(preset_id: Optional[str]) -> Optional[PresetTemplate]:
    if not preset_id:
        return None
    return load_presets().get(preset_id)


def get_preset_target_strategy(preset_id: Optional[str]) -> Optional[TargetStrategy]:
    """
    Target strategy declared by a preset.

    Returns None for a missing or unknown preset id.
    """
    preset = get_preset(preset_id)
    return preset.target_strategy if preset else None
