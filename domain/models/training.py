"""
Training history and target value objects.

These models carry everything the progression engine reads and produces:
- SetRecord: one logged set with the targets it was prescribed
- SessionRecord: one session's sets for a single exercise
- PlanSettings: rep/RPE ranges and increments for a plan type
- ProgramStrategy: the target methodology selected for a workout
- TargetCalculation: the prescription for the next occurrence of a set
- DeloadWindow / PersonalRecord: derived fatigue and record values

Usage:
    >>> from domain.models.training import SetRecord, SessionRecord

    >>> s = SetRecord(weight=135, reps=10, rpe=7)
    >>> s.has_targets
    False
"""

from datetime import date, timedelta
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# Enums
# =============================================================================


class SetType(str, Enum):
    """Role of a set within an exercise."""

    WARMUP = "warmup"
    WORKING = "working"
    COOLDOWN = "cooldown"


class PlanType(str, Enum):
    """Training plan focus."""

    HYPERTROPHY = "hypertrophy"
    STRENGTH = "strength"


class PerformanceStatus(str, Enum):
    """Classification of a completed set against its target."""

    OVERPERFORMED = "overperformed"
    MET_TARGET = "met_target"
    UNDERPERFORMED = "underperformed"


class TargetStrategy(str, Enum):
    """Target methodology tag declared by a preset template."""

    DEFAULT = "default"
    FIVE_THREE_ONE = "five_three_one"
    LINEAR = "linear"
    GZCLP = "gzclp"
    TEXAS_METHOD = "texas_method"
    PHUL = "phul"


class LinearVariant(str, Enum):
    """Linear progression flavours (they differ in set count)."""

    STARTING_STRENGTH = "starting_strength"
    STRONGLIFTS = "stronglifts"


class TexasDay(str, Enum):
    """Texas Method day types."""

    VOLUME = "volume"
    RECOVERY = "recovery"
    INTENSITY = "intensity"


class PHULFocus(str, Enum):
    """PHUL day focus."""

    POWER = "power"
    HYPERTROPHY = "hypertrophy"


class PRType(str, Enum):
    """Personal record categories."""

    HEAVIEST_SET = "heaviest_set"
    E1RM = "e1rm"


# =============================================================================
# History
# =============================================================================


class SetRecord(BaseModel):
    """
    One logged set, immutable once recorded.

    Targets are either all present (the set was prescribed) or all absent
    (baseline workout). Edits produce a new SetRecord rather than mutating
    this one.
    """

    model_config = ConfigDict(frozen=True)

    weight: float = Field(default=0.0, ge=0, description="Actual weight lifted")
    reps: int = Field(default=0, ge=0, description="Actual reps completed")
    rpe: float = Field(default=0.0, ge=0, le=10, description="Actual RPE (0 = unspecified)")
    set_type: SetType = Field(default=SetType.WORKING)
    target_weight: Optional[float] = Field(default=None, ge=0)
    target_reps: Optional[int] = Field(default=None, ge=0)
    target_rpe: Optional[float] = Field(default=None, ge=0, le=10)
    duration_seconds: Optional[int] = Field(
        default=None,
        ge=0,
        description="Set for timed/cardio logs; such sets are not resistance sets",
    )

    @model_validator(mode="after")
    def validate_targets(self) -> "SetRecord":
        """Targets must be all present or all absent."""
        present = [
            t is not None
            for t in (self.target_weight, self.target_reps, self.target_rpe)
        ]
        if any(present) and not all(present):
            raise ValueError(
                "target_weight, target_reps and target_rpe must be all set or all null"
            )
        return self

    @property
    def has_targets(self) -> bool:
        """True when the set was logged against a prescription."""
        return self.target_weight is not None

    @property
    def is_working(self) -> bool:
        return self.set_type == SetType.WORKING

    @property
    def is_resistance(self) -> bool:
        """True for weight/rep sets (timed or cardio logs excluded)."""
        return self.duration_seconds is None


class SessionRecord(BaseModel):
    """One session's sets for a single exercise in a single program day."""

    model_config = ConfigDict(frozen=True)

    workout_date: date
    sets: List[SetRecord] = Field(default_factory=list)
    session_id: Optional[str] = None

    @property
    def working_sets(self) -> List[SetRecord]:
        """Working resistance sets in logged order."""
        return [s for s in self.sets if s.is_working and s.is_resistance]


# =============================================================================
# Configuration
# =============================================================================


class PlanSettings(BaseModel):
    """Progression parameters for one plan type."""

    model_config = ConfigDict(frozen=True)

    rep_range_min: int = Field(..., ge=1)
    rep_range_max: int = Field(..., ge=1)
    target_rpe_min: float = Field(..., ge=0, le=10)
    target_rpe_max: float = Field(..., ge=0, le=10)
    weight_increase_percent: float = Field(..., ge=0)
    rep_increase: int = Field(default=1, ge=0)
    deload_frequency_weeks: int = Field(default=6, ge=1)

    @model_validator(mode="after")
    def validate_ranges(self) -> "PlanSettings":
        if self.rep_range_min > self.rep_range_max:
            raise ValueError("rep_range_min must not exceed rep_range_max")
        if self.target_rpe_min > self.target_rpe_max:
            raise ValueError("target_rpe_min must not exceed target_rpe_max")
        return self


DEFAULT_PLAN_SETTINGS = {
    PlanType.HYPERTROPHY: PlanSettings(
        rep_range_min=8,
        rep_range_max=15,
        target_rpe_min=6,
        target_rpe_max=8,
        weight_increase_percent=2.5,
        rep_increase=1,
        deload_frequency_weeks=5,
    ),
    PlanType.STRENGTH: PlanSettings(
        rep_range_min=3,
        rep_range_max=6,
        target_rpe_min=7,
        target_rpe_max=9,
        weight_increase_percent=5.0,
        rep_increase=1,
        deload_frequency_weeks=7,
    ),
}


def default_plan_settings(plan_type: PlanType) -> PlanSettings:
    """Get the built-in settings for a plan type."""
    return DEFAULT_PLAN_SETTINGS[PlanType(plan_type)]


class ProgramStrategy(BaseModel):
    """
    Target methodology for one workout, resolved once per session.

    Only the fields relevant to ``kind`` are populated:
    - five_three_one: cycle_week (1-3), optional training_max
    - linear: linear_variant
    - texas_method: texas_day
    - phul: phul_focus

    GZCLP tiers depend on exercise position and are derived per exercise.
    """

    model_config = ConfigDict(frozen=True)

    kind: TargetStrategy = TargetStrategy.DEFAULT
    cycle_week: Optional[int] = Field(default=None, ge=1, le=3)
    training_max: Optional[float] = Field(default=None, gt=0)
    linear_variant: Optional[LinearVariant] = None
    texas_day: Optional[TexasDay] = None
    phul_focus: Optional[PHULFocus] = None


# =============================================================================
# Outputs
# =============================================================================


class TargetCalculation(BaseModel):
    """Prescription for the next occurrence of a set. All-None means baseline."""

    model_config = ConfigDict(frozen=True)

    target_weight: Optional[float] = None
    target_reps: Optional[int] = None
    target_rpe: Optional[float] = None
    high_rpe_last_time: bool = False
    performance_status: Optional[PerformanceStatus] = None

    @property
    def is_baseline(self) -> bool:
        return self.target_weight is None

    @classmethod
    def baseline(cls) -> "TargetCalculation":
        return cls()


class DeloadWindow(BaseModel):
    """Seven-day deload period ending on ``active_until`` (inclusive)."""

    model_config = ConfigDict(frozen=True)

    active_until: date

    @property
    def starts_on(self) -> date:
        return self.active_until - timedelta(days=6)

    def contains(self, day: date) -> bool:
        """Check whether a session date falls inside the window."""
        return self.starts_on <= day <= self.active_until


class PersonalRecord(BaseModel):
    """A personal record derived from a session; never stored by the engine."""

    model_config = ConfigDict(frozen=True)

    exercise_name: str
    pr_type: PRType
    value: float
    weight: float
    reps: int
