"""
Centralized settings configuration using Pydantic BaseSettings.

All environment variables are defined here with types, defaults, and validation.
Use get_settings() for dependency injection compatibility in FastAPI.

Usage:
    from backend.settings import get_settings, Settings

    # In FastAPI endpoints (dependency injection)
    @app.get("/")
    def read_root(settings: Settings = Depends(get_settings)):
        return {"environment": settings.environment}

    # Direct access (module-level)
    settings = get_settings()
    print(settings.deload_multiplier)
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.core.loadable_weight import (
    DEFAULT_BAR_WEIGHT,
    DEFAULT_INCREMENT,
    STANDARD_PLATES,
    PlateInventory,
)
from backend.core.performance_evaluator import EvaluationThresholds


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Core Environment
    # -------------------------------------------------------------------------
    environment: str = Field(
        default="development",
        description="Runtime environment: development, staging, production",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
    )

    # -------------------------------------------------------------------------
    # Progression
    # -------------------------------------------------------------------------
    weight_increment: float = Field(
        default=DEFAULT_INCREMENT,
        gt=0,
        description="Smallest weight step targets are rounded to",
    )
    use_plate_rounding: bool = Field(
        default=False,
        description="Round targets to totals loadable from bar_weight and plates",
    )
    bar_weight: float = Field(
        default=DEFAULT_BAR_WEIGHT,
        ge=0,
        description="Barbell weight used for plate rounding",
    )
    plates: List[float] = Field(
        default_factory=lambda: list(STANDARD_PLATES),
        description="Available plate weights (one side); JSON list in env",
    )
    e1rm_overperform_band: float = Field(
        default=1.05,
        gt=0,
        description="Heavier-but-fewer-reps: e1RM ratio counted as overperformance",
    )
    e1rm_met_band: float = Field(
        default=0.95,
        gt=0,
        description="Heavier-but-fewer-reps: e1RM ratio counted as met target",
    )

    # -------------------------------------------------------------------------
    # Deload
    # -------------------------------------------------------------------------
    deload_multiplier: float = Field(
        default=0.65,
        gt=0,
        le=1,
        description="Target weight scale during a deload week",
    )
    deload_lookback_weeks: int = Field(
        default=12,
        ge=6,
        le=12,
        description="Weeks of history the deload advisor looks at",
    )

    # -------------------------------------------------------------------------
    # Observability - Sentry
    # -------------------------------------------------------------------------
    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN for error tracking",
    )

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is a valid value."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {valid_environments}"
            )
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level '{v}'. Must be one of: {valid_levels}")
        return v.upper()

    @field_validator("plates")
    @classmethod
    def validate_plates(cls, v: List[float]) -> List[float]:
        if any(p <= 0 for p in v):
            raise ValueError("Plate weights must be positive")
        return sorted(v, reverse=True)

    @model_validator(mode="after")
    def validate_bands(self) -> "Settings":
        if self.e1rm_met_band > self.e1rm_overperform_band:
            raise ValueError("e1rm_met_band must not exceed e1rm_overperform_band")
        return self

    # -------------------------------------------------------------------------
    # Helper Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"

    def evaluation_thresholds(self) -> EvaluationThresholds:
        """Evaluator tolerances with the configured e1RM bands."""
        return EvaluationThresholds(
            e1rm_overperform_band=self.e1rm_overperform_band,
            e1rm_met_band=self.e1rm_met_band,
        )

    def plate_inventory(self) -> PlateInventory:
        return PlateInventory(bar_weight=self.bar_weight, plates=tuple(self.plates))


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    For testing, you can clear the cache with get_settings.cache_clear().

    Returns:
        Settings: Application settings instance
    """
    return Settings()
