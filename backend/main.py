"""
Application factory for the Progressive Overload API.

create_app() wires logging, Sentry, CORS and the health and progression
routers from a Settings instance, so tests can build apps with their own
configuration:

    from backend.main import create_app
    from backend.settings import Settings

    app = create_app(settings=Settings(environment="test", _env_file=None))

The module-level ``app`` uses get_settings() and is what uvicorn serves.
"""

import logging
import os
from typing import Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings()
                  which loads from environment variables.

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    _configure_logging(settings)

    # Initialize Sentry for error tracking
    _init_sentry(settings)

    # Create FastAPI app
    app = FastAPI(
        title="Progressive Overload API",
        description="Set targets, deload suggestions and personal records for strength training",
        version="1.0.0",
    )

    # Configure CORS middleware
    _configure_cors(app)

    # Include API routers
    _include_routers(app)

    _log_configuration(settings)

    return app


def _configure_logging(settings: Settings) -> None:
    """Set the root log level from settings."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(settings.log_level)


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured."""
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            profiles_sample_rate=0.1,
        )
        logger.info("Sentry initialized for progressive-overload-api")


def _configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    trusted_origins = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]
    # Add production domains from environment if configured
    production_origins = os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",")
    trusted_origins.extend([origin.strip() for origin in production_origins if origin.strip()])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=trusted_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _include_routers(app: FastAPI) -> None:
    """Include all API routers in the application."""
    from api.routers import health_router, progression_router

    # Health router (no prefix - /health at root)
    app.include_router(health_router)

    # Progression engine (prefix defined in the router)
    app.include_router(progression_router)


def _log_configuration(settings: Settings) -> None:
    """Log the progression configuration at startup."""
    logger.info(
        "Progression config: increment=%s plate_rounding=%s deload_multiplier=%s lookback=%sw",
        settings.weight_increment,
        settings.use_plate_rounding,
        settings.deload_multiplier,
        settings.deload_lookback_weeks,
    )
    if settings.is_production and not settings.sentry_dsn:
        logger.warning("Running in production without SENTRY_DSN")


# Default app instance for uvicorn
# This allows: uvicorn backend.main:app --reload
app = create_app()
