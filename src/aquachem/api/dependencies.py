"""
Dependency injection configuration.
Wires together domain services with adapters.
"""
import logging
from functools import lru_cache

from aquachem.adapters.linear_forecaster import LinearTrendForecaster
from aquachem.adapters.sql_store import (
    SqlPredictionStore,
    SqlWaterSampleRepository,
    create_store_engine,
)
from aquachem.config import Settings
from aquachem.domain.accuracy import AccuracyValidator
from aquachem.domain.safety import SafetyClassifier
from aquachem.domain.service import ForecastOrchestrator

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=1)
def get_service() -> ForecastOrchestrator:
    """
    Dependency injection for ForecastOrchestrator.

    This function constructs the service with all its dependencies.
    Using lru_cache ensures singleton behavior across requests.

    Returns:
        ForecastOrchestrator: Fully initialized service with all adapters
    """
    settings = get_settings()

    logger.info(f"Initializing services with database: {settings.database_url[:50]}...")

    # Output adapters (Persistence)
    engine = create_store_engine(settings.database_url)
    prediction_store = SqlPredictionStore(engine)
    sample_repo = SqlWaterSampleRepository(engine)

    service = ForecastOrchestrator(
        prediction_store=prediction_store,
        forecaster=LinearTrendForecaster(),
        classifier=SafetyClassifier(),
        validator=AccuracyValidator(match_window_days=settings.match_window_days),
        sample_repo=sample_repo,
        settings=settings,
    )

    logger.info("ForecastOrchestrator initialized successfully")
    return service
