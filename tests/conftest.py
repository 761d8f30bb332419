"""
Shared fixtures for the forecasting test suite.
"""
from datetime import datetime, timedelta, timezone

import pytest

from aquachem.adapters.linear_forecaster import LinearTrendForecaster
from aquachem.adapters.memory_store import InMemoryPredictionStore, InMemoryWaterSampleRepository
from aquachem.domain.models import Sample
from aquachem.domain.service import ForecastOrchestrator

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_samples():
    """
    Build evenly spaced samples ending at `end`.

    Each value may be a number (recorded under `parameter`) or a dict of
    readings.
    """
    def _make(values, parameter="PH", entity_id="tank-1", end=NOW, step_days=1.0):
        count = len(values)
        start = end - timedelta(days=step_days * (count - 1))
        samples = []
        for i, value in enumerate(values):
            readings = value if isinstance(value, dict) else {parameter: value}
            samples.append(
                Sample(
                    entity_id=entity_id,
                    timestamp=start + timedelta(days=step_days * i),
                    readings=readings,
                )
            )
        return samples
    return _make


@pytest.fixture
def ph_decline_samples(make_samples):
    """12 pH tests drifting linearly from 8.2 to 7.8 over 33 days."""
    values = [8.2 - 0.4 * (3 * i) / 33 for i in range(12)]
    return make_samples(values, parameter="PH", step_days=3.0)


@pytest.fixture
def prediction_store():
    return InMemoryPredictionStore()


@pytest.fixture
def sample_repo():
    return InMemoryWaterSampleRepository()


@pytest.fixture
def orchestrator(prediction_store, sample_repo):
    return ForecastOrchestrator(
        prediction_store=prediction_store,
        forecaster=LinearTrendForecaster(),
        sample_repo=sample_repo,
    )
