"""
Forecasting service: runs the per-parameter pipeline
(extract -> fit -> project -> classify -> record) for a tank and
scores past forecasts against later water tests.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Union

from aquachem.adapters.base_forecaster import BaseForecaster
from aquachem.config import Settings
from aquachem.domain.accuracy import AccuracyValidator
from aquachem.domain.exceptions import InvalidHorizonError
from aquachem.domain.models import (
    HIGH_CONFIDENCE,
    AccuracyReport,
    ForecastSummary,
    PredictionRecord,
    Sample,
    TankCategory,
    WaterParameter,
)
from aquachem.domain.repositories import PredictionStore, WaterSampleRepository
from aquachem.domain.safety import SafetyClassifier
from aquachem.domain.series import SeriesExtractor, count_samples_in_window

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA_FORECAST = "Insufficient Data"


def overall_forecast(warning_count: int, average_confidence: float) -> str:
    if warning_count == 0 and average_confidence >= HIGH_CONFIDENCE:
        return "Excellent"
    if warning_count == 0:
        return "Good"
    if warning_count <= 2:
        return "Fair"
    return "Concerning"


class ForecastOrchestrator:
    """
    Entry point for water chemistry predictions.

    The numeric pipeline is pure; the only side effect of a forecast is the
    append to the prediction store, and failures there propagate so that a
    prediction is never silently lost from the accuracy feedback loop.
    """

    def __init__(
        self,
        prediction_store: PredictionStore,
        forecaster: BaseForecaster,
        classifier: Optional[SafetyClassifier] = None,
        validator: Optional[AccuracyValidator] = None,
        sample_repo: Optional[WaterSampleRepository] = None,
        extractor: Optional[SeriesExtractor] = None,
        settings: Optional[Settings] = None,
    ):
        self.prediction_store = prediction_store
        self.forecaster = forecaster
        self.settings = settings or Settings()
        self.classifier = classifier or SafetyClassifier()
        self.validator = validator or AccuracyValidator(
            match_window_days=self.settings.match_window_days
        )
        self.sample_repo = sample_repo
        self.extractor = extractor or SeriesExtractor()

    def _cutoff(self, now: datetime) -> datetime:
        return now - timedelta(days=self.settings.max_history_days)

    def _check_horizon(self, days_ahead: int) -> None:
        # 0 is allowed and projects the current value
        if not 0 <= days_ahead <= self.settings.max_days_ahead:
            raise InvalidHorizonError(days_ahead, self.settings.max_days_ahead, minimum=0)

    async def forecast(
        self,
        entity_id: str,
        parameter: Union[WaterParameter, str],
        samples: Sequence[Sample],
        days_ahead: int,
        now: Optional[datetime] = None,
    ) -> Optional[PredictionRecord]:
        """
        Forecast one parameter and append the result to the prediction store.

        Returns:
            The stored PredictionRecord, or None when the parameter has fewer
            than the minimum number of observations in the lookback window

        Raises:
            UnknownParameterError: parameter name is not recognised
            InvalidHorizonError: days_ahead outside 0..max_days_ahead
            PredictionStoreError: the record could not be appended
        """
        self._check_horizon(days_ahead)
        parameter = WaterParameter.parse(parameter)
        now = now or datetime.now(timezone.utc)

        series = self.extractor.extract(samples, entity_id, parameter, self._cutoff(now))
        if len(series) < self.settings.minimum_data_points:
            logger.debug(
                f"Insufficient data for {parameter.value} in tank {entity_id}: "
                f"{len(series)} values, need {self.settings.minimum_data_points}"
            )
            return None

        model = self.forecaster.fit(series)
        current_value = series.last_value
        outcome = self.forecaster.project(model, current_value, days_ahead)
        assessment = self.classifier.classify(parameter, outcome.predicted_value, outcome.trend)

        record = PredictionRecord(
            entity_id=entity_id,
            parameter=parameter,
            current_value=current_value,
            predicted_value=outcome.predicted_value,
            made_at=now,
            target_date=now + timedelta(days=days_ahead),
            days_ahead=days_ahead,
            confidence=model.r_squared,
            trend=outcome.trend,
            rate_of_change=model.slope,
            is_warning=assessment.is_warning,
            message=assessment.message,
            method=self.forecaster.method_name,
            sample_count=model.sample_count,
        )
        await self.prediction_store.append(record)

        logger.debug(
            f"Prediction generated: {parameter.value} = {current_value} -> "
            f"{outcome.predicted_value:.4f} ({outcome.trend.value}, "
            f"{int(model.r_squared * 100)}% confidence)"
        )
        return record

    async def forecast_all(
        self,
        entity_id: str,
        category: Union[TankCategory, str],
        samples: Sequence[Sample],
        days_ahead: int,
        now: Optional[datetime] = None,
    ) -> ForecastSummary:
        """Forecast every parameter relevant to the tank category"""
        self._check_horizon(days_ahead)
        category = TankCategory(category)
        now = now or datetime.now(timezone.utc)
        logger.info(
            f"Generating water chemistry predictions for tank {entity_id}, "
            f"{days_ahead} days ahead"
        )

        summary = ForecastSummary(entity_id=entity_id, generated_at=now)

        available = count_samples_in_window(samples, entity_id, self._cutoff(now))
        if available < self.settings.minimum_data_points:
            logger.info(
                f"Insufficient data for tank {entity_id}. Found {available} tests, "
                f"need {self.settings.minimum_data_points}"
            )
            summary.has_sufficient_data = False
            summary.overall_forecast = INSUFFICIENT_DATA_FORECAST
            summary.insufficient_data_message = (
                f"Need at least {self.settings.minimum_data_points} water tests to "
                f"generate predictions. You currently have {available}. "
                "Keep testing regularly!"
            )
            return summary

        parameters = category.relevant_parameters()
        logger.info(f"Analyzing {len(parameters)} parameters for tank {entity_id}")

        for parameter in parameters:
            record = await self.forecast(entity_id, parameter, samples, days_ahead, now=now)
            if record is None:
                continue
            summary.predictions.append(record)
            if record.is_warning:
                summary.warning_count += 1

        if summary.predictions:
            summary.average_confidence = sum(
                p.confidence for p in summary.predictions
            ) / len(summary.predictions)
            summary.overall_forecast = overall_forecast(
                summary.warning_count, summary.average_confidence
            )
        else:
            summary.overall_forecast = INSUFFICIENT_DATA_FORECAST

        logger.info(
            f"Generated {len(summary.predictions)} predictions for tank {entity_id}. "
            f"Overall forecast: {summary.overall_forecast}"
        )
        return summary

    def validate_accuracy(
        self,
        entity_id: str,
        past_predictions: Sequence[PredictionRecord],
        fresh_samples: Sequence[Sample],
        now: Optional[datetime] = None,
    ) -> AccuracyReport:
        """Score matured predictions against actual water tests"""
        logger.info(f"Validating prediction accuracy for tank {entity_id}")
        return self.validator.validate(entity_id, past_predictions, fresh_samples, now=now)

    # Repository-backed variants used by the API layer

    def _require_sample_repo(self) -> WaterSampleRepository:
        if self.sample_repo is None:
            raise RuntimeError("ForecastOrchestrator was built without a sample repository")
        return self.sample_repo

    async def generate_for_tank(
        self,
        entity_id: str,
        category: Union[TankCategory, str],
        days_ahead: int,
        now: Optional[datetime] = None,
    ) -> ForecastSummary:
        now = now or datetime.now(timezone.utc)
        samples = await self._require_sample_repo().fetch_samples(
            entity_id, since=self._cutoff(now)
        )
        return await self.forecast_all(entity_id, category, samples, days_ahead, now=now)

    async def generate_for_parameter(
        self,
        entity_id: str,
        parameter: Union[WaterParameter, str],
        days_ahead: int,
        now: Optional[datetime] = None,
    ) -> Optional[PredictionRecord]:
        parameter = WaterParameter.parse(parameter)
        now = now or datetime.now(timezone.utc)
        samples = await self._require_sample_repo().fetch_samples(
            entity_id, since=self._cutoff(now)
        )
        return await self.forecast(entity_id, parameter, samples, days_ahead, now=now)

    async def evaluate_accuracy(
        self,
        entity_id: str,
        now: Optional[datetime] = None,
    ) -> AccuracyReport:
        now = now or datetime.now(timezone.utc)
        records = await self.prediction_store.query(entity_id)
        matured = [r for r in records if r.is_matured(now)]

        samples: List[Sample] = []
        if matured:
            earliest = min(r.target_date for r in matured)
            samples = await self._require_sample_repo().fetch_samples(
                entity_id,
                since=earliest - timedelta(days=self.settings.match_window_days),
            )
        return self.validate_accuracy(entity_id, matured, samples, now=now)

    async def prediction_history(
        self,
        entity_id: str,
        limit: Optional[int] = None,
    ) -> List[PredictionRecord]:
        return await self.prediction_store.query(
            entity_id, limit=limit or self.settings.history_limit
        )
