"""
Retrospective accuracy scoring of past forecasts.

Each matured prediction (target date already passed) is paired with the
water test closest to its target date, within a tolerance window, and
scored by absolute percentage error. Predictions without a nearby test are
left out of the statistics rather than counted as wrong.
"""
import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from sklearn.metrics import mean_absolute_percentage_error

from aquachem.domain.models import (
    AccuracyRating,
    AccuracyReport,
    PredictionEvaluation,
    PredictionRecord,
    Sample,
)

logger = logging.getLogger(__name__)

ACCURATE_WITHIN_PERCENT = 10.0

_RATING_BANDS = (
    (5.0, AccuracyRating.EXCELLENT, "Excellent - Predictions are highly accurate"),
    (10.0, AccuracyRating.GOOD, "Good - Predictions are reliable"),
    (15.0, AccuracyRating.FAIR, "Fair - Predictions show trends but may not be precise"),
)
_POOR_DESCRIPTION = "Poor - More data needed for accurate predictions"

NO_PREDICTIONS_DESCRIPTION = "No data available"
NO_MATCHES_DESCRIPTION = "No comparable data available"


def rate_average_error(average_error: float) -> AccuracyRating:
    for upper, rating, _ in _RATING_BANDS:
        if average_error < upper:
            return rating
    return AccuracyRating.POOR


def _describe(rating: AccuracyRating) -> str:
    for _, band, description in _RATING_BANDS:
        if band is rating:
            return description
    return _POOR_DESCRIPTION


class AccuracyValidator:
    """
    Args:
        match_window_days: How far (±days) a test may be from the target date
        tolerance_percent: Error at or below which a prediction counts as accurate
    """

    def __init__(
        self,
        match_window_days: int = 1,
        tolerance_percent: float = ACCURATE_WITHIN_PERCENT,
    ):
        self._window = timedelta(days=match_window_days)
        self.tolerance_percent = tolerance_percent

    def validate(
        self,
        entity_id: str,
        predictions: Iterable[PredictionRecord],
        samples: Sequence[Sample],
        now: Optional[datetime] = None,
    ) -> AccuracyReport:
        now = now or datetime.now(timezone.utc)
        report = AccuracyReport(entity_id=entity_id)

        matured = [
            p for p in predictions
            if p.entity_id == entity_id and p.is_matured(now)
        ]
        report.predictions_total = len(matured)

        if not matured:
            report.rating_description = NO_PREDICTIONS_DESCRIPTION
            logger.info(f"No matured predictions to validate for tank {entity_id}")
            return report

        tank_samples = [s for s in samples if s.entity_id == entity_id]
        for record in matured:
            evaluation = self._evaluate(record, tank_samples)
            if evaluation is not None:
                report.evaluations.append(evaluation)

        report.predictions_evaluated = len(report.evaluations)
        if not report.evaluations:
            report.rating_description = NO_MATCHES_DESCRIPTION
            logger.info(
                f"None of {len(matured)} matured predictions for tank {entity_id} "
                "had a matching water test"
            )
            return report

        report.average_error_percentage = self._average_error(report.evaluations)
        accurate = sum(1 for e in report.evaluations if e.within_tolerance)
        report.fraction_within_10_percent = accurate / len(report.evaluations)

        by_parameter: Dict[str, List[PredictionEvaluation]] = defaultdict(list)
        for evaluation in report.evaluations:
            by_parameter[evaluation.record.parameter.value].append(evaluation)
        report.error_by_parameter = {
            name: self._average_error(group) for name, group in by_parameter.items()
        }

        report.rating = rate_average_error(report.average_error_percentage)
        report.rating_description = _describe(report.rating)

        logger.info(
            f"Validation complete for tank {entity_id}: {report.predictions_evaluated}/"
            f"{report.predictions_total} predictions, "
            f"{report.average_error_percentage:.2f}% average error"
        )
        return report

    def _evaluate(
        self,
        record: PredictionRecord,
        samples: Sequence[Sample],
    ) -> Optional[PredictionEvaluation]:
        match = self._closest_sample(record.target_date, samples)
        if match is None:
            return None

        actual = record.parameter.read(match)
        if actual is None or actual == 0:
            return None

        percent_error = abs(record.predicted_value - actual) / abs(actual) * 100
        return PredictionEvaluation(
            record=record,
            actual_value=actual,
            actual_timestamp=match.timestamp,
            percent_error=percent_error,
            within_tolerance=percent_error <= self.tolerance_percent,
        )

    def _closest_sample(
        self,
        target: datetime,
        samples: Sequence[Sample],
    ) -> Optional[Sample]:
        candidates = [
            s for s in samples
            if abs(s.timestamp - target) <= self._window
        ]
        if not candidates:
            return None
        # Earlier test wins a tie
        return min(candidates, key=lambda s: (abs(s.timestamp - target), s.timestamp))

    @staticmethod
    def _average_error(evaluations: Sequence[PredictionEvaluation]) -> float:
        # Equals the mean of percent_error: both divide by |actual|, and zero
        # actuals never reach this point
        actual = [e.actual_value for e in evaluations]
        predicted = [e.record.predicted_value for e in evaluations]
        return float(mean_absolute_percentage_error(actual, predicted) * 100)
