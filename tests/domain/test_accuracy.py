"""
Tests for retrospective prediction accuracy scoring.
"""
from datetime import timedelta

import pytest

from aquachem.domain.accuracy import (
    NO_MATCHES_DESCRIPTION,
    NO_PREDICTIONS_DESCRIPTION,
    AccuracyValidator,
    rate_average_error,
)
from aquachem.domain.models import (
    AccuracyRating,
    PredictionRecord,
    Sample,
    TrendLabel,
    WaterParameter,
)


@pytest.fixture
def make_record(now):
    def _make(predicted, parameter=WaterParameter.PH, target_offset_days=-1,
              entity_id="tank-1", days_ahead=7):
        target = now + timedelta(days=target_offset_days)
        return PredictionRecord(
            entity_id=entity_id,
            parameter=parameter,
            current_value=predicted,
            predicted_value=predicted,
            made_at=target - timedelta(days=days_ahead),
            target_date=target,
            days_ahead=days_ahead,
            confidence=0.8,
            trend=TrendLabel.STABLE,
            rate_of_change=0.0,
            is_warning=False,
            message="",
            method="Linear Regression",
            sample_count=12,
        )
    return _make


@pytest.fixture
def validator():
    return AccuracyValidator()


class TestAccuracyValidator:

    def test_single_close_prediction(self, validator, make_record, now):
        record = make_record(8.0)
        sample = Sample("tank-1", record.target_date + timedelta(hours=6), {"PH": 7.9})

        report = validator.validate("tank-1", [record], [sample], now=now)

        assert report.predictions_total == 1
        assert report.predictions_evaluated == 1
        evaluation = report.evaluations[0]
        assert evaluation.percent_error == pytest.approx(1.2658, abs=1e-3)
        assert evaluation.within_tolerance
        assert evaluation.actual_value == 7.9
        assert report.average_error_percentage == pytest.approx(1.2658, abs=1e-3)
        assert report.fraction_within_10_percent == 1.0
        assert report.rating is AccuracyRating.EXCELLENT
        assert report.rating_description == "Excellent - Predictions are highly accurate"

    def test_no_matured_predictions(self, validator, make_record, now):
        future = make_record(8.0, target_offset_days=3)

        report = validator.validate("tank-1", [future], [], now=now)

        assert report.predictions_total == 0
        assert report.predictions_evaluated == 0
        assert report.rating is AccuracyRating.NO_DATA
        assert report.rating_description == NO_PREDICTIONS_DESCRIPTION
        assert not report.has_data
        assert report.average_error_percentage == 0.0

    def test_empty_input(self, validator, now):
        report = validator.validate("tank-1", [], [], now=now)

        assert report.predictions_evaluated == 0
        assert report.rating is AccuracyRating.NO_DATA

    def test_unmatched_prediction_is_excluded_not_penalized(self, validator, make_record, now):
        matched = make_record(8.0, target_offset_days=-1)
        unmatched = make_record(100.0, target_offset_days=-10)
        sample = Sample("tank-1", matched.target_date, {"PH": 8.0})

        report = validator.validate("tank-1", [matched, unmatched], [sample], now=now)

        assert report.predictions_total == 2
        assert report.predictions_evaluated == 1
        assert report.average_error_percentage == 0.0

    def test_no_matches_reports_no_comparable_data(self, validator, make_record, now):
        record = make_record(8.0)
        far_sample = Sample("tank-1", record.target_date + timedelta(days=2), {"PH": 8.0})

        report = validator.validate("tank-1", [record], [far_sample], now=now)

        assert report.predictions_total == 1
        assert report.predictions_evaluated == 0
        assert report.rating is AccuracyRating.NO_DATA
        assert report.rating_description == NO_MATCHES_DESCRIPTION

    def test_window_edge_is_inclusive(self, validator, make_record, now):
        record = make_record(8.0, target_offset_days=-2)
        sample = Sample("tank-1", record.target_date + timedelta(days=1), {"PH": 8.0})

        report = validator.validate("tank-1", [record], [sample], now=now)

        assert report.predictions_evaluated == 1

    def test_closest_sample_wins(self, validator, make_record, now):
        record = make_record(8.0, target_offset_days=-2)
        samples = [
            Sample("tank-1", record.target_date - timedelta(hours=20), {"PH": 6.0}),
            Sample("tank-1", record.target_date + timedelta(hours=2), {"PH": 8.0}),
            Sample("tank-1", record.target_date + timedelta(hours=12), {"PH": 10.0}),
        ]

        report = validator.validate("tank-1", [record], samples, now=now)

        assert report.evaluations[0].actual_value == 8.0

    def test_tie_goes_to_earlier_sample(self, validator, make_record, now):
        record = make_record(8.0, target_offset_days=-2)
        samples = [
            Sample("tank-1", record.target_date + timedelta(hours=3), {"PH": 9.0}),
            Sample("tank-1", record.target_date - timedelta(hours=3), {"PH": 7.0}),
        ]

        report = validator.validate("tank-1", [record], samples, now=now)

        assert report.evaluations[0].actual_value == 7.0

    def test_closest_sample_without_parameter_excludes_prediction(self, validator, make_record, now):
        record = make_record(8.0)
        samples = [
            Sample("tank-1", record.target_date, {"Nitrate": 5.0}),
            Sample("tank-1", record.target_date + timedelta(hours=10), {"PH": 8.0}),
        ]

        report = validator.validate("tank-1", [record], samples, now=now)

        assert report.predictions_evaluated == 0

    def test_zero_actual_value_is_excluded(self, validator, make_record, now):
        record = make_record(0.1, parameter=WaterParameter.AMMONIA)
        sample = Sample("tank-1", record.target_date, {"Ammonia": 0.0})

        report = validator.validate("tank-1", [record], [sample], now=now)

        assert report.predictions_total == 1
        assert report.predictions_evaluated == 0

    def test_other_tanks_are_ignored(self, validator, make_record, now):
        mine = make_record(8.0)
        theirs = make_record(8.0, entity_id="tank-2")
        samples = [
            Sample("tank-2", mine.target_date, {"PH": 8.0}),
        ]

        report = validator.validate("tank-1", [mine, theirs], samples, now=now)

        assert report.predictions_total == 1
        assert report.predictions_evaluated == 0

    def test_aggregates_per_parameter(self, validator, make_record, now):
        records = [
            make_record(8.0, WaterParameter.PH, target_offset_days=-1),
            make_record(8.4, WaterParameter.PH, target_offset_days=-4),
            make_record(24.0, WaterParameter.NITRATE, target_offset_days=-1),
        ]
        samples = [
            Sample("tank-1", now - timedelta(days=1), {"PH": 8.0, "Nitrate": 20.0}),
            Sample("tank-1", now - timedelta(days=4), {"PH": 8.0}),
        ]

        report = validator.validate("tank-1", records, samples, now=now)

        assert report.predictions_evaluated == 3
        assert report.error_by_parameter["PH"] == pytest.approx(2.5)
        assert report.error_by_parameter["Nitrate"] == pytest.approx(20.0)
        assert report.average_error_percentage == pytest.approx(25.0 / 3)
        assert report.fraction_within_10_percent == pytest.approx(2 / 3)
        assert report.rating is AccuracyRating.GOOD

    def test_rating_uses_overall_average_only(self, validator, make_record, now):
        records = [
            make_record(8.0, WaterParameter.PH, target_offset_days=-1),
            make_record(13.0, WaterParameter.NITRATE, target_offset_days=-1),
        ]
        samples = [Sample("tank-1", now - timedelta(days=1), {"PH": 8.0, "Nitrate": 10.0})]

        report = validator.validate("tank-1", records, samples, now=now)

        assert report.error_by_parameter["Nitrate"] == pytest.approx(30.0)
        assert report.average_error_percentage == pytest.approx(15.0)
        assert report.rating is AccuracyRating.POOR

    def test_aggregate_matches_per_prediction_errors(self, validator, make_record, now):
        records = [
            make_record(-2.2, WaterParameter.TEMPERATURE, target_offset_days=-1),
            make_record(8.4, WaterParameter.PH, target_offset_days=-1),
        ]
        samples = [Sample("tank-1", now - timedelta(days=1), {"Temperature": -2.0, "PH": 8.0})]

        report = validator.validate("tank-1", records, samples, now=now)

        errors = [e.percent_error for e in report.evaluations]
        assert errors == pytest.approx([10.0, 5.0])
        assert report.average_error_percentage == pytest.approx(sum(errors) / len(errors))
        assert report.error_by_parameter["Temperature"] == pytest.approx(10.0)
        assert report.fraction_within_10_percent == 1.0

    def test_naive_sample_timestamps_are_matched(self, validator, make_record, now):
        record = make_record(8.0)
        sample = Sample("tank-1", record.target_date.replace(tzinfo=None), {"PH": 8.0})

        report = validator.validate("tank-1", [record], [sample], now=now)

        assert report.predictions_evaluated == 1

    def test_custom_tolerance(self, make_record, now):
        validator = AccuracyValidator(tolerance_percent=1.0)
        record = make_record(8.0)
        sample = Sample("tank-1", record.target_date, {"PH": 7.9})

        report = validator.validate("tank-1", [record], [sample], now=now)

        assert not report.evaluations[0].within_tolerance
        assert report.fraction_within_10_percent == 0.0


@pytest.mark.parametrize("error,expected", [
    (0.0, AccuracyRating.EXCELLENT),
    (4.99, AccuracyRating.EXCELLENT),
    (5.0, AccuracyRating.GOOD),
    (9.99, AccuracyRating.GOOD),
    (10.0, AccuracyRating.FAIR),
    (14.99, AccuracyRating.FAIR),
    (15.0, AccuracyRating.POOR),
    (80.0, AccuracyRating.POOR),
])
def test_rating_bands(error, expected):
    assert rate_average_error(error) is expected
