"""
Linear trend forecasting adapter.
Ordinary least squares on a single feature (days since first test).
"""
import logging

import numpy as np

from aquachem.adapters.base_forecaster import BaseForecaster
from aquachem.domain.models import (
    ForecastOutcome,
    ParameterSeries,
    RegressionModel,
    TrendLabel,
)

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0
STABLE_THRESHOLD = 0.001


class LinearTrendForecaster(BaseForecaster):
    """
    Straight-line trend adapter.
    Best for: short windows where chemistry drifts monotonically
    (bioload build-up, buffer depletion).
    """

    method_name = "Linear Regression"

    def __init__(self, stable_threshold: float = STABLE_THRESHOLD):
        self.stable_threshold = stable_threshold

    def fit(self, series: ParameterSeries) -> RegressionModel:
        """Fit y = m*x + b with x in fractional days"""
        if not series.points:
            raise ValueError(f"Cannot fit a trend to an empty {series.parameter.value} series")

        start = series.points[0].timestamp
        x = np.array(
            [(p.timestamp - start).total_seconds() / SECONDS_PER_DAY for p in series.points],
            dtype=np.float64,
        )
        y = np.array([p.value for p in series.points], dtype=np.float64)

        x_mean = x.mean()
        # A flat series must give exactly zero deviations, not mean() rounding noise
        y_mean = y[0] if np.all(y == y[0]) else y.mean()
        dx = x - x_mean
        dy = y - y_mean

        denominator = float(np.sum(dx * dx))
        # All tests on the same instant: no time axis to regress on
        slope = float(np.sum(dx * dy)) / denominator if denominator != 0 else 0.0
        intercept = float(y_mean - slope * x_mean)

        ss_total = float(np.sum(dy * dy))
        residuals = y - (slope * x + intercept)
        ss_residual = float(np.sum(residuals * residuals))

        r_squared = 1.0 - ss_residual / ss_total if ss_total != 0 else 0.0
        r_squared = max(0.0, min(1.0, r_squared))

        logger.debug(
            f"Fitted {series.parameter.value} trend: slope={slope:.6f}/day, "
            f"r2={r_squared:.3f}, n={len(series)}"
        )
        return RegressionModel(
            slope=slope,
            intercept=intercept,
            r_squared=r_squared,
            sample_count=len(series),
        )

    def project(
        self,
        model: RegressionModel,
        current_value: float,
        days_ahead: int,
    ) -> ForecastOutcome:
        """Extend the trend from the last observation, not from the fitted line"""
        predicted = model.slope * days_ahead + current_value
        change = predicted - current_value
        change_percentage = change / current_value * 100 if current_value != 0 else 0.0

        return ForecastOutcome(
            predicted_value=predicted,
            trend=self.trend_for(model.slope),
            change=change,
            change_percentage=change_percentage,
        )

    def trend_for(self, slope: float) -> TrendLabel:
        if abs(slope) < self.stable_threshold:
            return TrendLabel.STABLE
        return TrendLabel.INCREASING if slope > 0 else TrendLabel.DECREASING
