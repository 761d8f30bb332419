"""
Base forecaster interface (Adapter).
Defines the contract for trend model implementations.
"""
from abc import ABC, abstractmethod

from aquachem.domain.models import ForecastOutcome, ParameterSeries, RegressionModel


class BaseForecaster(ABC):
    """Base class for forecasting adapters"""

    method_name: str = ""

    @abstractmethod
    def fit(self, series: ParameterSeries) -> RegressionModel:
        """
        Fit a trend model to a parameter series.

        Args:
            series: Time-ordered observations, at least one point

        Returns:
            RegressionModel with slope per day, intercept, R² and point count
        """
        pass

    @abstractmethod
    def project(
        self,
        model: RegressionModel,
        current_value: float,
        days_ahead: int,
    ) -> ForecastOutcome:
        """
        Project a value `days_ahead` days after the latest observation.

        Args:
            model: Fitted trend model
            current_value: Most recent observed value
            days_ahead: Horizon in days, 0 returns the current value

        Returns:
            ForecastOutcome with predicted value, trend label and change
        """
        pass
