"""
Safety classification of forecast values against per-parameter safe ranges.
"""
from types import MappingProxyType
from typing import Mapping, Optional

from aquachem.domain.models import (
    AlertLevel,
    SafeRange,
    SafetyAssessment,
    TrendLabel,
    WaterParameter,
    default_safe_ranges,
)


class SafetyClassifier:
    """
    Decides whether a projected value leaves its safe range.

    The range table is injected so it can be overridden per tank category;
    parameters missing from it are never flagged. Confidence plays no part
    in the warning flag, only in the alert level.
    """

    def __init__(self, safe_ranges: Optional[Mapping[WaterParameter, SafeRange]] = None):
        table = default_safe_ranges() if safe_ranges is None else dict(safe_ranges)
        self._ranges = MappingProxyType(table)

    @property
    def safe_ranges(self) -> Mapping[WaterParameter, SafeRange]:
        return self._ranges

    def range_for(self, parameter: WaterParameter) -> SafeRange:
        return self._ranges.get(parameter, SafeRange.unbounded())

    def is_warning(self, parameter: WaterParameter, predicted_value: float) -> bool:
        return not self.range_for(parameter).contains(predicted_value)

    def classify(
        self,
        parameter: WaterParameter,
        predicted_value: float,
        trend: TrendLabel,
    ) -> SafetyAssessment:
        safe_range = self.range_for(parameter)
        name = parameter.value

        if safe_range.contains(predicted_value):
            if trend is TrendLabel.STABLE:
                message = f"{name} is stable and within optimal range."
            else:
                message = (
                    f"{name} is {trend.value.lower()} but expected to remain within safe range."
                )
            return SafetyAssessment(is_warning=False, message=message)

        # Plain text; icons are left to the client
        if predicted_value < safe_range.minimum:
            message = (
                f"{name} predicted to drop below safe range ({safe_range.minimum:g}). "
                "Consider corrective action."
            )
        else:
            message = (
                f"{name} predicted to exceed safe range ({safe_range.maximum:g}). "
                "Consider corrective action."
            )
        return SafetyAssessment(is_warning=True, message=message)

    @staticmethod
    def alert_level(is_warning: bool, confidence: float) -> AlertLevel:
        return AlertLevel.from_forecast(is_warning, confidence)
