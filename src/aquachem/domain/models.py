"""
Domain models and value objects for water chemistry forecasting.
Represents core business concepts independent of any framework or storage.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from aquachem.domain.exceptions import UnknownParameterError


def as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class SafeRange:
    """Healthy (min, max) interval for one chemistry parameter"""
    minimum: float
    maximum: float

    @classmethod
    def unbounded(cls) -> "SafeRange":
        return cls(-math.inf, math.inf)

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum

    def to_dict(self) -> Dict[str, Any]:
        return {"min": self.minimum, "max": self.maximum}


class WaterParameter(str, Enum):
    """Chemistry parameters the engine knows how to forecast"""
    PH = "PH"
    TEMPERATURE = "Temperature"
    AMMONIA = "Ammonia"
    NITRITE = "Nitrite"
    NITRATE = "Nitrate"
    SALINITY = "Salinity"
    ALKALINITY = "Alkalinity"
    CALCIUM = "Calcium"
    MAGNESIUM = "Magnesium"
    PHOSPHATE = "Phosphate"
    GH = "GH"
    KH = "KH"
    TDS = "TDS"

    @classmethod
    def parse(cls, name: "str | WaterParameter") -> "WaterParameter":
        """Resolve a parameter from its name, ignoring case."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise UnknownParameterError(str(name))

    @property
    def unit(self) -> str:
        return _UNITS[self]

    @property
    def default_safe_range(self) -> SafeRange:
        return _DEFAULT_SAFE_RANGES[self]

    def read(self, sample: "Sample") -> Optional[float]:
        """
        Return this parameter's reading from a sample, or None if not measured.
        Reading keys are matched ignoring case, as in `parse`.
        """
        value = sample.readings.get(self.value)
        if value is None:
            key = self.value.lower()
            value = next(
                (v for k, v in sample.readings.items()
                 if v is not None and str(k).strip().lower() == key),
                None,
            )
        if value is None:
            return None
        value = float(value)
        if math.isnan(value):
            return None
        return value


_DEFAULT_SAFE_RANGES: Dict[WaterParameter, SafeRange] = {
    WaterParameter.PH: SafeRange(7.8, 8.4),
    WaterParameter.TEMPERATURE: SafeRange(75, 82),
    WaterParameter.AMMONIA: SafeRange(0, 0.25),
    WaterParameter.NITRITE: SafeRange(0, 0.25),
    WaterParameter.NITRATE: SafeRange(0, 20),
    WaterParameter.SALINITY: SafeRange(1.023, 1.026),
    WaterParameter.ALKALINITY: SafeRange(8, 12),
    WaterParameter.CALCIUM: SafeRange(400, 450),
    WaterParameter.MAGNESIUM: SafeRange(1250, 1350),
    WaterParameter.PHOSPHATE: SafeRange(0, 0.1),
    WaterParameter.GH: SafeRange(4, 8),
    WaterParameter.KH: SafeRange(3, 6),
    WaterParameter.TDS: SafeRange(150, 250),
}

_UNITS: Dict[WaterParameter, str] = {
    WaterParameter.PH: "",
    WaterParameter.TEMPERATURE: "°F",
    WaterParameter.AMMONIA: "ppm",
    WaterParameter.NITRITE: "ppm",
    WaterParameter.NITRATE: "ppm",
    WaterParameter.SALINITY: "SG",
    WaterParameter.ALKALINITY: "dKH",
    WaterParameter.CALCIUM: "ppm",
    WaterParameter.MAGNESIUM: "ppm",
    WaterParameter.PHOSPHATE: "ppm",
    WaterParameter.GH: "dGH",
    WaterParameter.KH: "dKH",
    WaterParameter.TDS: "ppm",
}


def default_safe_ranges() -> Dict[WaterParameter, SafeRange]:
    """Copy of the built-in safe range table."""
    return dict(_DEFAULT_SAFE_RANGES)


COMMON_PARAMETERS: Tuple[WaterParameter, ...] = (
    WaterParameter.PH,
    WaterParameter.TEMPERATURE,
    WaterParameter.AMMONIA,
    WaterParameter.NITRITE,
    WaterParameter.NITRATE,
)

MARINE_PARAMETERS: Tuple[WaterParameter, ...] = (
    WaterParameter.SALINITY,
    WaterParameter.ALKALINITY,
    WaterParameter.CALCIUM,
    WaterParameter.MAGNESIUM,
    WaterParameter.PHOSPHATE,
)

FRESHWATER_PARAMETERS: Tuple[WaterParameter, ...] = (
    WaterParameter.GH,
    WaterParameter.KH,
    WaterParameter.TDS,
)


class TankCategory(str, Enum):
    """Aquarium type, used only to pick which parameters are relevant"""
    FRESHWATER = "Freshwater"
    SALTWATER = "Saltwater"
    BRACKISH = "Brackish"
    PLANTED = "Planted"
    REEF = "Reef"
    CICHLID = "Cichlid"
    BETTA = "Betta"
    GOLDFISH = "Goldfish"
    SHRIMP = "Shrimp"
    TURTLE = "Turtle"
    OTHER = "Other"

    @property
    def is_marine(self) -> bool:
        return self in (TankCategory.REEF, TankCategory.SALTWATER)

    def relevant_parameters(self) -> List[WaterParameter]:
        parameters = list(COMMON_PARAMETERS)
        if self.is_marine:
            parameters.extend(MARINE_PARAMETERS)
        if self is TankCategory.FRESHWATER:
            parameters.extend(FRESHWATER_PARAMETERS)
        return parameters


class TrendLabel(str, Enum):
    """Direction of a fitted trend"""
    INCREASING = "Increasing"
    DECREASING = "Decreasing"
    STABLE = "Stable"


class AlertLevel(str, Enum):
    """Severity tag combining the warning flag with confidence"""
    DANGER = "danger"
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"

    @classmethod
    def from_forecast(cls, is_warning: bool, confidence: float) -> "AlertLevel":
        if is_warning and confidence >= HIGH_CONFIDENCE:
            return cls.DANGER
        if is_warning and confidence >= MINIMUM_CONFIDENCE:
            return cls.WARNING
        if confidence >= HIGH_CONFIDENCE:
            return cls.SUCCESS
        return cls.INFO


HIGH_CONFIDENCE = 0.7
MINIMUM_CONFIDENCE = 0.5


class AccuracyRating(str, Enum):
    """Qualitative band for the overall average prediction error"""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    NO_DATA = "No Data"


@dataclass(frozen=True)
class Sample:
    """One water test: a timestamp and a sparse set of parameter readings"""
    entity_id: str
    timestamp: datetime
    readings: Mapping[str, Optional[float]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "timestamp", as_utc(self.timestamp))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "timestamp": self.timestamp.isoformat(),
            "readings": dict(self.readings),
        }


@dataclass(frozen=True)
class SeriesPoint:
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class ParameterSeries:
    """Time-ordered, null-free observations of one parameter for one tank"""
    entity_id: str
    parameter: WaterParameter
    points: Tuple[SeriesPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    @property
    def last_value(self) -> float:
        return self.points[-1].value


@dataclass(frozen=True)
class RegressionModel:
    """Least-squares trend line fitted to a series"""
    slope: float
    intercept: float
    r_squared: float
    sample_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slope": self.slope,
            "intercept": self.intercept,
            "r_squared": self.r_squared,
            "sample_count": self.sample_count,
        }


@dataclass(frozen=True)
class ForecastOutcome:
    """Projected value for a horizon, relative to the current observation"""
    predicted_value: float
    trend: TrendLabel
    change: float
    change_percentage: float


@dataclass(frozen=True)
class SafetyAssessment:
    is_warning: bool
    message: str


@dataclass(frozen=True)
class PredictionRecord:
    """
    A forecast as it was made. Appended to the prediction store once and
    judged later against actual measurements; never edited.
    """
    entity_id: str
    parameter: WaterParameter
    current_value: float
    predicted_value: float
    made_at: datetime
    target_date: datetime
    days_ahead: int
    confidence: float
    trend: TrendLabel
    rate_of_change: float
    is_warning: bool
    message: str
    method: str
    sample_count: int

    @property
    def change(self) -> float:
        return self.predicted_value - self.current_value

    @property
    def change_percentage(self) -> float:
        if self.current_value == 0:
            return 0.0
        return self.change / self.current_value * 100

    @property
    def alert_level(self) -> AlertLevel:
        return AlertLevel.from_forecast(self.is_warning, self.confidence)

    def is_matured(self, now: datetime) -> bool:
        return self.target_date <= now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "parameter": self.parameter.value,
            "current_value": self.current_value,
            "predicted_value": self.predicted_value,
            "change": self.change,
            "change_percentage": self.change_percentage,
            "made_at": self.made_at.isoformat(),
            "target_date": self.target_date.isoformat(),
            "days_ahead": self.days_ahead,
            "confidence": self.confidence,
            "trend": self.trend.value,
            "rate_of_change": self.rate_of_change,
            "is_warning": self.is_warning,
            "message": self.message,
            "method": self.method,
            "sample_count": self.sample_count,
            "alert_level": self.alert_level.value,
        }


@dataclass
class ForecastSummary:
    """Per-tank aggregate of all parameter forecasts from one run"""
    entity_id: str
    generated_at: datetime
    predictions: List[PredictionRecord] = field(default_factory=list)
    warning_count: int = 0
    average_confidence: float = 0.0
    overall_forecast: str = ""
    has_sufficient_data: bool = True
    insufficient_data_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "generated_at": self.generated_at.isoformat(),
            "predictions": [p.to_dict() for p in self.predictions],
            "warning_count": self.warning_count,
            "average_confidence": self.average_confidence,
            "overall_forecast": self.overall_forecast,
            "has_sufficient_data": self.has_sufficient_data,
            "insufficient_data_message": self.insufficient_data_message,
        }


@dataclass(frozen=True)
class PredictionEvaluation:
    """A matured prediction paired with the measurement that judged it"""
    record: PredictionRecord
    actual_value: float
    actual_timestamp: datetime
    percent_error: float
    within_tolerance: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameter": self.record.parameter.value,
            "predicted_value": self.record.predicted_value,
            "target_date": self.record.target_date.isoformat(),
            "actual_value": self.actual_value,
            "actual_timestamp": self.actual_timestamp.isoformat(),
            "percent_error": self.percent_error,
            "within_tolerance": self.within_tolerance,
        }


@dataclass
class AccuracyReport:
    """Retrospective error statistics; recomputed on demand, never stored"""
    entity_id: str
    predictions_total: int = 0
    predictions_evaluated: int = 0
    average_error_percentage: float = 0.0
    fraction_within_10_percent: float = 0.0
    error_by_parameter: Dict[str, float] = field(default_factory=dict)
    rating: AccuracyRating = AccuracyRating.NO_DATA
    rating_description: str = ""
    evaluations: List[PredictionEvaluation] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return self.predictions_evaluated > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "predictions_total": self.predictions_total,
            "predictions_evaluated": self.predictions_evaluated,
            "average_error_percentage": self.average_error_percentage,
            "fraction_within_10_percent": self.fraction_within_10_percent,
            "error_by_parameter": dict(self.error_by_parameter),
            "rating": self.rating.value,
            "rating_description": self.rating_description,
            "evaluations": [e.to_dict() for e in self.evaluations],
        }
