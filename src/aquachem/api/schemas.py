"""
FastAPI schemas for request/response validation.
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from aquachem.domain.models import AccuracyReport, ForecastSummary, PredictionRecord


class PredictionResponse(BaseModel):
    """Single parameter forecast, rounded for display"""
    parameter: str
    current_value: float
    predicted_value: float
    change: float
    change_percentage: float
    trend: str
    made_at: datetime
    target_date: datetime
    days_ahead: int
    confidence: float = Field(..., ge=0, le=1)
    is_warning: bool
    message: str
    method: str
    sample_count: int
    rate_of_change: float
    alert_level: str

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "parameter": "PH",
            "current_value": 7.8,
            "predicted_value": 7.72,
            "change": -0.08,
            "change_percentage": -1.1,
            "trend": "Decreasing",
            "made_at": "2026-03-01T12:00:00Z",
            "target_date": "2026-03-08T12:00:00Z",
            "days_ahead": 7,
            "confidence": 1.0,
            "is_warning": True,
            "message": "PH predicted to drop below safe range (7.8). Consider corrective action.",
            "method": "Linear Regression",
            "sample_count": 12,
            "rate_of_change": -0.0121,
            "alert_level": "danger",
        }
    })

    @classmethod
    def from_record(cls, record: PredictionRecord) -> "PredictionResponse":
        return cls(
            parameter=record.parameter.value,
            current_value=round(record.current_value, 2),
            predicted_value=round(record.predicted_value, 2),
            change=round(record.change, 2),
            change_percentage=round(record.change_percentage, 1),
            trend=record.trend.value,
            made_at=record.made_at,
            target_date=record.target_date,
            days_ahead=record.days_ahead,
            confidence=round(record.confidence, 2),
            is_warning=record.is_warning,
            message=record.message,
            method=record.method,
            sample_count=record.sample_count,
            rate_of_change=round(record.rate_of_change, 4),
            alert_level=record.alert_level.value,
        )


class ForecastSummaryResponse(BaseModel):
    """All parameter forecasts for a tank"""
    tank_id: str
    generated_at: datetime
    predictions: List[PredictionResponse]
    overall_forecast: str
    warning_count: int
    average_confidence: float = Field(..., description="Mean R² as a percentage")
    has_sufficient_data: bool
    insufficient_data_message: Optional[str] = None

    @classmethod
    def from_summary(cls, summary: ForecastSummary) -> "ForecastSummaryResponse":
        return cls(
            tank_id=summary.entity_id,
            generated_at=summary.generated_at,
            predictions=[PredictionResponse.from_record(p) for p in summary.predictions],
            overall_forecast=summary.overall_forecast,
            warning_count=summary.warning_count,
            average_confidence=round(summary.average_confidence * 100, 1),
            has_sufficient_data=summary.has_sufficient_data,
            insufficient_data_message=summary.insufficient_data_message,
        )


class AccuracyReportResponse(BaseModel):
    """How well past forecasts matched later water tests"""
    tank_id: str
    predictions_total: int
    predictions_evaluated: int
    average_error_percentage: float
    accuracy_within_10_percent: float = Field(
        ..., description="Share of evaluated predictions within 10% error, as a percentage"
    )
    accuracy_by_parameter: Dict[str, float]
    rating: str
    overall_rating: str

    @classmethod
    def from_report(cls, report: AccuracyReport) -> "AccuracyReportResponse":
        return cls(
            tank_id=report.entity_id,
            predictions_total=report.predictions_total,
            predictions_evaluated=report.predictions_evaluated,
            average_error_percentage=round(report.average_error_percentage, 2),
            accuracy_within_10_percent=round(report.fraction_within_10_percent * 100, 1),
            accuracy_by_parameter={
                name: round(error, 2) for name, error in report.error_by_parameter.items()
            },
            rating=report.rating.value,
            overall_rating=report.rating_description,
        )


class HealthResponse(BaseModel):
    status: str
