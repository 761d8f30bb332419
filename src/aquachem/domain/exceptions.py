"""
Domain errors for the water chemistry forecasting engine.

Insufficient data and degenerate fits are normal results, not errors.
Only caller mistakes and storage failures are raised.
"""
from typing import Any, Dict, Optional


class ChemistryForecastError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class UnknownParameterError(ChemistryForecastError, ValueError):
    """Raised when a parameter name is not a known water parameter."""

    def __init__(self, name: str):
        super().__init__(f"Unknown water parameter: {name}", {"parameter": name})
        self.name = name


class InvalidHorizonError(ChemistryForecastError, ValueError):
    """Raised when the forecast horizon is outside the allowed range."""

    def __init__(self, days_ahead: int, maximum: int, minimum: int = 1):
        super().__init__(
            f"Invalid forecast horizon: {days_ahead}. Must be between {minimum} and {maximum}.",
            {"days_ahead": days_ahead, "minimum": minimum, "maximum": maximum},
        )
        self.days_ahead = days_ahead


class PredictionStoreError(ChemistryForecastError):
    """Raised when the prediction or sample store cannot be read or written."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Prediction store {operation} failed: {reason}",
            {"operation": operation},
        )
        self.operation = operation
