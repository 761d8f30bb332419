"""
HTTP endpoints for water chemistry predictions.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from aquachem.api.dependencies import get_service
from aquachem.api.schemas import (
    AccuracyReportResponse,
    ForecastSummaryResponse,
    HealthResponse,
    PredictionResponse,
)
from aquachem.domain.exceptions import (
    InvalidHorizonError,
    PredictionStoreError,
    UnknownParameterError,
)
from aquachem.domain.models import TankCategory
from aquachem.domain.service import ForecastOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


def _days_ahead(service: ForecastOrchestrator, days_ahead: Optional[int]) -> int:
    """Requests must look at least one day ahead"""
    if days_ahead is None:
        return service.settings.default_days_ahead
    if not 1 <= days_ahead <= service.settings.max_days_ahead:
        raise InvalidHorizonError(days_ahead, service.settings.max_days_ahead)
    return days_ahead


def _store_unavailable(e: PredictionStoreError) -> HTTPException:
    logger.error(f"Prediction store unavailable: {e.message}")
    return HTTPException(status_code=503, detail=e.message)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get("/tanks/{tank_id}/predictions", response_model=ForecastSummaryResponse)
async def get_tank_predictions(
    tank_id: str,
    category: TankCategory = Query(TankCategory.OTHER),
    days_ahead: Optional[int] = Query(None),
    service: ForecastOrchestrator = Depends(get_service),
) -> ForecastSummaryResponse:
    try:
        summary = await service.generate_for_tank(
            tank_id, category, _days_ahead(service, days_ahead)
        )
    except InvalidHorizonError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except PredictionStoreError as e:
        raise _store_unavailable(e)
    return ForecastSummaryResponse.from_summary(summary)


@router.get("/tanks/{tank_id}/predictions/accuracy", response_model=AccuracyReportResponse)
async def get_prediction_accuracy(
    tank_id: str,
    service: ForecastOrchestrator = Depends(get_service),
) -> AccuracyReportResponse:
    try:
        report = await service.evaluate_accuracy(tank_id)
    except PredictionStoreError as e:
        raise _store_unavailable(e)
    return AccuracyReportResponse.from_report(report)


@router.get("/tanks/{tank_id}/predictions/history", response_model=List[PredictionResponse])
async def get_prediction_history(
    tank_id: str,
    limit: Optional[int] = Query(None, ge=1, le=500),
    service: ForecastOrchestrator = Depends(get_service),
) -> List[PredictionResponse]:
    try:
        records = await service.prediction_history(tank_id, limit=limit)
    except PredictionStoreError as e:
        raise _store_unavailable(e)
    return [PredictionResponse.from_record(r) for r in records]


@router.get("/tanks/{tank_id}/predictions/{parameter}", response_model=PredictionResponse)
async def get_parameter_prediction(
    tank_id: str,
    parameter: str,
    days_ahead: Optional[int] = Query(None),
    service: ForecastOrchestrator = Depends(get_service),
) -> PredictionResponse:
    try:
        record = await service.generate_for_parameter(
            tank_id, parameter, _days_ahead(service, days_ahead)
        )
    except (UnknownParameterError, InvalidHorizonError) as e:
        logger.warning(f"Rejected prediction request for tank {tank_id}: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)
    except PredictionStoreError as e:
        raise _store_unavailable(e)

    if record is None:
        raise HTTPException(
            status_code=404,
            detail=f"Insufficient data to predict {parameter}. Record more water tests!",
        )
    return PredictionResponse.from_record(record)
