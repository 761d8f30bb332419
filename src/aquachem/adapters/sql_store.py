"""
Relational repository adapters (Output Adapters).
Implements persistence for water tests and prediction records.
"""
import json
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from aquachem.domain.exceptions import PredictionStoreError
from aquachem.domain.models import (
    PredictionRecord,
    Sample,
    TrendLabel,
    WaterParameter,
    as_utc,
)
from aquachem.domain.repositories import PredictionStore, WaterSampleRepository

logger = logging.getLogger(__name__)

metadata = MetaData()

water_samples = Table(
    "water_samples",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("entity_id", String(255), nullable=False, index=True),
    Column("timestamp", DateTime(timezone=True), nullable=False, index=True),
    Column("readings", Text, nullable=False),
)

water_chemistry_predictions = Table(
    "water_chemistry_predictions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("entity_id", String(255), nullable=False, index=True),
    Column("parameter_name", String(50), nullable=False),
    Column("current_value", Float, nullable=False),
    Column("predicted_value", Float, nullable=False),
    Column("prediction_date", DateTime(timezone=True), nullable=False, index=True),
    Column("predicted_date", DateTime(timezone=True), nullable=False),
    Column("days_ahead", Integer, nullable=False),
    Column("confidence_score", Float, nullable=False),
    Column("trend", String(20), nullable=False),
    Column("rate_of_change", Float, nullable=False),
    Column("is_warning", Boolean, nullable=False),
    Column("message", String(500)),
    Column("prediction_method", String(100), nullable=False),
    Column("data_points_used", Integer, nullable=False),
)


def create_store_engine(database_url: str) -> Engine:
    """Create an engine and make sure the tables exist"""
    try:
        engine = create_engine(database_url)
        metadata.create_all(engine)
    except SQLAlchemyError as e:
        logger.error(f"Error initializing database {database_url[:50]}: {e}")
        raise PredictionStoreError("initialize", str(e)) from e
    return engine


class SqlPredictionStore(PredictionStore):
    """
    SQLAlchemy adapter for the append-only prediction log.
    Works against any SQLAlchemy backend (PostgreSQL, SQLite).
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_url(cls, database_url: str) -> "SqlPredictionStore":
        return cls(create_store_engine(database_url))

    async def append(self, record: PredictionRecord) -> None:
        """Insert one prediction record"""
        try:
            with self.engine.connect() as conn:
                conn.execute(water_chemistry_predictions.insert(), {
                    "entity_id": record.entity_id,
                    "parameter_name": record.parameter.value,
                    "current_value": record.current_value,
                    "predicted_value": record.predicted_value,
                    "prediction_date": as_utc(record.made_at),
                    "predicted_date": as_utc(record.target_date),
                    "days_ahead": record.days_ahead,
                    "confidence_score": record.confidence,
                    "trend": record.trend.value,
                    "rate_of_change": record.rate_of_change,
                    "is_warning": record.is_warning,
                    "message": record.message,
                    "prediction_method": record.method,
                    "data_points_used": record.sample_count,
                })
                conn.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error saving {record.parameter.value} prediction for tank {record.entity_id}: {e}")
            raise PredictionStoreError("append", str(e)) from e

        logger.info(f"Saved {record.parameter.value} prediction for tank {record.entity_id}")

    async def query(
        self,
        entity_id: str,
        parameter: Optional[WaterParameter] = None,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[PredictionRecord]:
        """Retrieve prediction records for a tank, newest first"""
        table = water_chemistry_predictions
        query = select(table).where(table.c.entity_id == entity_id)

        if parameter is not None:
            query = query.where(table.c.parameter_name == WaterParameter.parse(parameter).value)

        if since is not None:
            query = query.where(table.c.prediction_date >= as_utc(since))

        query = query.order_by(table.c.prediction_date.desc(), table.c.id.desc())
        if limit is not None:
            query = query.limit(limit)

        try:
            with self.engine.connect() as conn:
                rows = conn.execute(query).fetchall()
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving predictions for tank {entity_id}: {e}")
            raise PredictionStoreError("query", str(e)) from e

        return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_record(row) -> PredictionRecord:
        return PredictionRecord(
            entity_id=row.entity_id,
            parameter=WaterParameter.parse(row.parameter_name),
            current_value=row.current_value,
            predicted_value=row.predicted_value,
            made_at=as_utc(row.prediction_date),
            target_date=as_utc(row.predicted_date),
            days_ahead=row.days_ahead,
            confidence=row.confidence_score,
            trend=TrendLabel(row.trend),
            rate_of_change=row.rate_of_change,
            is_warning=bool(row.is_warning),
            message=row.message or "",
            method=row.prediction_method,
            sample_count=row.data_points_used,
        )


class SqlWaterSampleRepository(WaterSampleRepository):
    """SQLAlchemy adapter for historical water tests"""

    def __init__(self, engine: Engine):
        self.engine = engine

    async def fetch_samples(
        self,
        entity_id: str,
        since: Optional[datetime] = None,
    ) -> List[Sample]:
        """Retrieve water tests for a tank, oldest first"""
        query = select(water_samples).where(water_samples.c.entity_id == entity_id)
        if since is not None:
            query = query.where(water_samples.c.timestamp >= as_utc(since))
        query = query.order_by(water_samples.c.timestamp)

        try:
            with self.engine.connect() as conn:
                rows = conn.execute(query).fetchall()
        except SQLAlchemyError as e:
            logger.error(f"Error retrieving water tests for tank {entity_id}: {e}")
            raise PredictionStoreError("fetch_samples", str(e)) from e

        if not rows:
            logger.warning(f"No water tests found for tank {entity_id}")
            return []

        logger.info(f"Fetched a total of {len(rows)} water tests for tank {entity_id}")
        return [
            Sample(
                entity_id=row.entity_id,
                timestamp=as_utc(row.timestamp),
                readings=json.loads(row.readings),
            )
            for row in rows
        ]

    async def add_sample(self, sample: Sample) -> None:
        """Insert one water test"""
        try:
            with self.engine.connect() as conn:
                conn.execute(water_samples.insert(), {
                    "entity_id": sample.entity_id,
                    "timestamp": as_utc(sample.timestamp),
                    "readings": json.dumps(dict(sample.readings)),
                })
                conn.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error saving water test for tank {sample.entity_id}: {e}")
            raise PredictionStoreError("add_sample", str(e)) from e
