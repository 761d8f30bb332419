"""
Repository interfaces (Ports) for data access abstraction.
These define contracts that adapters must implement.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from aquachem.domain.models import PredictionRecord, Sample, WaterParameter


class PredictionStore(ABC):
    """Port: append-only log of forecasts made"""

    @abstractmethod
    async def append(self, record: PredictionRecord) -> None:
        """
        Persist a prediction record. Records are never updated or deleted
        through this port, and a completed append must be visible to any
        later query.

        Raises:
            PredictionStoreError: if the record could not be written
        """
        pass

    @abstractmethod
    async def query(
        self,
        entity_id: str,
        parameter: Optional[WaterParameter] = None,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[PredictionRecord]:
        """
        Return records for a tank, newest first.

        Args:
            entity_id: Tank identifier
            parameter: Only records for this parameter
            since: Only records made at or after this time
            limit: Maximum number of records

        Raises:
            PredictionStoreError: if the store could not be read
        """
        pass


class WaterSampleRepository(ABC):
    """Port: historical water tests for a tank"""

    @abstractmethod
    async def fetch_samples(
        self,
        entity_id: str,
        since: Optional[datetime] = None,
    ) -> List[Sample]:
        """Retrieve samples taken at or after `since`, oldest first"""
        pass

    @abstractmethod
    async def add_sample(self, sample: Sample) -> None:
        """Record a water test"""
        pass
