"""
In-process repository adapters backed by plain lists.
Useful for tests and for running the engine without a database.
"""
from datetime import datetime
from typing import List, Optional

from aquachem.domain.models import PredictionRecord, Sample, WaterParameter
from aquachem.domain.repositories import PredictionStore, WaterSampleRepository


class InMemoryPredictionStore(PredictionStore):

    def __init__(self):
        self._records: List[PredictionRecord] = []

    async def append(self, record: PredictionRecord) -> None:
        self._records.append(record)

    async def query(
        self,
        entity_id: str,
        parameter: Optional[WaterParameter] = None,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[PredictionRecord]:
        if parameter is not None:
            parameter = WaterParameter.parse(parameter)
        matches = [
            r for r in self._records
            if r.entity_id == entity_id
            and (parameter is None or r.parameter is parameter)
            and (since is None or r.made_at >= since)
        ]
        # Newest first; insertion order breaks ties
        ordered = [r for _, r in sorted(
            enumerate(matches), key=lambda item: (item[1].made_at, item[0]), reverse=True
        )]
        return ordered[:limit] if limit is not None else ordered


class InMemoryWaterSampleRepository(WaterSampleRepository):

    def __init__(self, samples: Optional[List[Sample]] = None):
        self._samples: List[Sample] = list(samples or [])

    async def fetch_samples(
        self,
        entity_id: str,
        since: Optional[datetime] = None,
    ) -> List[Sample]:
        return sorted(
            (
                s for s in self._samples
                if s.entity_id == entity_id and (since is None or s.timestamp >= since)
            ),
            key=lambda s: s.timestamp,
        )

    async def add_sample(self, sample: Sample) -> None:
        self._samples.append(sample)
