"""
Series extraction: turns sparse water tests into a clean time series
for a single parameter.
"""
import logging
from datetime import datetime
from typing import Iterable

import pandas as pd

from aquachem.domain.models import ParameterSeries, Sample, SeriesPoint, WaterParameter

logger = logging.getLogger(__name__)


class SeriesExtractor:
    """
    Filters samples to one tank and one parameter inside the lookback window.
    Missing readings are skipped, never imputed.
    """

    def extract(
        self,
        samples: Iterable[Sample],
        entity_id: str,
        parameter: WaterParameter,
        cutoff: datetime,
    ) -> ParameterSeries:
        rows = []
        for sample in samples:
            if sample.entity_id != entity_id or sample.timestamp < cutoff:
                continue
            value = parameter.read(sample)
            if value is not None:
                rows.append((sample.timestamp, value))

        if not rows:
            return ParameterSeries(entity_id=entity_id, parameter=parameter)

        df = pd.DataFrame(rows, columns=['timestamp', 'value'])

        # Two readings at the same instant collapse into their mean
        duplicates = int(df.duplicated(subset=['timestamp']).sum())
        if duplicates:
            logger.warning(
                f"Averaging {duplicates} duplicate {parameter.value} readings for tank {entity_id}"
            )
        df = df.groupby('timestamp', as_index=False, sort=True)['value'].mean()

        points = tuple(
            SeriesPoint(timestamp=pd.Timestamp(ts).to_pydatetime(), value=float(value))
            for ts, value in zip(df['timestamp'], df['value'])
        )
        return ParameterSeries(entity_id=entity_id, parameter=parameter, points=points)


def count_samples_in_window(
    samples: Iterable[Sample],
    entity_id: str,
    cutoff: datetime,
) -> int:
    """Number of water tests for a tank at or after the cutoff."""
    return sum(
        1 for s in samples
        if s.entity_id == entity_id and s.timestamp >= cutoff
    )
