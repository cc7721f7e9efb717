"""
Raw Probe Records

One GPS sample as delivered by an ingestion adapter. Probes are consumed
once by the ingestor and never stored verbatim.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional


DEFAULT_COLUMNS = {
    'vehicleId': 'randomized_id',
    'lat': 'lat',
    'lng': 'lng',
    'speed': 'spd',
    'sequence': 'seq',
    'timestamp': 'timestamp'
}

# Recorded timestamps above this are epoch milliseconds
MILLISECOND_EPOCH_THRESHOLD = 1e11

# 9999-12-31T23:59:59Z, the last second datetime can represent
MAX_EPOCH_SECONDS = 253402300799.0


@dataclass
class RawProbe:
    """Single GPS probe sample"""
    vehicle_id: str
    lat: float
    lng: float
    speed: float
    seq: Optional[float]
    timestamp: Optional[float] = None   # recorded epoch seconds, if the source has one

    @classmethod
    def from_record(cls, record: Dict[str, Any], columns: Dict[str, str] = None) -> 'RawProbe':
        """
        Build a probe from a tabular record

        Unparseable numeric fields become NaN (or None for sequence and
        timestamp) so the validator rejects them instead of raising.
        Millisecond timestamps are converted to seconds.

        Args:
            record: Mapping of column name -> raw value
            columns: Logical field -> column name mapping
        """
        cols = dict(DEFAULT_COLUMNS)
        if columns:
            cols.update(columns)

        vehicle_id = record.get(cols['vehicleId'])
        return cls(
            vehicle_id=str(vehicle_id).strip() if vehicle_id is not None else '',
            lat=_to_float(record.get(cols['lat'])),
            lng=_to_float(record.get(cols['lng'])),
            speed=_to_float(record.get(cols['speed'])),
            seq=_to_optional_float(record.get(cols['sequence'])),
            timestamp=_to_epoch_seconds(record.get(cols['timestamp']))
        )


def _to_float(value: Any) -> float:
    if value is None or value == '':
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _to_optional_float(value: Any) -> Optional[float]:
    result = _to_float(value)
    return None if math.isnan(result) else result


def _to_epoch_seconds(value: Any) -> Optional[float]:
    result = _to_optional_float(value)
    if result is not None and abs(result) > MILLISECOND_EPOCH_THRESHOLD:
        result = result / 1000.0
    return result
