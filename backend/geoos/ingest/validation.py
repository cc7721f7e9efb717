"""
Probe Validators

Row-level validation for raw probes. Rejected rows are counted by the
ingestor and never abort a batch.

Two validators are available:
- GlobalBoundsValidator: lat in [-90, 90], lng in [-180, 180]
- BoundingBoxValidator: lat/lng inside the configured operating region

Both apply the same speed, vehicle id, sequence and recorded-timestamp
rules.
"""

import math
from typing import Optional

from geoos.ingest.probe import MAX_EPOCH_SECONDS, RawProbe


class ProbeValidator:
    """Base validator: speed range, vehicle id and sequence checks"""

    name = 'base'

    def __init__(self, min_speed: float = 0.0, max_speed: float = 200.0):
        self.min_speed = min_speed
        self.max_speed = max_speed

    def is_valid(self, probe: RawProbe) -> bool:
        if not probe.vehicle_id:
            return False
        if probe.seq is None or not math.isfinite(probe.seq):
            return False
        if not _finite(probe.lat, probe.lng, probe.speed):
            return False
        if not (self.min_speed <= probe.speed <= self.max_speed):
            return False
        if probe.timestamp is not None and not (0 <= probe.timestamp <= MAX_EPOCH_SECONDS):
            return False
        return self.in_bounds(probe.lat, probe.lng)

    def in_bounds(self, lat: float, lng: float) -> bool:
        raise NotImplementedError

    def describe(self) -> dict:
        return {
            'validator': self.name,
            'speedRange': [self.min_speed, self.max_speed]
        }


class GlobalBoundsValidator(ProbeValidator):
    """Accept any coordinate on the globe"""

    name = 'global'

    def in_bounds(self, lat: float, lng: float) -> bool:
        return -90 <= lat <= 90 and -180 <= lng <= 180


class BoundingBoxValidator(ProbeValidator):
    """Accept only coordinates inside an operating region"""

    name = 'bbox'

    def __init__(
        self,
        min_lat: float = 50.5,
        max_lat: float = 52.0,
        min_lng: float = 70.5,
        max_lng: float = 72.5,
        min_speed: float = 0.0,
        max_speed: float = 200.0
    ):
        super().__init__(min_speed, max_speed)
        self.min_lat = min_lat
        self.max_lat = max_lat
        self.min_lng = min_lng
        self.max_lng = max_lng

    def in_bounds(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

    def describe(self) -> dict:
        data = super().describe()
        data['boundingBox'] = {
            'minLat': self.min_lat,
            'maxLat': self.max_lat,
            'minLng': self.min_lng,
            'maxLng': self.max_lng
        }
        return data


def create_validator(config: Optional[dict] = None) -> ProbeValidator:
    """
    Create the validator selected by the ingest config section

    Args:
        config: Ingest configuration ('validator', 'boundingBox',
                'minSpeed', 'maxSpeed')

    Returns:
        Configured ProbeValidator
    """
    config = config or {}
    kind = config.get('validator', 'global')
    min_speed = config.get('minSpeed', 0.0)
    max_speed = config.get('maxSpeed', 200.0)

    if kind == 'bbox':
        box = config.get('boundingBox', {})
        return BoundingBoxValidator(
            min_lat=box.get('minLat', 50.5),
            max_lat=box.get('maxLat', 52.0),
            min_lng=box.get('minLng', 70.5),
            max_lng=box.get('maxLng', 72.5),
            min_speed=min_speed,
            max_speed=max_speed
        )

    if kind != 'global':
        print(f"[WARN] Unknown validator '{kind}', falling back to global bounds")

    return GlobalBoundsValidator(min_speed=min_speed, max_speed=max_speed)


def _finite(*values: float) -> bool:
    try:
        return all(math.isfinite(v) for v in values)
    except TypeError:
        return False
