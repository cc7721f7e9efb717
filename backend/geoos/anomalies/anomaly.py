"""
Anomaly Models

Anomalies are derived data: they are recomputed from the current trajectory
set on every request and never stored.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from geoos.state import Trajectory


class AnomalySeverity(str, Enum):
    """Anomaly severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnomalyType(str, Enum):
    """Anomaly type tags"""
    SUDDEN_STOP = "sudden_stop"
    CIRCULAR_ROUTE = "circular_route"
    ROUTE_DEVIATION = "route_deviation"
    ZIGZAG = "zigzag"
    STATISTICAL = "statistical"
    ROUTE_CLUSTER_OUTLIER = "route_cluster_outlier"


@dataclass(frozen=True)
class Anomaly:
    """One flagged behavior of one vehicle"""
    vehicle_id: str
    timestamp: float            # start of the trajectory, epoch seconds
    cell_id: Optional[str]      # H3 cell of the trajectory start
    type: AnomalyType
    score: float
    severity: AnomalySeverity

    @property
    def key(self) -> tuple:
        """Deduplication key: one anomaly per (vehicle, type)"""
        return (self.vehicle_id, self.type)

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        return {
            'id': self.vehicle_id,
            'ts': datetime.fromtimestamp(self.timestamp, tz=timezone.utc).isoformat(),
            'h3': self.cell_id,
            'type': self.type.value,
            'score': self.score,
            'severity': self.severity.value
        }


def create_anomaly(
    trajectory: Trajectory,
    anomaly_type: AnomalyType,
    severity: AnomalySeverity,
    score: float
) -> Anomaly:
    """
    Build an anomaly anchored at the trajectory's first point

    Args:
        trajectory: Trajectory with at least one point
        anomaly_type: Type tag
        severity: Severity level
        score: Numeric score (1 for boolean rules)
    """
    start = trajectory.points[0]
    return Anomaly(
        vehicle_id=trajectory.vehicle_id,
        timestamp=start.timestamp,
        cell_id=start.cell_id,
        type=anomaly_type,
        score=float(score),
        severity=severity
    )
