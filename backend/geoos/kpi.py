"""
KPI Calculator

Reduce a grid snapshot to scalar operational metrics.

Pickup distance and the CO2 proxy are placeholders ("metric exists, model
pending") and are reported as configured constants.
"""

from dataclasses import dataclass, fields
from typing import Dict

from geoos.grid import Cell


# Placeholder constants, overridable through the 'kpi' config section
DEFAULT_DEMAND_THRESHOLD = 10
DEFAULT_PICKUP_DISTANCE_KM = 2.0
DEFAULT_CO2_PROXY = 1.0


@dataclass
class KPIMetrics:
    """Operational metrics for one grid"""
    total_trips: int = 0
    avg_speed: float = 0.0
    coverage: float = 0.0            # fraction of cells above the demand threshold
    pickup_dist: float = 0.0         # km
    eta: float = 0.0                 # minutes
    anomalies_per_1k: float = 0.0
    co2_proxy: float = 0.0

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def diff(self, baseline: 'KPIMetrics') -> 'KPIMetrics':
        """Field-wise self - baseline"""
        return KPIMetrics(**{
            f.name: round(getattr(self, f.name) - getattr(baseline, f.name), 4)
            for f in fields(self)
        })


class KPICalculator:
    """
    Compute KPIs from a cell map

    Usage:
        calculator = KPICalculator(config)
        metrics = calculator.calculate(store.cells, anomaly_count, len(store.trajectories))
    """

    def __init__(self, config: dict = None):
        """
        Args:
            config: KPI configuration section
        """
        config = config or {}
        self.demand_threshold = config.get('demandThreshold', DEFAULT_DEMAND_THRESHOLD)
        self.pickup_distance_km = config.get('pickupDistanceKm', DEFAULT_PICKUP_DISTANCE_KM)
        self.co2_proxy = config.get('co2Proxy', DEFAULT_CO2_PROXY)

    def calculate(
        self,
        cells: Dict[str, Cell],
        anomaly_count: int = 0,
        trajectory_count: int = 0
    ) -> KPIMetrics:
        """
        Calculate KPIs for a grid

        - avg_speed: trip-weighted mean of cell speeds
        - coverage: share of cells with trips above the demand threshold
        - eta: pickup_dist / avg_speed * 60 (0 when avg_speed is 0)
        - anomalies_per_1k: anomaly_count / trajectory_count * 1000

        Args:
            cells: cell_id -> Cell map
            anomaly_count: Number of detected anomalies
            trajectory_count: Number of trajectories in the snapshot

        Returns:
            KPIMetrics (all zeros for an empty grid)
        """
        if not cells:
            return KPIMetrics()

        total_trips = 0
        total_speed = 0.0
        demand_cells = 0

        for cell in cells.values():
            total_trips += cell.trips
            total_speed += cell.avg_speed * cell.trips
            if cell.trips > self.demand_threshold:
                demand_cells += 1

        avg_speed = total_speed / total_trips if total_trips > 0 else 0.0
        coverage = demand_cells / len(cells)
        eta = self.pickup_distance_km / avg_speed * 60 if avg_speed > 0 else 0.0
        anomalies_per_1k = anomaly_count / trajectory_count * 1000 if trajectory_count > 0 else 0.0

        return KPIMetrics(
            total_trips=total_trips,
            avg_speed=round(avg_speed, 2),
            coverage=round(coverage, 2),
            pickup_dist=self.pickup_distance_km,
            eta=round(eta, 1),
            anomalies_per_1k=round(anomalies_per_1k, 1),
            co2_proxy=self.co2_proxy
        )
