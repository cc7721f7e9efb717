"""
Relocation Recommendations

Rank grid cells for a driver at a query point by distance-discounted
demand:

    score = demand / (1 + distance_km)
    eta_gain = distance_km / baseline_speed * 60 * eta_gain_factor

The ETA gain assumes a 30 km/h baseline and a 20% efficiency gain; both are
uncalibrated heuristics kept in configuration.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from geoos.forecast import DemandForecaster
from geoos.geo import cell_center, haversine_km
from geoos.grid import Cell


@dataclass(frozen=True)
class Recommendation:
    """A forecast entry scored relative to a query point"""
    cell_id: str
    demand_pred: float
    lo: float
    hi: float
    center_lat: float
    center_lng: float
    dist_km: float
    score: float
    eta_gain_minutes: float

    def to_dict(self) -> dict:
        return {
            'h3': self.cell_id,
            'demandPred': self.demand_pred,
            'lo': self.lo,
            'hi': self.hi,
            'center_lat': self.center_lat,
            'center_lng': self.center_lng,
            'dist_km': self.dist_km,
            'score': self.score,
            'eta_gain_minutes': self.eta_gain_minutes
        }


class RecommendationEngine:
    """
    Score and rank cells for relocation

    Deterministic for a fixed snapshot and query point.
    """

    def __init__(self, forecaster: DemandForecaster, config: dict = None):
        """
        Args:
            forecaster: DemandForecaster providing per-cell demand
            config: Recommendation configuration section
        """
        config = config or {}
        self.forecaster = forecaster
        self.baseline_speed_kmh = config.get('baselineSpeedKmh', 30.0)
        self.eta_gain_factor = config.get('etaGainFactor', 0.2)

    def eta_gain_minutes(self, dist_km: float) -> float:
        return dist_km / self.baseline_speed_kmh * 60 * self.eta_gain_factor

    def recommend(
        self,
        lat: float,
        lng: float,
        k: int,
        cells: Optional[Dict[str, Cell]] = None
    ) -> List[Recommendation]:
        """
        Top-k cells for a query point

        Args:
            lat, lng: Query point
            k: Number of recommendations (all cells if k exceeds the grid)
            cells: Cell map to score (defaults to the live grid)

        Returns:
            Recommendations sorted by score descending; empty for an empty grid
        """
        if k <= 0:
            return []

        recommendations = []
        for forecast in self.forecaster.all_forecasts(cells):
            center_lat, center_lng = cell_center(forecast.cell_id)
            dist_km = haversine_km(lat, lng, center_lat, center_lng)

            recommendations.append(Recommendation(
                cell_id=forecast.cell_id,
                demand_pred=forecast.demand_pred,
                lo=forecast.lo,
                hi=forecast.hi,
                center_lat=center_lat,
                center_lng=center_lng,
                dist_km=dist_km,
                score=forecast.demand_pred / (1 + dist_km),
                eta_gain_minutes=self.eta_gain_minutes(dist_km)
            ))

        recommendations.sort(key=lambda r: r.score, reverse=True)
        return recommendations[:k]
