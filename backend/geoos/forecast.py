"""
Demand Forecast Module

Per-cell demand estimates from the current grid snapshot.

There is no time series behind the grid (exactly one snapshot exists), so
the predicted demand is the current trip count and the confidence band is
a fixed ±20% heuristic rather than a calibrated interval.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from geoos.grid import Cell
from geoos.state import GridStore


@dataclass(frozen=True)
class ForecastEntry:
    """Demand estimate for one cell"""
    cell_id: str
    demand_pred: float
    lo: float
    hi: float

    def to_dict(self) -> dict:
        return {
            'h3': self.cell_id,
            'demandPred': self.demand_pred,
            'lo': self.lo,
            'hi': self.hi
        }


class DemandForecaster:
    """
    Snapshot-based demand forecaster

    Usage:
        forecaster = DemandForecaster(store, config)
        top = forecaster.top_forecasts(20)
    """

    def __init__(self, store: GridStore, config: dict = None):
        """
        Args:
            store: GridStore to read cells from
            config: Forecast configuration section ('bandLow', 'bandHigh')
        """
        config = config or {}
        self.store = store
        self.band_low = config.get('bandLow', 0.8)
        self.band_high = config.get('bandHigh', 1.2)

    def forecast(self, cell: Cell) -> ForecastEntry:
        """Demand estimate for one cell: current trips with a ±20% band"""
        demand = cell.trips or 0
        return ForecastEntry(
            cell_id=cell.cell_id,
            demand_pred=demand,
            lo=demand * self.band_low,
            hi=demand * self.band_high
        )

    def all_forecasts(self, cells: Optional[Dict[str, Cell]] = None) -> List[ForecastEntry]:
        """Forecasts for every cell, in grid insertion order"""
        if cells is None:
            cells = self.store.cells
        return [self.forecast(cell) for cell in cells.values()]

    def top_forecasts(self, n: int, cells: Optional[Dict[str, Cell]] = None) -> List[ForecastEntry]:
        """
        Highest-demand cells

        Ties keep grid insertion order (stable sort).

        Args:
            n: Number of entries to return

        Returns:
            Up to n forecasts sorted by descending demand
        """
        if n <= 0:
            return []
        forecasts = sorted(self.all_forecasts(cells), key=lambda f: f.demand_pred, reverse=True)
        return forecasts[:n]
