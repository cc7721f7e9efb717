"""
Rebalancing Simulator

Estimate the KPI effect of relocating a share of supply from supply-rich
cells to recommended target cells.

Algorithm:
1. Baseline KPIs on the live grid
2. Deep-copy the grid (the live snapshot is never mutated)
3. Mean trip count across cells
4. Donors: cells above the mean that are not targets
5. Each donor gives floor(trips * share) trips
6. floor(total / target_count) trips go to each target present in the grid
7. KPIs on the simulated grid
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

import numpy as np

from geoos.forecast import ForecastEntry
from geoos.kpi import KPICalculator, KPIMetrics
from geoos.recommendations import Recommendation
from geoos.state import GridStore


Target = Union[Recommendation, ForecastEntry, dict, str]


@dataclass
class SimulationResult:
    """Outcome of one rebalancing simulation"""
    kpi_before: Optional[KPIMetrics] = None
    kpi_after: Optional[KPIMetrics] = None
    relocated_trips: int = 0
    message: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def delta(self) -> Optional[KPIMetrics]:
        if self.kpi_before is None or self.kpi_after is None:
            return None
        return self.kpi_after.diff(self.kpi_before)

    def to_dict(self) -> dict:
        if self.error:
            return {'error': self.error}

        data = {
            'kpi_before': self.kpi_before.to_dict(),
            'kpi_after': self.kpi_after.to_dict(),
            'delta': self.delta.to_dict()
        }
        if self.message:
            data['message'] = self.message
        else:
            data['relocated_trips'] = self.relocated_trips
        return data


class RebalancingSimulator:
    """
    Counterfactual supply relocation on a copy of the grid

    Usage:
        simulator = RebalancingSimulator(store, kpi_calculator)
        result = simulator.run(recommendations, relocate_share=0.1)
    """

    def __init__(self, store: GridStore, kpi_calculator: KPICalculator = None):
        self.store = store
        self.kpi_calculator = kpi_calculator or KPICalculator()

        # Statistics
        self.total_runs = 0

    def run(
        self,
        targets: Iterable[Target],
        relocate_share: float,
        anomaly_count: int = 0
    ) -> SimulationResult:
        """
        Simulate relocating a share of trips toward target cells

        Args:
            targets: Recommended target cells (recommendations, forecast
                     entries, dicts with 'h3', or cell ids)
            relocate_share: Fraction of donor trips to move, in (0, 1]
            anomaly_count: Anomalies on the live snapshot (KPI input)

        Returns:
            SimulationResult; error set for an empty grid or invalid share
        """
        snapshot = self.store.snapshot
        if not snapshot.has_data():
            return SimulationResult(error="No data to simulate.")

        if not (0 < relocate_share <= 1):
            return SimulationResult(error=f"relocate_share must be in (0, 1], got {relocate_share}")

        self.total_runs += 1
        trajectory_count = len(snapshot.trajectories)

        kpi_before = self.kpi_calculator.calculate(snapshot.cells, anomaly_count, trajectory_count)

        sim_cells = snapshot.copy_cells()
        target_ids = self._target_ids(targets)
        mean_trips = float(np.mean([cell.trips for cell in sim_cells.values()]))

        donors = [
            cell for cell in sorted(sim_cells.values(), key=lambda c: c.trips)
            if cell.trips > mean_trips and cell.cell_id not in target_ids
        ]

        if not donors:
            print("[SIM] No supply-rich zones found")
            return SimulationResult(
                kpi_before=kpi_before,
                kpi_after=kpi_before,
                message="No supply-rich zones found to reallocate from."
            )

        relocated = 0
        for donor in donors:
            moved = math.floor(donor.trips * relocate_share)
            if moved > 0:
                donor.trips -= moved
                relocated += moved

        if target_ids:
            per_target = relocated // len(target_ids)
            if per_target > 0:
                for cell_id in target_ids:
                    cell = sim_cells.get(cell_id)
                    if cell is not None:
                        cell.trips += per_target

        kpi_after = self.kpi_calculator.calculate(sim_cells, anomaly_count, trajectory_count)

        print(f"[SIM] Relocated {relocated} trips from {len(donors)} donors "
              f"to {len(target_ids)} targets (share={relocate_share})")

        return SimulationResult(
            kpi_before=kpi_before,
            kpi_after=kpi_after,
            relocated_trips=relocated
        )

    @staticmethod
    def _target_ids(targets: Iterable[Target]) -> List[str]:
        """Distinct target cell ids, in first-seen order"""
        ids: List[str] = []
        for target in targets or []:
            if isinstance(target, str):
                cell_id = target
            elif isinstance(target, dict):
                cell_id = target.get('h3')
            else:
                cell_id = target.cell_id
            if cell_id and cell_id not in ids:
                ids.append(cell_id)
        return ids
