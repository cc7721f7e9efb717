"""
KPI Calculator Tests

Tests cover:
- Trip-weighted speed, coverage and ETA
- Anomaly rate and placeholder constants
- Empty grid behavior
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from geoos.geo import latlng_to_cell
from geoos.grid import Cell
from geoos.kpi import KPICalculator, KPIMetrics


CELL_A = latlng_to_cell(51.128, 71.430)
CELL_B = latlng_to_cell(51.180, 71.480)


def make_cells(*specs):
    return {cell_id: Cell(cell_id=cell_id, trips=trips, avg_speed=speed) for cell_id, trips, speed in specs}


class TestKPICalculator:
    """Tests for KPICalculator"""

    def setup_method(self):
        self.calc = KPICalculator()

    def test_two_cell_scenario(self):
        """8 samples at speed 10 and 7 at speed 2"""
        cells = make_cells((CELL_A, 8, 10.0), (CELL_B, 7, 2.0))
        kpis = self.calc.calculate(cells, anomaly_count=0, trajectory_count=3)

        assert kpis.total_trips == 15
        assert kpis.avg_speed == pytest.approx(6.27)
        assert kpis.coverage == 0.0
        assert kpis.eta == pytest.approx(19.1)
        assert kpis.pickup_dist == 2.0
        assert kpis.co2_proxy == 1.0
        assert kpis.anomalies_per_1k == 0.0

    def test_coverage_threshold_is_strict(self):
        cells = make_cells((CELL_A, 11, 20.0), (CELL_B, 10, 20.0))
        kpis = self.calc.calculate(cells)
        assert kpis.coverage == pytest.approx(0.5)

    def test_anomalies_per_thousand(self):
        cells = make_cells((CELL_A, 8, 10.0))
        kpis = self.calc.calculate(cells, anomaly_count=3, trajectory_count=6)
        assert kpis.anomalies_per_1k == pytest.approx(500.0)

    def test_zero_trajectories(self):
        cells = make_cells((CELL_A, 8, 10.0))
        kpis = self.calc.calculate(cells, anomaly_count=3, trajectory_count=0)
        assert kpis.anomalies_per_1k == 0.0

    def test_zero_speed_gives_zero_eta(self):
        cells = make_cells((CELL_A, 5, 0.0))
        kpis = self.calc.calculate(cells)
        assert kpis.avg_speed == 0.0
        assert kpis.eta == 0.0

    def test_empty_grid_is_all_zero(self):
        kpis = self.calc.calculate({}, anomaly_count=5, trajectory_count=2)
        assert kpis == KPIMetrics()
        assert all(value == 0 for value in kpis.to_dict().values())

    def test_config_overrides(self):
        calc = KPICalculator({'demandThreshold': 5, 'pickupDistanceKm': 1.0, 'co2Proxy': 0.4})
        cells = make_cells((CELL_A, 8, 10.0), (CELL_B, 4, 10.0))
        kpis = calc.calculate(cells)

        assert kpis.coverage == pytest.approx(0.5)
        assert kpis.pickup_dist == 1.0
        assert kpis.eta == pytest.approx(6.0)
        assert kpis.co2_proxy == 0.4

    def test_to_dict_keys(self):
        kpis = self.calc.calculate(make_cells((CELL_A, 8, 10.0)))
        assert list(kpis.to_dict().keys()) == [
            'total_trips', 'avg_speed', 'coverage', 'pickup_dist',
            'eta', 'anomalies_per_1k', 'co2_proxy'
        ]

    def test_diff(self):
        before = KPIMetrics(total_trips=10, avg_speed=20.0, eta=6.0)
        after = KPIMetrics(total_trips=12, avg_speed=18.5, eta=6.5)
        delta = after.diff(before)

        assert delta.total_trips == 2
        assert delta.avg_speed == pytest.approx(-1.5)
        assert delta.eta == pytest.approx(0.5)
