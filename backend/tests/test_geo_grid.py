"""
Geo Utility and Grid Aggregation Tests

Tests cover:
- Haversine distance and bearing helpers
- H3 cell mapping and cell centers
- Running-mean fold rule and wait proxy
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import h3

from geoos.geo import (
    bearing_change,
    calculate_bearing,
    cell_center,
    haversine_km,
    latlng_to_cell
)
from geoos.grid import Cell, build_cell, fold_sample


ASTANA = (51.128, 71.430)


class TestGeoHelpers:
    """Tests for distance and bearing helpers"""

    def test_haversine_same_point_is_zero(self):
        assert haversine_km(*ASTANA, *ASTANA) == 0.0

    def test_haversine_one_degree_latitude(self):
        """One degree of latitude is ~111.195 km on a 6371 km sphere"""
        distance = haversine_km(0.0, 0.0, 1.0, 0.0)
        assert distance == pytest.approx(111.195, abs=0.01)

    def test_haversine_is_symmetric(self):
        d1 = haversine_km(51.10, 71.40, 51.20, 71.50)
        d2 = haversine_km(51.20, 71.50, 51.10, 71.40)
        assert d1 == pytest.approx(d2)

    def test_bearing_cardinal_directions(self):
        assert calculate_bearing(0.0, 0.0, 1.0, 0.0) == pytest.approx(0.0, abs=1e-9)
        assert calculate_bearing(0.0, 0.0, 0.0, 1.0) == pytest.approx(90.0)
        assert calculate_bearing(0.0, 0.0, -1.0, 0.0) == pytest.approx(180.0)
        assert calculate_bearing(0.0, 0.0, 0.0, -1.0) == pytest.approx(270.0)

    def test_bearing_is_normalized(self):
        bearing = calculate_bearing(51.2, 71.5, 51.1, 71.4)
        assert 0 <= bearing < 360

    def test_bearing_change_wraps(self):
        assert bearing_change(350.0, 10.0) == pytest.approx(20.0)
        assert bearing_change(10.0, 350.0) == pytest.approx(20.0)
        assert bearing_change(0.0, 180.0) == pytest.approx(180.0)
        assert bearing_change(90.0, 90.0) == 0.0


class TestCellMapping:
    """Tests for H3 indexing helpers"""

    def test_latlng_to_cell_is_valid(self):
        cell_id = latlng_to_cell(*ASTANA)
        assert h3.is_valid_cell(cell_id)
        assert h3.get_resolution(cell_id) == 8

    def test_custom_resolution(self):
        cell_id = latlng_to_cell(*ASTANA, resolution=6)
        assert h3.get_resolution(cell_id) == 6

    def test_cell_center_maps_back_to_cell(self):
        cell_id = latlng_to_cell(*ASTANA)
        lat, lng = cell_center(cell_id)
        assert latlng_to_cell(lat, lng) == cell_id
        assert haversine_km(lat, lng, *ASTANA) < 1.0


class TestCellFold:
    """Tests for the running-mean fold rule"""

    def setup_method(self):
        self.cell_id = latlng_to_cell(*ASTANA)

    def test_fold_updates_trips_and_mean(self):
        cell = Cell(cell_id=self.cell_id)
        cell.fold(10.0)
        cell.fold(20.0)
        assert cell.trips == 2
        assert cell.avg_speed == pytest.approx(15.0)

    def test_fold_is_order_invariant(self):
        speeds = [12.0, 0.0, 48.5, 3.2, 27.0, 31.1]
        forward = build_cell(self.cell_id, speeds)
        backward = build_cell(self.cell_id, list(reversed(speeds)))

        assert forward.trips == backward.trips == len(speeds)
        assert forward.avg_speed == pytest.approx(backward.avg_speed)
        assert forward.avg_speed == pytest.approx(sum(speeds) / len(speeds))
        assert forward.wait_proxy == backward.wait_proxy == 2

    def test_wait_proxy_threshold_is_strict(self):
        cell = build_cell(self.cell_id, [4.99, 5.0, 5.01])
        assert cell.wait_proxy == 1

    def test_custom_wait_threshold(self):
        cell = build_cell(self.cell_id, [4.0, 8.0, 12.0], wait_threshold=10.0)
        assert cell.wait_proxy == 2

    def test_fold_sample_creates_cell_lazily(self):
        cells = {}
        fold_sample(cells, self.cell_id, 30.0)
        fold_sample(cells, self.cell_id, 10.0)

        assert list(cells.keys()) == [self.cell_id]
        assert cells[self.cell_id].trips == 2
        assert cells[self.cell_id].avg_speed == pytest.approx(20.0)

    def test_to_dict(self):
        cell = build_cell(self.cell_id, [10.0, 2.0, 3.333])
        data = cell.to_dict()

        assert data['h3'] == self.cell_id
        assert data['trips'] == 3
        assert data['avgSpd'] == pytest.approx(5.11)
        assert data['wait'] == 2
        assert 'lat' in data and 'lng' in data
