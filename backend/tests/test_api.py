"""
API Endpoint Tests

Tests cover:
- Root and health endpoints
- Ingest endpoints (JSON batch and sample CSV)
- Grid, KPI, anomaly and safety endpoints
- Forecast and recommendation endpoints
- Simulation endpoint
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fastapi.testclient import TestClient

from geoos.engine import GeoEngine, get_engine
from geoos.main import app

client = TestClient(app)


CELL_A = (51.128, 71.430)
CELL_B = (51.180, 71.480)


def two_cell_records():
    records = []
    for vehicle_id, (lat, lng), speed, seqs in [
        ('v1', CELL_A, 10.0, range(1, 6)),
        ('v2', CELL_A, 10.0, range(1, 4)),
        ('v2', CELL_B, 2.0, range(4, 6)),
        ('v3', CELL_B, 2.0, range(1, 6)),
    ]:
        for seq in seqs:
            records.append({'randomized_id': vehicle_id, 'lat': lat, 'lng': lng, 'spd': speed, 'seq': seq})
    return records


class APITestBase:
    """Routes every request to a fresh engine"""

    def setup_method(self):
        self.engine = GeoEngine(config={})
        app.dependency_overrides[get_engine] = lambda: self.engine

    def teardown_method(self):
        app.dependency_overrides.clear()

    def ingest(self, records=None):
        response = client.post("/api/ingest", json={"records": records or two_cell_records()})
        assert response.status_code == 200
        return response.json()


# ============================================
# Root & Health Endpoints
# ============================================

class TestRootEndpoints:
    """Test root and health endpoints"""

    def test_root_endpoint(self):
        """Test GET /"""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert "name" in data
        assert "version" in data
        assert data["status"] == "operational"

    def test_health_check(self):
        """Test GET /health"""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert "grid" in data


# ============================================
# Ingest Endpoints
# ============================================

class TestIngestEndpoints(APITestBase):
    """Test ingest endpoints"""

    def test_ingest_batch(self):
        data = self.ingest()
        assert data["rows_ingested"] == 15
        assert data["valid_rows"] == 15
        assert data["vehicles"] == 3
        assert data["total_grid_cells"] == 2

    def test_ingest_counts_bad_rows(self):
        records = two_cell_records() + [
            {'randomized_id': 'bad', 'lat': 'north', 'lng': 71.4, 'spd': 10, 'seq': 1},
            {'randomized_id': 'bad', 'lat': 51.1, 'lng': 71.4, 'spd': 999, 'seq': 2},
        ]
        data = self.ingest(records)
        assert data["filtered_errors"] == 2
        assert data["vehicles"] == 3

    def test_ingest_empty_batch(self):
        response = client.post("/api/ingest", json={"records": []})
        assert response.status_code == 200
        assert response.json()["rows_ingested"] == 0

    def test_health_reports_last_ingest(self):
        before = client.get("/health").json()
        assert before["lastIngest"] is None
        assert before["grid"]["ingestions"] == 0

        self.ingest()
        data = client.get("/health").json()

        assert data["grid"]["ingestions"] == 1
        assert data["grid"]["publishes"] == 1
        assert data["grid"]["cells"] == 2
        assert data["lastIngest"]["rows_ingested"] == 15

    def test_ingest_sample(self):
        response = client.post("/api/ingest/sample")
        assert response.status_code == 200
        assert response.json()["vehicles"] == 6

    def test_ingest_sample_missing(self):
        self.engine.sample_csv = "data/does_not_exist.csv"
        response = client.post("/api/ingest/sample")
        assert response.status_code == 404


# ============================================
# Grid, KPI and Anomaly Endpoints
# ============================================

class TestGridEndpoints(APITestBase):
    """Test grid, KPI, anomaly and safety endpoints"""

    def test_empty_grid(self):
        response = client.get("/api/grid")
        assert response.status_code == 200
        data = response.json()
        assert data["grid"] == []
        assert data["metadata"]["totalCells"] == 0

    def test_grid_after_ingest(self):
        self.ingest()
        data = client.get("/api/grid").json()

        assert data["metadata"]["totalCells"] == 2
        assert data["metadata"]["trajectories"] == 3
        assert len(data["metadata"]["sampleKeys"]) == 2
        trips = sorted(cell["trips"] for cell in data["grid"])
        assert trips == [7, 8]
        for cell in data["grid"]:
            assert {"h3", "trips", "avgSpd", "wait", "lat", "lng"} <= set(cell.keys())

    def test_empty_kpis(self):
        data = client.get("/api/kpi").json()
        assert data["total_trips"] == 0
        assert data["pickup_dist"] == 0
        assert data["co2_proxy"] == 0

    def test_kpis(self):
        self.ingest()
        data = client.get("/api/kpi").json()
        assert data["total_trips"] == 15
        assert data["avg_speed"] == pytest.approx(6.27)
        assert data["eta"] == pytest.approx(19.1)

    def test_anomalies(self):
        records = [
            {'randomized_id': 'v1', 'lat': 51.10 + i * 0.001, 'lng': 71.40, 'spd': speed, 'seq': i}
            for i, speed in enumerate([30.0, 30.0, 0.5, 20.0])
        ]
        self.ingest(records)

        data = client.get("/api/anomalies").json()
        assert len(data) == 1
        assert data[0]["id"] == "v1"
        assert data[0]["type"] == "sudden_stop"
        assert data[0]["severity"] == "high"

    def test_safety_scan(self):
        response = client.post("/api/safety/scan")
        assert response.status_code == 200
        data = response.json()
        assert data["summary"]["total"] == 0
        assert data["summary"]["safetyScore"] == 100.0
        assert len(data["recommendations"]) == 1


# ============================================
# Forecast & Recommendation Endpoints
# ============================================

class TestForecastEndpoints(APITestBase):
    """Test forecast and recommendation endpoints"""

    def test_forecast_top(self):
        self.ingest()
        data = client.get("/api/forecast?top=1").json()
        assert len(data) == 1
        assert data[0]["demandPred"] == 8
        assert data[0]["lo"] == pytest.approx(6.4)
        assert data[0]["hi"] == pytest.approx(9.6)

    def test_forecast_default(self):
        self.ingest()
        assert len(client.get("/api/forecast").json()) == 2

    def test_ml_forecast(self):
        self.ingest()
        response = client.post("/api/ml/forecast")
        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_recommendations(self):
        self.ingest()
        response = client.get("/api/recommendations", params={"lat": CELL_B[0], "lng": CELL_B[1], "k": 1})
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["demandPred"] == 7

    def test_recommendations_require_location(self):
        response = client.get("/api/recommendations", params={"lat": 51.1})
        assert response.status_code == 400


# ============================================
# Simulation Endpoint
# ============================================

class TestSimulationEndpoint(APITestBase):
    """Test simulation endpoint"""

    def test_simulate_without_data(self):
        response = client.post("/api/simulate", json={"relocate_share": 0.1})
        assert response.status_code == 400
        assert response.json()["detail"] == "No data to simulate."

    def test_simulate_default_body(self):
        self.ingest()
        response = client.post("/api/simulate")
        assert response.status_code == 200
        data = response.json()
        assert data["kpi_after"] == data["kpi_before"]
        assert "message" in data

    def test_simulate_with_targets(self):
        records = two_cell_records() + [{'randomized_id': 'v4', 'lat': 51.09, 'lng': 71.40, 'spd': 30, 'seq': 1}]
        self.ingest(records)
        target = client.get("/api/forecast?top=3").json()[-1]["h3"]

        response = client.post("/api/simulate", json={"relocate_share": 0.5, "targets": [target]})
        assert response.status_code == 200
        data = response.json()
        assert data["relocated_trips"] == 7
        assert data["delta"]["total_trips"] == 0

    def test_simulate_invalid_share(self):
        self.ingest()
        response = client.post("/api/simulate", json={"relocate_share": 1.5})
        assert response.status_code == 400
