"""
GeoOS Engine

Facade that binds the ingestor, anomaly detector, forecaster, recommender,
KPI calculator and simulator to one GridStore.

Every read operation takes a single snapshot reference up front, so a
concurrent ingestion never produces a mixed view.
"""

from pathlib import Path
from typing import Iterable, List, Optional, Union

from geoos.anomalies import Anomaly, AnomalyDetector, build_safety_report
from geoos.config import get_config
from geoos.forecast import DemandForecaster, ForecastEntry
from geoos.grid import Cell
from geoos.ingest import IngestResult, ProbeCSVReader, RawProbe, TrajectoryIngestor
from geoos.kpi import KPICalculator, KPIMetrics
from geoos.recommendations import Recommendation, RecommendationEngine
from geoos.simulation import RebalancingSimulator, SimulationResult, Target
from geoos.state import GridStore


BACKEND_DIR = Path(__file__).parent.parent


class GeoEngine:
    """
    Fleet analytics engine

    Usage:
        engine = GeoEngine()
        engine.ingest_csv("data/astana_sample_small.csv")
        kpis = engine.get_kpis()
    """

    def __init__(self, config: dict = None, store: GridStore = None):
        """
        Initialize the engine

        Args:
            config: Engine configuration (default: the 'engine' config section)
            store: GridStore to own (default: a fresh store)
        """
        if config is None:
            config = get_config().get_engine_config()
        self.config = config
        self.store = store or GridStore()

        ingest_config = config.get('ingest', {})
        self.columns = ingest_config.get('columns', {})
        self.sample_csv = ingest_config.get('sampleCsv', 'data/astana_sample_small.csv')

        self.forecast_config = config.get('forecast', {})
        self.recommendation_config = config.get('recommendations', {})
        self.simulation_config = config.get('simulation', {})

        self.ingestor = TrajectoryIngestor(self.store, config)
        self.anomaly_detector = AnomalyDetector(self.store, config.get('anomalies', {}))
        self.forecaster = DemandForecaster(self.store, self.forecast_config)
        self.recommender = RecommendationEngine(self.forecaster, self.recommendation_config)
        self.kpi_calculator = KPICalculator(config.get('kpi', {}))
        self.simulator = RebalancingSimulator(self.store, self.kpi_calculator)

    # ============================================
    # Ingestion
    # ============================================

    def ingest(self, batch: Iterable[RawProbe]) -> IngestResult:
        """Replace the grid with one built from a probe batch"""
        return self.ingestor.ingest(batch)

    def ingest_records(self, records: Iterable[dict]) -> IngestResult:
        """Ingest plain dict records keyed by the configured column names"""
        return self.ingest(RawProbe.from_record(record, self.columns) for record in records)

    def ingest_csv(self, path: Union[str, Path] = None) -> IngestResult:
        """
        Ingest a probe CSV file

        Args:
            path: CSV path; relative paths resolve against the backend dir
                  (default: the configured sample CSV)

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = self.resolve_path(path or self.sample_csv)
        if not path.exists():
            raise FileNotFoundError(f"CSV file not found: {path}")
        reader = ProbeCSVReader(self.columns)
        return self.ingest(reader.read_file(path))

    @staticmethod
    def resolve_path(path: Union[str, Path]) -> Path:
        path = Path(path)
        if not path.is_absolute():
            path = BACKEND_DIR / path
        return path

    # ============================================
    # Read operations
    # ============================================

    def get_grid(self) -> List[Cell]:
        return list(self.store.cells.values())

    def get_anomalies(self) -> List[Anomaly]:
        return self.anomaly_detector.find_anomalies()

    def get_kpis(self) -> KPIMetrics:
        snapshot = self.store.snapshot
        trajectories = list(snapshot.trajectories.values())
        anomalies = self.anomaly_detector.detect(trajectories) if trajectories else []
        return self.kpi_calculator.calculate(snapshot.cells, len(anomalies), len(trajectories))

    def get_forecast(self, top: int = None) -> List[ForecastEntry]:
        if top is None:
            top = self.forecast_config.get('defaultTop', 20)
        return self.forecaster.top_forecasts(top)

    def get_all_forecasts(self) -> List[ForecastEntry]:
        return self.forecaster.all_forecasts()

    def get_recommendations(self, lat: float, lng: float, k: int = None) -> List[Recommendation]:
        if k is None:
            k = self.recommendation_config.get('defaultK', 3)
        return self.recommender.recommend(lat, lng, k)

    # ============================================
    # Simulation
    # ============================================

    def run_simulation(
        self,
        recommendations: Optional[Iterable[Target]] = None,
        relocate_share: float = None
    ) -> SimulationResult:
        """
        Run a rebalancing simulation on a copy of the grid

        Args:
            recommendations: Target cells (default: top recommendations from
                             the configured query point)
            relocate_share: Fraction of donor trips to move (default from config)

        Returns:
            SimulationResult
        """
        if relocate_share is None:
            relocate_share = self.simulation_config.get('relocateShare', 0.1)

        snapshot = self.store.snapshot
        if recommendations is None:
            recommendations = self.recommender.recommend(
                self.simulation_config.get('queryLat', 0.0),
                self.simulation_config.get('queryLng', 0.0),
                self.simulation_config.get('targetCount', 5),
                snapshot.cells
            )

        trajectories = list(snapshot.trajectories.values())
        anomaly_count = len(self.anomaly_detector.detect(trajectories)) if trajectories else 0

        return self.simulator.run(recommendations, relocate_share, anomaly_count)

    # ============================================
    # Diagnostics
    # ============================================

    def safety_scan(self) -> dict:
        """Anomaly scan with a safety summary and recommendations"""
        return build_safety_report(self.get_anomalies())

    def get_state_info(self) -> dict:
        return self.store.debug_state()

    def reset(self):
        self.store.reset()


# ============================================
# Global Instance
# ============================================

_engine: Optional[GeoEngine] = None


def get_engine() -> GeoEngine:
    """Get the global GeoEngine instance"""
    global _engine
    if _engine is None:
        _engine = GeoEngine()
    return _engine


def init_engine(config: dict = None) -> GeoEngine:
    """Initialize the global GeoEngine with config"""
    global _engine
    _engine = GeoEngine(config)
    return _engine
