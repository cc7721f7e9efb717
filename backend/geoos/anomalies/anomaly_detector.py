"""
Anomaly Detector

Runs the configured outlier detectors over the live trajectory set and
deduplicates the result by (vehicle id, type), keeping the last computed
anomaly for each pair.
"""

from typing import Dict, List, Sequence

from geoos.anomalies.anomaly import Anomaly
from geoos.anomalies.detectors import (
    IsolationForestDetector,
    OutlierDetector,
    RouteClusterDetector,
    RuleBasedDetector
)
from geoos.state import GridStore, Trajectory


class AnomalyDetector:
    """
    Composite anomaly detector

    Detector order is rule-based, statistical, route-cluster; later
    detectors win deduplication ties.

    Usage:
        detector = AnomalyDetector(store, config)
        anomalies = detector.find_anomalies()
    """

    def __init__(self, store: GridStore, config: dict = None, detectors: List[OutlierDetector] = None):
        """
        Initialize the detector chain

        Args:
            store: GridStore to read trajectories from
            config: Anomaly configuration section
            detectors: Explicit detector chain (overrides config)
        """
        config = config or {}
        self.store = store

        if detectors is None:
            detectors = [
                RuleBasedDetector(config),
                IsolationForestDetector(config.get('isolationForest', {})),
                RouteClusterDetector()
            ]
        self.detectors = detectors

    def detect(self, trajectories: Sequence[Trajectory]) -> List[Anomaly]:
        """Run every detector over a trajectory set and deduplicate"""
        unique: Dict[tuple, Anomaly] = {}

        for detector in self.detectors:
            found = detector.detect(trajectories)
            for anomaly in found:
                unique[anomaly.key] = anomaly

        return list(unique.values())

    def find_anomalies(self) -> List[Anomaly]:
        """Detect anomalies on the store's current trajectories"""
        trajectories = self.store.get_trajectories()
        anomalies = self.detect(trajectories)
        print(f"[ANOMALY] {len(anomalies)} anomalies across {len(trajectories)} trajectories")
        return anomalies
