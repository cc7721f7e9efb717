"""
Outlier Detectors

Pluggable detectors sharing one interface: detect(trajectories) -> anomalies.

Variants:
- RuleBasedDetector: per-trajectory driving rules (sudden stop, circular
  route, route deviation, zigzag)
- IsolationForestDetector: population-relative statistical outliers
- RouteClusterDetector: density-clustering route outliers (no algorithm
  chosen yet; returns nothing)
"""

from typing import List, Optional, Sequence

import numpy as np
from sklearn.ensemble import IsolationForest

from geoos.anomalies.anomaly import Anomaly, AnomalySeverity, AnomalyType, create_anomaly
from geoos.geo import bearing_change, calculate_bearing, haversine_km
from geoos.state import Trajectory


class OutlierDetector:
    """Base class for trajectory outlier detectors"""

    name = 'base'

    def detect(self, trajectories: Sequence[Trajectory]) -> List[Anomaly]:
        raise NotImplementedError


class RuleBasedDetector(OutlierDetector):
    """
    Safety rules evaluated independently for each trajectory

    Trajectories with fewer than 2 points are skipped. Each rule fires at
    most once per trajectory.
    """

    name = 'rule_based'

    def __init__(self, config: dict = None):
        """
        Initialize rule thresholds

        Args:
            config: Anomaly configuration section
        """
        config = config or {}

        # Speed units per second, very aggressive deceleration
        self.sudden_stop_threshold = config.get('suddenStopThreshold', -20.0)
        self.stop_speed = config.get('stopSpeed', 1.0)

        # Ends within 500 m of start on a route of at least 2 km
        self.circular_distance_km = config.get('circularRouteDistanceKm', 0.5)
        self.circular_min_length_km = config.get('circularRouteMinLengthKm', 2.0)

        # 50% longer than the straight line
        self.deviation_factor = config.get('routeDeviationFactor', 1.5)

        self.zigzag_angle = config.get('zigzagAngleDeg', 45.0)
        self.zigzag_count = config.get('zigzagCount', 5)

    def detect(self, trajectories: Sequence[Trajectory]) -> List[Anomaly]:
        anomalies: List[Anomaly] = []
        for trajectory in trajectories:
            anomalies.extend(self.detect_trajectory(trajectory))
        return anomalies

    def detect_trajectory(self, trajectory: Trajectory) -> List[Anomaly]:
        """Run every rule against one trajectory"""
        if len(trajectory.points) < 2:
            return []

        anomalies: List[Anomaly] = []

        if self.detect_sudden_stop(trajectory):
            anomalies.append(create_anomaly(
                trajectory, AnomalyType.SUDDEN_STOP, AnomalySeverity.HIGH, 1
            ))

        if self.detect_circular_route(trajectory):
            anomalies.append(create_anomaly(
                trajectory, AnomalyType.CIRCULAR_ROUTE, AnomalySeverity.MEDIUM, 1
            ))

        deviation = self.route_deviation_score(trajectory)
        if deviation > 0:
            anomalies.append(create_anomaly(
                trajectory, AnomalyType.ROUTE_DEVIATION, AnomalySeverity.LOW, deviation
            ))

        if self.detect_zigzag(trajectory):
            anomalies.append(create_anomaly(
                trajectory, AnomalyType.ZIGZAG, AnomalySeverity.MEDIUM, 1
            ))

        return anomalies

    def detect_sudden_stop(self, trajectory: Trajectory) -> bool:
        """
        Rapid deceleration to (near) standstill away from the route ends

        The stop point must be neither the first nor the last point.
        """
        points = trajectory.points
        last_index = len(points) - 1

        for i in range(1, len(points)):
            p1, p2 = points[i - 1], points[i]
            time_diff = p2.timestamp - p1.timestamp
            if time_diff == 0:
                continue

            deceleration = (p2.speed - p1.speed) / time_diff
            if deceleration < self.sudden_stop_threshold and p2.speed < self.stop_speed:
                if 0 < i < last_index:
                    return True

        return False

    def detect_circular_route(self, trajectory: Trajectory) -> bool:
        """Route that returns near its start after a long drive"""
        start, end = trajectory.points[0], trajectory.points[-1]
        gap = haversine_km(start.lat, start.lng, end.lat, end.lng)
        return gap < self.circular_distance_km and trajectory.total_distance > self.circular_min_length_km

    def route_deviation_score(self, trajectory: Trajectory) -> float:
        """
        Ratio of driven distance to straight-line distance

        Returns:
            The ratio when it exceeds the deviation factor, otherwise 0
        """
        start, end = trajectory.points[0], trajectory.points[-1]
        straight = haversine_km(start.lat, start.lng, end.lat, end.lng)
        if straight == 0:
            return 0.0

        ratio = trajectory.total_distance / straight
        return ratio if ratio > self.deviation_factor else 0.0

    def count_sharp_turns(self, trajectory: Trajectory) -> int:
        points = trajectory.points
        bearings = [
            calculate_bearing(points[i].lat, points[i].lng, points[i + 1].lat, points[i + 1].lng)
            for i in range(len(points) - 1)
        ]
        return sum(
            1 for i in range(1, len(bearings))
            if bearing_change(bearings[i - 1], bearings[i]) > self.zigzag_angle
        )

    def detect_zigzag(self, trajectory: Trajectory) -> bool:
        return self.count_sharp_turns(trajectory) >= self.zigzag_count


class IsolationForestDetector(OutlierDetector):
    """
    Statistical outliers across the whole trajectory population

    Features per trajectory: average speed, total distance, total duration
    and point count. Scores follow the isolation-forest paper convention
    (values near 1 are anomalous); trajectories above the threshold are
    flagged. Results change whenever the population changes.
    """

    name = 'isolation_forest'

    def __init__(self, config: dict = None):
        config = config or {}
        self.min_trajectories = config.get('minTrajectories', 10)
        self.n_estimators = config.get('trees', 100)
        self.threshold = config.get('threshold', 0.6)
        self.random_state = config.get('randomState', 42)

    @staticmethod
    def featurize(trajectories: Sequence[Trajectory]) -> np.ndarray:
        return np.array([
            [t.avg_speed, t.total_distance, t.total_duration, len(t.points)]
            for t in trajectories
        ], dtype=float)

    def score(self, trajectories: Sequence[Trajectory]) -> Optional[np.ndarray]:
        """
        Anomaly score per trajectory

        Returns:
            Array of scores in (0, 1], or None below the population minimum
        """
        if len(trajectories) < self.min_trajectories:
            return None

        features = self.featurize(trajectories)
        model = IsolationForest(
            n_estimators=self.n_estimators,
            random_state=self.random_state
        )
        model.fit(features)

        # score_samples is the negated paper score
        return -model.score_samples(features)

    def score_trajectories(self, trajectories: Sequence[Trajectory]) -> List[Trajectory]:
        """Copies of the flagged trajectories carrying their anomaly score"""
        scores = self.score(trajectories)
        if scores is None:
            return []

        return [
            trajectory.with_anomaly_score(float(score))
            for trajectory, score in zip(trajectories, scores)
            if score > self.threshold and trajectory.points
        ]

    def detect(self, trajectories: Sequence[Trajectory]) -> List[Anomaly]:
        return [
            create_anomaly(t, AnomalyType.STATISTICAL, AnomalySeverity.HIGH, t.anomaly_score or 0)
            for t in self.score_trajectories(trajectories)
        ]


class RouteClusterDetector(OutlierDetector):
    """
    Route-cluster outlier detection

    Placeholder for a density-clustering pass that flags trajectories far
    from every common route cluster as 'route_cluster_outlier'. No
    clustering algorithm or parameters have been chosen, so it reports
    nothing; substitute a subclass to enable it.
    """

    name = 'route_cluster'

    def detect(self, trajectories: Sequence[Trajectory]) -> List[Anomaly]:
        return []
