"""
Anomaly Module

Rule-based, statistical and route-cluster anomaly detection over the
reconstructed trajectory set, plus the safety scan report.

Usage:
    from geoos.anomalies import AnomalyDetector

    detector = AnomalyDetector(store, config)
    anomalies = detector.find_anomalies()
"""

from geoos.anomalies.anomaly import (
    Anomaly,
    AnomalySeverity,
    AnomalyType,
    create_anomaly
)
from geoos.anomalies.detectors import (
    OutlierDetector,
    RuleBasedDetector,
    IsolationForestDetector,
    RouteClusterDetector
)
from geoos.anomalies.anomaly_detector import AnomalyDetector
from geoos.anomalies.safety import (
    build_safety_report,
    generate_safety_recommendations
)


__all__ = [
    'Anomaly',
    'AnomalySeverity',
    'AnomalyType',
    'create_anomaly',
    'OutlierDetector',
    'RuleBasedDetector',
    'IsolationForestDetector',
    'RouteClusterDetector',
    'AnomalyDetector',
    'build_safety_report',
    'generate_safety_recommendations'
]
