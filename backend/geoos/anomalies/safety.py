"""
Safety Scan

Summarize detected anomalies into an operator-facing safety report.
"""

from typing import List

from geoos.anomalies.anomaly import Anomaly, AnomalySeverity, AnomalyType


# More anomalies than this triggers a general driver review
GENERAL_REVIEW_THRESHOLD = 10


def generate_safety_recommendations(anomalies: List[Anomaly]) -> List[str]:
    """
    Turn anomaly types into operator recommendations

    Args:
        anomalies: Detected anomalies

    Returns:
        List of recommendation strings (never empty)
    """
    recommendations = []
    types = {a.type for a in anomalies}

    if AnomalyType.SUDDEN_STOP in types:
        recommendations.append(
            'Review driver behavior for sudden stops. Consider driver coaching.'
        )
    if AnomalyType.ROUTE_DEVIATION in types:
        recommendations.append(
            'Investigate route deviations. Check for road closures or inefficient routing.'
        )
    if len(anomalies) > GENERAL_REVIEW_THRESHOLD:
        recommendations.append(
            'High number of anomalies detected. A general review of driver performance is recommended.'
        )
    if not recommendations:
        recommendations.append(
            'All clear. No specific safety recommendations at this time.'
        )

    return recommendations


def build_safety_report(anomalies: List[Anomaly]) -> dict:
    """
    Safety summary with critical count and score

    safetyScore = 100 - critical / total * 100 (100 with no anomalies)
    """
    total = len(anomalies)
    critical = sum(1 for a in anomalies if a.severity == AnomalySeverity.HIGH)
    safety_score = 100 - (critical / total * 100) if total > 0 else 100.0

    return {
        'summary': {
            'total': total,
            'critical': critical,
            'safetyScore': safety_score
        },
        'anomalies': [a.to_dict() for a in anomalies],
        'recommendations': generate_safety_recommendations(anomalies)
    }
