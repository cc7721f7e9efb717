"""
Anomaly API Routes

Endpoints:
- GET /api/anomalies - Deduplicated anomalies for the current trajectories
- POST /api/safety/scan - Anomaly scan with safety summary
"""

from fastapi import APIRouter, Depends

from geoos.engine import GeoEngine, get_engine

router = APIRouter(prefix="/api", tags=["anomalies"])


@router.get("/anomalies")
async def get_anomalies(engine: GeoEngine = Depends(get_engine)):
    return [anomaly.to_dict() for anomaly in engine.get_anomalies()]


@router.post("/safety/scan")
async def safety_scan(engine: GeoEngine = Depends(get_engine)):
    """
    Run a safety scan

    Returns summary counts (total, high severity, safety score), the
    anomalies found and text recommendations.
    """
    return engine.safety_scan()
