"""
Forecast API Routes

Endpoints:
- GET /api/forecast - Top-N demand forecasts
- POST /api/ml/forecast - Forecasts for every cell
- GET /api/recommendations - Relocation targets for a query point
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from geoos.engine import GeoEngine, get_engine

router = APIRouter(prefix="/api", tags=["forecast"])


@router.get("/forecast")
async def get_forecast(
    top: int = Query(20, description="Number of cells to return"),
    engine: GeoEngine = Depends(get_engine)
):
    return [entry.to_dict() for entry in engine.get_forecast(top)]


@router.post("/ml/forecast")
async def get_all_forecasts(engine: GeoEngine = Depends(get_engine)):
    """All cell forecasts (horizon and method are not modelled)"""
    return [entry.to_dict() for entry in engine.get_all_forecasts()]


@router.get("/recommendations")
async def get_recommendations(
    lat: Optional[float] = Query(None, description="Query latitude"),
    lng: Optional[float] = Query(None, description="Query longitude"),
    k: int = Query(3, description="Number of recommendations"),
    engine: GeoEngine = Depends(get_engine)
):
    """
    Recommend cells to relocate to

    Cells are ranked by demand / (1 + distance_km) from the query point.
    """
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail="Missing lat or lng parameters")

    return [rec.to_dict() for rec in engine.get_recommendations(lat, lng, k)]
