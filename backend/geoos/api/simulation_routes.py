"""
Simulation API Routes

Endpoints:
- POST /api/simulate - Rebalancing simulation on a copy of the grid
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from geoos.engine import GeoEngine, get_engine
from geoos.models import SimulationRequest

router = APIRouter(prefix="/api", tags=["simulation"])


@router.post("/simulate")
async def simulate(
    request: Optional[SimulationRequest] = None,
    engine: GeoEngine = Depends(get_engine)
):
    """
    Simulate relocating a share of supply to recommended cells

    The live grid is never modified. Returns KPIs before and after plus
    their difference.
    """
    request = request or SimulationRequest()
    result = engine.run_simulation(request.targets, request.relocate_share)

    if not result.ok:
        raise HTTPException(status_code=400, detail=result.error)

    return result.to_dict()
