"""
Grid API Routes

Endpoints:
- GET /api/grid - Current H3 cells with store metadata
- GET /api/kpi - Operational KPIs for the current grid
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from geoos.engine import GeoEngine, get_engine

router = APIRouter(prefix="/api", tags=["grid"])


@router.get("/grid")
async def get_grid(engine: GeoEngine = Depends(get_engine)):
    """
    Get the demand grid

    Each cell carries its H3 id, trip count, mean speed, wait proxy and
    center coordinates.
    """
    state = engine.get_state_info()
    cells = engine.get_grid()

    return {
        "grid": [cell.to_dict() for cell in cells],
        "metadata": {
            "totalCells": len(cells),
            "trajectories": state['trajectoriesSize'],
            "lastUpdate": datetime.fromtimestamp(state['lastUpdate'], tz=timezone.utc).isoformat(),
            "sampleKeys": state['gridKeys']
        }
    }


@router.get("/kpi")
async def get_kpis(engine: GeoEngine = Depends(get_engine)):
    """Get KPIs (all zeros before the first ingestion)"""
    return engine.get_kpis().to_dict()
