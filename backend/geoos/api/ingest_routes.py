"""
Ingest API Routes

Endpoints:
- POST /api/ingest - Ingest a JSON probe batch (replaces the grid)
- POST /api/ingest/sample - Ingest the configured sample CSV
"""

from fastapi import APIRouter, Depends, HTTPException

from geoos.engine import GeoEngine, get_engine
from geoos.models import IngestRequest

router = APIRouter(prefix="/api/ingest", tags=["ingest"])


@router.post("")
async def ingest_batch(request: IngestRequest, engine: GeoEngine = Depends(get_engine)):
    """
    Ingest a batch of probe records

    Invalid rows are counted in `filtered_errors`; the request only fails
    on unexpected errors.
    """
    try:
        result = engine.ingest_records(request.records)
    except Exception as e:
        print(f"[ERROR] Ingestion failed: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to process data: {e}")

    return {
        "message": "Data ingested successfully",
        **result.to_dict()
    }


@router.post("/sample")
async def ingest_sample(engine: GeoEngine = Depends(get_engine)):
    """Ingest the sample CSV shipped with the backend"""
    try:
        result = engine.ingest_csv()
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {
        "message": "Sample data ingested successfully",
        **result.to_dict()
    }
