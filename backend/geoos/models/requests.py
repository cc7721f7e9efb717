"""
Request Models

Pydantic bodies for the GeoOS HTTP endpoints.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional


class IngestRequest(BaseModel):
    """
    Probe batch upload

    Records stay loosely typed: malformed rows are counted by the ingestor
    as filtered errors instead of failing the whole request.
    """
    records: list[dict[str, Any]] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "records": [
                    {"randomized_id": "veh-1", "lat": 51.128, "lng": 71.430, "spd": 32.5, "seq": 1},
                    {"randomized_id": "veh-1", "lat": 51.129, "lng": 71.432, "spd": 30.1, "seq": 2}
                ]
            }
        }


class SimulationRequest(BaseModel):
    """Rebalancing simulation parameters"""
    relocate_share: float = 0.1           # fraction of donor trips, (0, 1]
    targets: Optional[list[str]] = None   # H3 cell ids; default: top recommendations

    class Config:
        json_schema_extra = {
            "example": {"relocate_share": 0.1}
        }
