"""
Pydantic Models Package

HTTP request bodies for the GeoOS API.
"""

from .requests import (
    IngestRequest,
    SimulationRequest,
)

__all__ = [
    "IngestRequest",
    "SimulationRequest",
]
