"""
API Routes Package

This module exports all FastAPI routers for the GeoOS engine.
"""

from .ingest_routes import router as ingest_router
from .grid_routes import router as grid_router
from .anomaly_routes import router as anomaly_router
from .forecast_routes import router as forecast_router
from .simulation_routes import router as simulation_router

__all__ = [
    "ingest_router",
    "grid_router",
    "anomaly_router",
    "forecast_router",
    "simulation_router",
]
