"""
GeoOS Fleet Analytics Engine
Main FastAPI Application Entry Point

Initializes configuration and the analytics engine, then mounts the API
routers.
"""

import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from geoos import __version__
from geoos.config import get_config
from geoos.engine import GeoEngine, get_engine, init_engine

# Load environment variables
load_dotenv()

START_TIME = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events - startup and shutdown"""
    # Startup
    print("=" * 60)
    print("[STARTUP] GeoOS Fleet Analytics Engine")
    print("=" * 60)

    cfg = get_config()
    print("[OK] Configuration loaded")

    engine = init_engine(cfg.get_engine_config())
    print(f"[OK] Engine initialized (H3 resolution {engine.ingestor.resolution}, "
          f"validator '{engine.ingestor.validator.name}')")

    print("=" * 60)
    print("[SERVER] Ready at http://localhost:8000")
    print("[DOCS] API docs at http://localhost:8000/docs")
    print("[INGEST] Load data with POST /api/ingest or POST /api/ingest/sample")
    print("=" * 60)

    yield

    # Shutdown
    print("[SHUTDOWN] Complete")


api_config = get_config().get_api_config()

# Create FastAPI application
app = FastAPI(
    title=api_config.get("title", "GeoOS Fleet Analytics API"),
    description="GPS probe ingestion, H3 demand grid, anomalies, forecasts and rebalancing",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=api_config.get("corsOrigins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# Include API Routers
# ============================================

from geoos.api import (
    ingest_router,
    grid_router,
    anomaly_router,
    forecast_router,
    simulation_router,
)

# Ingest routes: /api/ingest, /api/ingest/sample
app.include_router(ingest_router)

# Grid routes: /api/grid, /api/kpi
app.include_router(grid_router)

# Anomaly routes: /api/anomalies, /api/safety/scan
app.include_router(anomaly_router)

# Forecast routes: /api/forecast, /api/ml/forecast, /api/recommendations
app.include_router(forecast_router)

# Simulation routes: /api/simulate
app.include_router(simulation_router)


# ============================================
# Root Endpoints
# ============================================

@app.get("/", tags=["root"])
async def root():
    """Root endpoint - API information"""
    return {
        "name": "GeoOS Fleet Analytics Engine",
        "version": __version__,
        "status": "operational",
        "documentation": "/docs",
        "endpoints": {
            "ingest": "/api/ingest",
            "grid": "/api/grid",
            "kpi": "/api/kpi",
            "anomalies": "/api/anomalies",
            "safety": "/api/safety/scan",
            "forecast": "/api/forecast",
            "ml_forecast": "/api/ml/forecast",
            "recommendations": "/api/recommendations",
            "simulate": "/api/simulate"
        }
    }


@app.get("/health", tags=["health"])
async def health_check(engine: GeoEngine = Depends(get_engine)):
    """Health check endpoint"""
    state = engine.get_state_info()
    last_ingest = engine.ingestor.last_result

    return {
        "status": "healthy",
        "timestamp": time.time(),
        "uptime": time.time() - START_TIME,
        "grid": {
            "cells": state['gridSize'],
            "trajectories": state['trajectoriesSize'],
            "ingestions": engine.ingestor.total_ingestions,
            "publishes": state['totalPublishes'],
            "simulations": engine.simulator.total_runs
        },
        "lastIngest": last_ingest.to_dict() if last_ingest else None
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("geoos.main:app", host="0.0.0.0", port=8000, reload=True)
