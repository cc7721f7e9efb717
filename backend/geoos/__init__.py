"""
GeoOS Fleet Analytics Engine
Backend Application Package

Reconstructs vehicle trajectories from GPS probe batches, aggregates them
into an H3 hexagonal grid and derives KPIs, anomalies, demand forecasts,
relocation recommendations and rebalancing simulations.
"""

__version__ = "1.0.0"
__author__ = "GeoOS Team"
