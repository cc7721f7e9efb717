"""
Geo Utilities

Pure geometry helpers shared by the ingestor, anomaly rules and
recommendation scorer.

Features:
- Haversine great-circle distance (km)
- Initial bearing / azimuth (degrees, 0-360)
- H3 cell indexing and cell centers
"""

import math
from typing import Tuple

import h3


EARTH_RADIUS_KM = 6371.0

# Errors raised by h3 when a coordinate cannot be indexed
CELL_MAPPING_ERRORS = (ValueError, TypeError, h3.H3BaseException)

# Default H3 resolution for the demand grid (~0.7 km^2 hexagons)
DEFAULT_H3_RESOLUTION = 8


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance between two points

    Args:
        lat1, lng1: First point (degrees)
        lat2, lng2: Second point (degrees)

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lng = math.radians(lng2 - lng1)

    a = math.sin(delta_lat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def calculate_bearing(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Initial bearing from point 1 to point 2

    Returns:
        Azimuth in degrees, normalized to [0, 360)
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lng = math.radians(lng2 - lng1)

    y = math.sin(delta_lng) * math.cos(lat2_rad)
    x = math.cos(lat1_rad) * math.sin(lat2_rad) - math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lng)

    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360) % 360


def bearing_change(b1: float, b2: float) -> float:
    """Absolute heading change between two bearings, wrapped into [0, 180]"""
    diff = abs(b2 - b1) % 360
    if diff > 180:
        diff = 360 - diff
    return diff


def latlng_to_cell(lat: float, lng: float, resolution: int = DEFAULT_H3_RESOLUTION) -> str:
    """Map a coordinate to its H3 cell id"""
    return h3.latlng_to_cell(lat, lng, resolution)


def cell_center(cell_id: str) -> Tuple[float, float]:
    """Get (lat, lng) of an H3 cell center"""
    lat, lng = h3.cell_to_latlng(cell_id)
    return lat, lng
