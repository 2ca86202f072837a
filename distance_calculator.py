"""
Great-circle distance and radio horizon calculations.
"""

import math
from typing import Optional, Tuple
from config import EARTH_RADIUS_KM, FEET_TO_METERS

EARTH_RADIUS_M = EARTH_RADIUS_KM * 1000.0


def great_circle_distance(point1: Tuple[float, float], point2: Tuple[float, float]) -> float:
    """
    Calculate great circle distance between two positions (Haversine formula).

    Args:
        point1: (latitude, longitude) in degrees
        point2: (latitude, longitude) in degrees

    Returns:
        Distance in meters
    """
    lat1 = math.radians(point1[0])
    lon1 = math.radians(point1[1])
    lat2 = math.radians(point2[0])
    lon2 = math.radians(point2[1])

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat/2)**2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon/2)**2
    # Rounding can push a slightly above 1 for antipodal points
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return EARTH_RADIUS_M * c


def radio_horizon(height_m: Optional[float]) -> float:
    """
    Calculate the radio horizon of a single antenna.

    Formula: d = sqrt(2 * R * h)
    where R is Earth radius and h the antenna height, both in km.

    Args:
        height_m: Antenna height above ground in meters (None treated as 0)

    Returns:
        Radio horizon distance in meters
    """
    h_km = max(0.0, (height_m or 0) / 1000.0)
    return math.sqrt(2 * EARTH_RADIUS_KM * h_km) * 1000.0


def feet_to_meters(feet: Optional[float]) -> float:
    """Convert an altitude in feet to meters (None treated as 0)."""
    return (feet or 0) * FEET_TO_METERS


def is_within_radius(center: Tuple[float, float], radius_m: float, point: Tuple[float, float]) -> bool:
    """Check whether a position lies inside a circle (boundary inclusive)."""
    return great_circle_distance(center, point) <= radius_m
