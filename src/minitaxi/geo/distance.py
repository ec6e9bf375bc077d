"""Centralized geographic distance calculations.

This module provides Haversine distance calculations between geographic
coordinates. Used for straight-line route estimates when no real route
is available.
"""

from math import atan2, cos, radians, sin, sqrt

from minitaxi.geo.coordinate import Coordinate

EARTH_RADIUS_KM = 6371.0  # Earth radius in kilometers


def haversine_distance_km(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Calculate the great-circle distance between two points in kilometers.

    Uses the Haversine formula to calculate the shortest distance over
    the Earth's surface between two points specified by latitude/longitude.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees

    Returns:
        Distance between the two points in kilometers
    """
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometers."""
    return haversine_distance_km(a.latitude, a.longitude, b.latitude, b.longitude)
