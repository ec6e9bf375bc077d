"""Straight-line route estimates for when no real routing is available."""

from minitaxi.geo.coordinate import Coordinate
from minitaxi.geo.distance import distance
from minitaxi.geo.route import RouteArtifact, RouteSource
from minitaxi.profiles import VehicleProfile, resolve_profile


def synthesize(
    pickup: Coordinate, dropoff: Coordinate, profile: VehicleProfile | str
) -> RouteArtifact:
    """Build a two-point route whose duration follows the profile's speed factor.

    Identical pickup and dropoff produce a zero-length, zero-duration route.
    """
    resolved = resolve_profile(profile)
    distance_km = distance(pickup, dropoff)
    duration_minutes = distance_km * resolved.minutes_per_km

    return RouteArtifact(
        profile=resolved,
        distance_meters=distance_km * 1000,
        duration_seconds=duration_minutes * 60,
        path=(pickup, dropoff),
        source=RouteSource.SYNTHETIC,
    )
