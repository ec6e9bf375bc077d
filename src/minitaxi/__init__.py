"""Pickup/dropoff trip estimation: route acquisition and fare computation."""

from minitaxi.fare import compute_fare
from minitaxi.geo.coordinate import Coordinate
from minitaxi.geo.distance import distance
from minitaxi.geo.provider import RouteProvider
from minitaxi.geo.route import RouteArtifact, RouteSource
from minitaxi.geo.synthesizer import synthesize
from minitaxi.profiles import VehicleProfile
from minitaxi.trip_session import SessionEvent, TripPhase, TripSession

__all__ = [
    "Coordinate",
    "RouteArtifact",
    "RouteProvider",
    "RouteSource",
    "SessionEvent",
    "TripPhase",
    "TripSession",
    "VehicleProfile",
    "compute_fare",
    "distance",
    "synthesize",
]
