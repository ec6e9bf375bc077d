"""Route artifacts produced by a routing attempt."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from minitaxi.geo.coordinate import Coordinate
from minitaxi.profiles import VehicleProfile


class RouteSource(str, Enum):
    """Where a route artifact came from."""

    REAL = "real"
    SYNTHETIC = "synthetic"


class RouteArtifact(BaseModel):
    """Distance, duration and path of one route request. Never mutated."""

    model_config = ConfigDict(frozen=True)

    profile: VehicleProfile
    distance_meters: float = Field(ge=0)
    duration_seconds: float = Field(ge=0)
    path: tuple[Coordinate, ...] = Field(min_length=2)
    source: RouteSource

    @property
    def distance_km(self) -> float:
        return self.distance_meters / 1000.0

    @property
    def duration_minutes(self) -> float:
        return self.duration_seconds / 60.0

    @property
    def is_synthetic(self) -> bool:
        return self.source == RouteSource.SYNTHETIC
