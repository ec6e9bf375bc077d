import os

# Never let a developer's real key leak into tests or trigger network calls.
os.environ.pop("ORS_API_KEY", None)

import asyncio
from collections.abc import Sequence

import pytest

from minitaxi.geo.coordinate import Coordinate
from minitaxi.geo.route import RouteArtifact, RouteSource
from minitaxi.geo.synthesizer import synthesize
from minitaxi.profiles import VehicleProfile


@pytest.fixture
def pickup() -> Coordinate:
    """Lower Manhattan."""
    return Coordinate(latitude=40.7128, longitude=-74.0060)


@pytest.fixture
def dropoff() -> Coordinate:
    return Coordinate(latitude=40.7228, longitude=-74.0160)


class GatedProvider:
    """RouteProvider double whose fetches block until released by the test."""

    def __init__(self) -> None:
        self.calls: list[tuple[Coordinate, Coordinate, VehicleProfile]] = []
        self.gates: list[asyncio.Event] = []

    async def fetch_route(
        self, pickup: Coordinate, dropoff: Coordinate, profile: VehicleProfile
    ) -> RouteArtifact:
        gate = asyncio.Event()
        self.calls.append((pickup, dropoff, profile))
        self.gates.append(gate)
        await gate.wait()
        return synthesize(pickup, dropoff, profile)


@pytest.fixture
def gated_provider() -> GatedProvider:
    return GatedProvider()


class FlakyProvider:
    """RouteProvider double that breaks on its first fetch and recovers afterwards."""

    def __init__(self) -> None:
        self.calls: list[tuple[Coordinate, Coordinate, VehicleProfile]] = []

    async def fetch_route(
        self, pickup: Coordinate, dropoff: Coordinate, profile: VehicleProfile
    ) -> RouteArtifact:
        self.calls.append((pickup, dropoff, profile))
        if len(self.calls) == 1:
            raise RuntimeError("routing backend crashed")
        return synthesize(pickup, dropoff, profile)


@pytest.fixture
def flaky_provider() -> FlakyProvider:
    return FlakyProvider()


class RecordingRenderer:
    """MapRenderer double that records every call."""

    def __init__(self, fail_route: bool = False) -> None:
        self.fail_route = fail_route
        self.calls: list[tuple] = []
        self.statuses: list[str] = []
        self.notifications: list[tuple[str, float]] = []
        self.route_info = None

    def show_markers(self, pickup: Coordinate | None, dropoff: Coordinate | None) -> None:
        self.calls.append(("markers", pickup, dropoff))

    def show_route(self, path: Sequence[Coordinate]) -> None:
        from minitaxi.core.exceptions import RouteDisplayFailed

        if self.fail_route:
            raise RouteDisplayFailed("GeoJSON layer rejected the path")
        self.calls.append(("route", tuple(path)))

    def show_straight_line(self, pickup: Coordinate, dropoff: Coordinate) -> None:
        self.calls.append(("straight_line", pickup, dropoff))

    def clear_route(self) -> None:
        self.calls.append(("clear_route",))

    def show_route_info(self, info) -> None:
        self.route_info = info
        self.calls.append(("route_info", info))

    def show_status(self, text: str) -> None:
        self.statuses.append(text)

    def notify(self, message: str, duration_seconds: float) -> None:
        self.notifications.append((message, duration_seconds))


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def synthetic_route(pickup: Coordinate, dropoff: Coordinate) -> RouteArtifact:
    return RouteArtifact(
        profile=VehicleProfile.CAR,
        distance_meters=10_000.0,
        duration_seconds=1_230.0,
        path=(pickup, dropoff),
        source=RouteSource.SYNTHETIC,
    )
