"""Route acquisition with a guaranteed result.

RouteProvider asks OpenRouteService for a real driving route and falls back
to a straight-line estimate on any failure, so callers always get a
RouteArtifact back.
"""

import logging
import time

from minitaxi.core.exceptions import RouteFetchFailed
from minitaxi.geo.coordinate import Coordinate
from minitaxi.geo.ors_client import ORSClient
from minitaxi.geo.route import RouteArtifact, RouteSource
from minitaxi.geo.synthesizer import synthesize
from minitaxi.profiles import VehicleProfile, resolve_profile
from minitaxi.settings import ORSSettings

logger = logging.getLogger(__name__)


class RouteProvider:
    def __init__(self, client: ORSClient | None = None):
        self._client = client

    @classmethod
    def from_settings(cls, settings: ORSSettings) -> "RouteProvider":
        """Build a provider; without a usable API key it only synthesizes."""
        if not settings.has_credential:
            logger.info("No OpenRouteService credential configured, using straight-line routes")
            return cls(client=None)
        return cls(
            ORSClient(
                base_url=settings.base_url,
                api_key=settings.api_key,
                timeout=settings.timeout_seconds,
            )
        )

    @property
    def is_remote_enabled(self) -> bool:
        return self._client is not None

    async def fetch_route(
        self, pickup: Coordinate, dropoff: Coordinate, profile: VehicleProfile | str
    ) -> RouteArtifact:
        """Return a real route when possible, a synthetic one otherwise. Never raises
        for any remote failure; exactly one remote attempt, no caching."""
        resolved = resolve_profile(profile)

        if self._client is None:
            return synthesize(pickup, dropoff, resolved)

        start_time = time.perf_counter()
        try:
            response = await self._client.get_route(pickup, dropoff, resolved)
        except RouteFetchFailed as e:
            logger.warning(
                f"Route request failed for {resolved.value}, using straight-line route: "
                f"{e.message}",
                extra={"profile": resolved.value, "route_source": RouteSource.SYNTHETIC.value},
            )
            return synthesize(pickup, dropoff, resolved)
        except Exception:
            logger.exception(
                f"Unexpected error fetching route for {resolved.value}, using straight-line route",
                extra={"profile": resolved.value, "route_source": RouteSource.SYNTHETIC.value},
            )
            return synthesize(pickup, dropoff, resolved)

        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Route received for {resolved.value}: {response.distance_meters:.0f} m, "
            f"{response.duration_seconds:.0f} s in {latency_ms:.0f} ms",
            extra={"profile": resolved.value, "route_source": RouteSource.REAL.value},
        )
        return RouteArtifact(
            profile=resolved,
            distance_meters=response.distance_meters,
            duration_seconds=response.duration_seconds,
            path=tuple(response.geometry),
            source=RouteSource.REAL,
        )
