import asyncio
from typing import Any

import httpx
import polyline
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from minitaxi.core.exceptions import (
    ConfigurationError,
    NetworkError,
    RouteFetchFailed,
    ServiceUnavailableError,
)
from minitaxi.geo.coordinate import Coordinate
from minitaxi.profiles import VehicleProfile


class RouteResponse(BaseModel):
    distance_meters: float = Field(ge=0)
    duration_seconds: float = Field(ge=0)
    geometry: list[Coordinate] = Field(min_length=2)


class ORSServiceError(RouteFetchFailed, ServiceUnavailableError):
    """Transport failure or non-success status from OpenRouteService."""

    pass


class ORSTimeoutError(RouteFetchFailed, NetworkError):
    """OpenRouteService did not answer within the deadline."""

    pass


class MalformedRouteError(RouteFetchFailed):
    """Response body lacks a usable route geometry or segment summary."""

    pass


def decode_polyline(encoded: str, precision: int = 5) -> list[tuple[float, float]]:
    """Decode polyline string to list of (lat, lon) tuples."""
    coords = polyline.decode(encoded, precision)
    return [(lat, lon) for lat, lon in coords]


def _parse_geojson(data: dict[str, Any]) -> tuple[list[tuple[float, float]], dict[str, Any]]:
    feature = data["features"][0]
    # GeoJSON positions are [lon, lat] with an optional elevation
    points = [(pos[1], pos[0]) for pos in feature["geometry"]["coordinates"]]
    segment = feature["properties"]["segments"][0]
    return points, segment


def _parse_json(data: dict[str, Any]) -> tuple[list[tuple[float, float]], dict[str, Any]]:
    route = data["routes"][0]
    geometry = route["geometry"]
    if isinstance(geometry, str):
        points = decode_polyline(geometry)
    else:
        points = [(pos[1], pos[0]) for pos in geometry["coordinates"]]
    segment = route["segments"][0]
    return points, segment


def parse_route(data: Any) -> RouteResponse:
    """Normalize a GeoJSON or JSON directions response.

    Raises:
        MalformedRouteError: when geometry or ``segments[0]`` is missing or unusable
    """
    try:
        if "features" in data:
            points, segment = _parse_geojson(data)
        else:
            points, segment = _parse_json(data)

        if len(points) < 2:
            raise MalformedRouteError(
                f"Route geometry has {len(points)} point(s), need at least 2"
            )

        return RouteResponse(
            distance_meters=float(segment["distance"]),
            duration_seconds=float(segment["duration"]),
            geometry=[Coordinate.of(lat, lon) for lat, lon in points],
        )
    except MalformedRouteError:
        raise
    except (KeyError, IndexError, TypeError, ValueError, PydanticValidationError) as e:
        raise MalformedRouteError(f"Unusable route response: {e!r}") from e


class ORSClient:
    def __init__(self, base_url: str, api_key: str, timeout: float = 8.0):
        if not api_key or not api_key.strip():
            raise ConfigurationError("OpenRouteService API key is required")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _build_request(
        self, origin: Coordinate, destination: Coordinate, profile: VehicleProfile
    ) -> tuple[str, dict[str, Any], dict[str, str]]:
        url = f"{self.base_url}/{profile.value}"
        body = {
            "coordinates": [origin.as_lonlat(), destination.as_lonlat()],
            "format": "geojson",
            "preference": "fastest",
            "units": "m",
        }
        headers = {
            "Authorization": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        return url, body, headers

    async def get_route(
        self, origin: Coordinate, destination: Coordinate, profile: VehicleProfile
    ) -> RouteResponse:
        """Get a route between two coordinates from OpenRouteService.

        One attempt, bounded by ``timeout`` as an overall deadline on top of
        httpx's per-operation timeouts.
        """
        url, body, headers = self._build_request(origin, destination, profile)

        try:
            async with asyncio.timeout(self.timeout):
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=body, headers=headers)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise ORSTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise ORSServiceError(f"Network error: {e}") from e
        except (httpx.InvalidURL, UnicodeEncodeError) as e:
            # Raised while building the request, e.g. a non-ASCII API key in the header
            raise ORSServiceError(f"Could not build request: {type(e).__name__}") from e

        if not response.is_success:
            raise ORSServiceError(
                f"OpenRouteService error: {response.status_code}",
                details={"status_code": response.status_code, "profile": profile.value},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedRouteError("Response body is not JSON") from e

        return parse_route(data)
