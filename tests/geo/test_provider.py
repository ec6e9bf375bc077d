import asyncio
import logging

import httpx
import pytest
import respx
from httpx import Response

from minitaxi.fare import compute_fare
from minitaxi.geo.distance import distance
from minitaxi.geo.ors_client import ORSClient
from minitaxi.geo.provider import RouteProvider
from minitaxi.geo.route import RouteSource
from minitaxi.profiles import VehicleProfile
from minitaxi.settings import ORSSettings

BASE_URL = "https://ors.test/v2/directions"


@pytest.fixture
def remote_provider() -> RouteProvider:
    return RouteProvider(ORSClient(base_url=BASE_URL, api_key="test-key", timeout=2.0))


@pytest.fixture
def ors_geojson() -> dict:
    return {
        "features": [
            {
                "properties": {"segments": [{"distance": 2100.0, "duration": 420.0}]},
                "geometry": {
                    "coordinates": [
                        [-74.0060, 40.7128],
                        [-74.0120, 40.7180],
                        [-74.0160, 40.7228],
                    ]
                },
            }
        ]
    }


class TestWithoutCredential:
    async def test_synthesizes_without_network(self, pickup, dropoff):
        provider = RouteProvider.from_settings(ORSSettings(api_key=""))

        async with respx.mock(assert_all_called=False) as mock:
            catch_all = mock.route().mock(return_value=Response(200))
            route = await provider.fetch_route(pickup, dropoff, VehicleProfile.CAR)

        assert not catch_all.called
        assert not provider.is_remote_enabled
        assert route.source == RouteSource.SYNTHETIC

    async def test_placeholder_key_counts_as_missing(self, pickup, dropoff):
        provider = RouteProvider.from_settings(ORSSettings(api_key="YOUR_ORS_API_KEY"))
        assert not provider.is_remote_enabled

    async def test_end_to_end_manhattan_estimate(self, pickup, dropoff):
        """Credential absent: straight line, Haversine distance, car fare."""
        provider = RouteProvider()

        route = await provider.fetch_route(pickup, dropoff, VehicleProfile.CAR)

        assert route.path == (pickup, dropoff)
        assert route.distance_km == pytest.approx(distance(pickup, dropoff))
        assert route.distance_km == pytest.approx(1.395, abs=0.005)
        fare = compute_fare(route.distance_meters / 1000, VehicleProfile.CAR)
        assert fare == 51


class TestRemoteRoute:
    async def test_real_route_returned(self, remote_provider, pickup, dropoff, ors_geojson):
        async with respx.mock:
            respx.post(f"{BASE_URL}/driving-hgv").mock(
                return_value=Response(200, json=ors_geojson)
            )

            route = await remote_provider.fetch_route(pickup, dropoff, VehicleProfile.VAN)

        assert route.source == RouteSource.REAL
        assert route.profile == VehicleProfile.VAN
        assert route.distance_meters == 2100.0
        assert route.duration_seconds == 420.0
        assert len(route.path) == 3

    async def test_single_attempt_per_call(self, remote_provider, pickup, dropoff):
        async with respx.mock:
            route = respx.post(f"{BASE_URL}/driving-car").mock(return_value=Response(503))

            await remote_provider.fetch_route(pickup, dropoff, VehicleProfile.CAR)

        assert route.call_count == 1

    async def test_no_caching(self, remote_provider, pickup, dropoff, ors_geojson):
        async with respx.mock:
            route = respx.post(f"{BASE_URL}/driving-car").mock(
                return_value=Response(200, json=ors_geojson)
            )

            await remote_provider.fetch_route(pickup, dropoff, VehicleProfile.CAR)
            await remote_provider.fetch_route(pickup, dropoff, VehicleProfile.CAR)

        assert route.call_count == 2


class TestFallback:
    async def test_http_500_falls_back(self, remote_provider, pickup, dropoff):
        async with respx.mock:
            respx.post(f"{BASE_URL}/driving-car").mock(
                return_value=Response(500, text="Internal Server Error")
            )

            route = await remote_provider.fetch_route(pickup, dropoff, VehicleProfile.CAR)

        assert route.source == RouteSource.SYNTHETIC
        assert route.path == (pickup, dropoff)

    async def test_timeout_falls_back(self, remote_provider, pickup, dropoff):
        async with respx.mock:
            respx.post(f"{BASE_URL}/cycling-regular").mock(
                side_effect=httpx.TimeoutException("Request timed out")
            )

            route = await remote_provider.fetch_route(pickup, dropoff, VehicleProfile.BICYCLE)

        assert route.source == RouteSource.SYNTHETIC
        assert route.profile == VehicleProfile.BICYCLE
        assert route.duration_seconds == pytest.approx(distance(pickup, dropoff) * 4 * 60)

    async def test_network_error_falls_back(self, remote_provider, pickup, dropoff):
        async with respx.mock:
            respx.post(f"{BASE_URL}/driving-car").mock(
                side_effect=httpx.ConnectError("Connection refused")
            )

            route = await remote_provider.fetch_route(pickup, dropoff, VehicleProfile.CAR)

        assert route.source == RouteSource.SYNTHETIC

    async def test_missing_geometry_falls_back(self, remote_provider, pickup, dropoff):
        async with respx.mock:
            respx.post(f"{BASE_URL}/driving-car").mock(
                return_value=Response(200, json={"type": "FeatureCollection", "features": []})
            )

            route = await remote_provider.fetch_route(pickup, dropoff, VehicleProfile.CAR)

        assert route.source == RouteSource.SYNTHETIC

    async def test_failure_is_logged(self, remote_provider, pickup, dropoff, caplog):
        async with respx.mock:
            respx.post(f"{BASE_URL}/driving-car").mock(return_value=Response(500))

            with caplog.at_level(logging.WARNING, logger="minitaxi.geo.provider"):
                await remote_provider.fetch_route(pickup, dropoff, VehicleProfile.CAR)

        assert any("using straight-line route" in r.getMessage() for r in caplog.records)
        assert all("test-key" not in r.getMessage() for r in caplog.records)

    async def test_non_ascii_credential_falls_back(self, pickup, dropoff):
        provider = RouteProvider.from_settings(ORSSettings(api_key="key’abc"))

        async with respx.mock(assert_all_called=False) as mock:
            mock.route().mock(return_value=Response(200))
            route = await provider.fetch_route(pickup, dropoff, VehicleProfile.CAR)

        assert provider.is_remote_enabled
        assert route.source == RouteSource.SYNTHETIC

    async def test_slow_response_falls_back(self, pickup, dropoff, ors_geojson):
        provider = RouteProvider(ORSClient(base_url=BASE_URL, api_key="test-key", timeout=0.05))

        async def slow_response(request):
            await asyncio.sleep(1)
            return Response(200, json=ors_geojson)

        async with respx.mock:
            respx.post(f"{BASE_URL}/driving-car").mock(side_effect=slow_response)

            route = await provider.fetch_route(pickup, dropoff, VehicleProfile.CAR)

        assert route.source == RouteSource.SYNTHETIC

    async def test_unexpected_client_error_falls_back(self, pickup, dropoff, caplog):
        class BrokenClient:
            async def get_route(self, origin, destination, profile):
                raise RuntimeError("unexpected")

        provider = RouteProvider(BrokenClient())

        with caplog.at_level(logging.ERROR, logger="minitaxi.geo.provider"):
            route = await provider.fetch_route(pickup, dropoff, VehicleProfile.VAN)

        assert route.source == RouteSource.SYNTHETIC
        assert route.profile == VehicleProfile.VAN
        assert any(r.exc_info for r in caplog.records)
