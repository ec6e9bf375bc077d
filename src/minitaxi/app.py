"""Wiring for a ready-to-use trip session."""

import logging

from minitaxi.geo.provider import RouteProvider
from minitaxi.settings import Settings, get_settings
from minitaxi.taxi_logging import setup_logging
from minitaxi.trip_session import TripSession

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    setup_logging(
        level=settings.logging.level,
        json_output=settings.logging.format == "json",
        environment=settings.logging.environment,
        secrets=[settings.ors.api_key],
    )


def create_session(settings: Settings | None = None, *, configure_logs: bool = True) -> TripSession:
    """Build a TripSession from environment settings."""
    if settings is None:
        settings = get_settings()
    if configure_logs:
        configure_logging(settings)

    provider = RouteProvider.from_settings(settings.ors)
    session = TripSession(
        provider,
        settings.trip.default_profile,
        retain_profile_on_reset=settings.trip.retain_profile_on_reset,
    )
    logger.info(
        f"Trip session {session.session_id} created "
        f"(remote routing {'enabled' if provider.is_remote_enabled else 'disabled'})"
    )
    return session
