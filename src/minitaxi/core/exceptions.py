"""Standardized exception hierarchy for the trip estimator."""

from typing import Any


class MiniTaxiError(Exception):
    """Base exception for all minitaxi errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransientError(MiniTaxiError):
    """Errors caused by an external collaborator that may not recur."""

    pass


class NetworkError(TransientError):
    """Network-related transient errors (timeout, connection refused)."""

    pass


class ServiceUnavailableError(TransientError):
    """External service returned a failure status."""

    pass


class PermanentError(MiniTaxiError):
    """Errors that will not go away by trying again."""

    pass


class StateError(PermanentError):
    """Invalid state transition."""

    pass


class ConfigurationError(PermanentError):
    """Missing or invalid configuration."""

    pass


class RouteFetchFailed(TransientError):
    """A real route could not be obtained. Always recovered by synthesis."""

    pass


class GeolocationError(TransientError):
    """The device position could not be obtained. Never fatal."""

    pass


class GeolocationUnavailable(GeolocationError):
    """No location capability, permission denied, or only a stale fix."""

    pass


class GeolocationTimeout(GeolocationError):
    """No position fix within the configured bound."""

    pass


class InvalidPhaseTransition(StateError):
    """Trip session operation called in a phase that does not allow it."""

    pass


class RouteDisplayFailed(MiniTaxiError):
    """The map renderer could not draw a route."""

    pass
