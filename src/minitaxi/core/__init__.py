"""Core error types and logging correlation context."""

from .correlation import CorrelationFilter, with_correlation, with_session
from .exceptions import (
    GeolocationError,
    GeolocationTimeout,
    GeolocationUnavailable,
    InvalidPhaseTransition,
    MiniTaxiError,
    RouteDisplayFailed,
    RouteFetchFailed,
)

__all__ = [
    "CorrelationFilter",
    "GeolocationError",
    "GeolocationTimeout",
    "GeolocationUnavailable",
    "InvalidPhaseTransition",
    "MiniTaxiError",
    "RouteDisplayFailed",
    "RouteFetchFailed",
    "with_correlation",
    "with_session",
]
