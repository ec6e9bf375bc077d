"""Presentation adapter between a TripSession and a map widget.

The session knows nothing about rendering. SessionPresenter subscribes to
session events and translates them into MapRenderer calls; concrete
renderers (Leaflet bridge, terminal, test double) live outside this package.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from pydantic import BaseModel

from minitaxi.core.exceptions import RouteDisplayFailed
from minitaxi.fare import round_half_up
from minitaxi.geo.coordinate import Coordinate
from minitaxi.geo.route import RouteArtifact, RouteSource
from minitaxi.settings import DisplaySettings
from minitaxi.trip_session import SessionEvent, TripPhase, TripSession

logger = logging.getLogger(__name__)

STATUS_PICKUP = "Click to set pickup location"
STATUS_DROPOFF = "Click to set dropoff location"
STATUS_CALCULATING = "Calculating route..."
STATUS_ROUTE_READY = "Route calculated successfully!"
STATUS_ROUTE_SIMPLIFIED = "Route displayed (simplified)"
MESSAGE_DISPLAY_FAILED = "Failed to display route. Please try again."


class RouteInfo(BaseModel):
    distance_km: float
    eta_minutes: int
    fare: int
    currency_symbol: str = "₹"
    source: RouteSource

    @classmethod
    def from_route(cls, route: RouteArtifact, fare: int, currency_symbol: str = "₹") -> "RouteInfo":
        return cls(
            distance_km=route.distance_km,
            eta_minutes=round_half_up(route.duration_minutes),
            fare=fare,
            currency_symbol=currency_symbol,
            source=route.source,
        )

    @property
    def distance_text(self) -> str:
        return f"{self.distance_km:.2f} km"

    @property
    def eta_text(self) -> str:
        return f"{self.eta_minutes} min"

    @property
    def fare_text(self) -> str:
        return f"{self.currency_symbol}{self.fare}"


class MapRenderer(Protocol):
    def show_markers(self, pickup: Coordinate | None, dropoff: Coordinate | None) -> None: ...

    def show_route(self, path: Sequence[Coordinate]) -> None:
        """Draw the route path. Raises RouteDisplayFailed if it cannot."""
        ...

    def show_straight_line(self, pickup: Coordinate, dropoff: Coordinate) -> None: ...

    def clear_route(self) -> None: ...

    def show_route_info(self, info: RouteInfo | None) -> None: ...

    def show_status(self, text: str) -> None: ...

    def notify(self, message: str, duration_seconds: float) -> None:
        """Show a transient, auto-dismissing notification."""
        ...


class SessionPresenter:
    def __init__(
        self,
        session: TripSession,
        renderer: MapRenderer,
        settings: DisplaySettings | None = None,
    ):
        self.session = session
        self.renderer = renderer
        self.settings = settings or DisplaySettings()
        self._unsubscribe: Callable[[], None] | None = session.subscribe(self.on_event)
        self.renderer.show_status(self._phase_status())

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _phase_status(self) -> str:
        if self.session.phase == TripPhase.AWAITING_PICKUP:
            return STATUS_PICKUP
        if self.session.phase == TripPhase.AWAITING_DROPOFF:
            return STATUS_DROPOFF
        return STATUS_ROUTE_READY

    def on_event(self, event: SessionEvent, session: TripSession) -> None:
        if event == SessionEvent.PICKUP_SET:
            self.renderer.show_markers(session.pickup, None)
            self.renderer.show_status(STATUS_DROPOFF)
        elif event == SessionEvent.ROUTE_REQUESTED:
            dropoff = session.pending_dropoff
            if dropoff is None:
                dropoff = session.dropoff
            self.renderer.show_markers(session.pickup, dropoff)
            self.renderer.show_status(STATUS_CALCULATING)
        elif event == SessionEvent.ROUTE_READY:
            self._render_route(session)
        elif event == SessionEvent.ROUTE_FAILED:
            self.renderer.show_markers(session.pickup, session.dropoff)
            self.renderer.show_status(self._phase_status())
        elif event == SessionEvent.RESET:
            self.renderer.clear_route()
            self.renderer.show_markers(None, None)
            self.renderer.show_route_info(None)
            self.renderer.show_status(STATUS_PICKUP)

    def _render_route(self, session: TripSession) -> None:
        route = session.current_route
        fare = session.current_fare()
        if route is None or fare is None:
            return

        self.renderer.clear_route()
        try:
            self.renderer.show_route(route.path)
            status = STATUS_ROUTE_READY
        except RouteDisplayFailed as e:
            logger.warning(f"Error displaying route, drawing straight line: {e.message}")
            self.renderer.notify(MESSAGE_DISPLAY_FAILED, self.settings.notification_seconds)
            self.renderer.show_straight_line(route.path[0], route.path[-1])
            status = STATUS_ROUTE_SIMPLIFIED

        self.renderer.show_route_info(
            RouteInfo.from_route(route, fare, self.settings.currency_symbol)
        )
        self.renderer.show_status(status)
