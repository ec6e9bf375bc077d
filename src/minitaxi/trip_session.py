"""Trip session state machine."""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from uuid import uuid4

from minitaxi.core.correlation import with_correlation, with_session
from minitaxi.core.exceptions import GeolocationError, InvalidPhaseTransition
from minitaxi.fare import compute_fare
from minitaxi.geo.coordinate import Coordinate
from minitaxi.geo.geolocation import PositionOptions, PositionSource, locate
from minitaxi.geo.provider import RouteProvider
from minitaxi.geo.route import RouteArtifact
from minitaxi.profiles import DEFAULT_PROFILE, VehicleProfile

logger = logging.getLogger(__name__)


class TripPhase(str, Enum):
    """Trip setup lifecycle phases."""

    AWAITING_PICKUP = "awaiting_pickup"
    AWAITING_DROPOFF = "awaiting_dropoff"
    ROUTE_READY = "route_ready"


# reset() is allowed from every phase and bypasses this table
VALID_TRANSITIONS: dict[TripPhase, set[TripPhase]] = {
    TripPhase.AWAITING_PICKUP: {TripPhase.AWAITING_DROPOFF},
    TripPhase.AWAITING_DROPOFF: {TripPhase.ROUTE_READY},
    TripPhase.ROUTE_READY: set(),
}


class SessionEvent(str, Enum):
    PICKUP_SET = "pickup_set"
    ROUTE_REQUESTED = "route_requested"
    ROUTE_READY = "route_ready"
    ROUTE_FAILED = "route_failed"
    PROFILE_CHANGED = "profile_changed"
    RESET = "reset"


SessionListener = Callable[[SessionEvent, "TripSession"], None]


class TripSession:
    """Holds one trip being set up and drives pickup → dropoff → route.

    Route requests are serialized and numbered; only the result of the most
    recent request is committed, and reset() discards whatever is in flight.
    """

    def __init__(
        self,
        provider: RouteProvider,
        profile: VehicleProfile = DEFAULT_PROFILE,
        *,
        retain_profile_on_reset: bool = False,
        session_id: str | None = None,
    ):
        self.session_id = session_id or str(uuid4())
        self._provider = provider
        self._default_profile = profile
        self._retain_profile_on_reset = retain_profile_on_reset

        self._phase = TripPhase.AWAITING_PICKUP
        self._profile = profile
        self._pickup: Coordinate | None = None
        self._dropoff: Coordinate | None = None
        self._pending_dropoff: Coordinate | None = None
        self._route: RouteArtifact | None = None

        self._generation = 0
        self._fetch_lock = asyncio.Lock()
        self._listeners: list[SessionListener] = []

    @property
    def phase(self) -> TripPhase:
        return self._phase

    @property
    def profile(self) -> VehicleProfile:
        return self._profile

    @property
    def pickup(self) -> Coordinate | None:
        return self._pickup

    @property
    def dropoff(self) -> Coordinate | None:
        return self._dropoff

    @property
    def pending_dropoff(self) -> Coordinate | None:
        return self._pending_dropoff

    @property
    def current_route(self) -> RouteArtifact | None:
        return self._route

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a transition listener. Returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            listener(event, self)

    def _transition_to(self, new_phase: TripPhase) -> None:
        if new_phase not in VALID_TRANSITIONS[self._phase]:
            raise InvalidPhaseTransition(
                f"Invalid transition from {self._phase.value} to {new_phase.value}",
                details={"phase": self._phase.value, "target": new_phase.value},
            )
        self._phase = new_phase

    def set_pickup(self, coordinate: Coordinate) -> None:
        if self._phase != TripPhase.AWAITING_PICKUP:
            raise InvalidPhaseTransition(
                f"Cannot set pickup while {self._phase.value}",
                details={"phase": self._phase.value},
            )
        self._pickup = coordinate
        self._transition_to(TripPhase.AWAITING_DROPOFF)
        with with_session(self.session_id):
            logger.info(f"Pickup set to {coordinate}")
        self._emit(SessionEvent.PICKUP_SET)

    async def set_dropoff(self, coordinate: Coordinate) -> RouteArtifact | None:
        """Set the dropoff and resolve the route.

        The session stays in AWAITING_DROPOFF until the route arrives; dropoff
        and route are then committed together. Returns None if a later request
        or a reset superseded this one.
        """
        if self._phase != TripPhase.AWAITING_DROPOFF:
            raise InvalidPhaseTransition(
                f"Cannot set dropoff while {self._phase.value}",
                details={"phase": self._phase.value},
            )
        if self._pending_dropoff is not None:
            raise InvalidPhaseTransition(
                "Dropoff already set, route request in flight",
                details={"phase": self._phase.value},
            )
        self._pending_dropoff = coordinate
        with with_session(self.session_id):
            logger.info(f"Dropoff set to {coordinate}, requesting route")
        self._emit(SessionEvent.ROUTE_REQUESTED)
        return await self._request_route()

    async def set_profile(self, profile: VehicleProfile) -> RouteArtifact | None:
        """Select a vehicle profile; recomputes the route if one is shown or pending."""
        profile = VehicleProfile(profile)
        if profile == self._profile:
            return None

        self._profile = profile
        with with_session(self.session_id):
            logger.info(f"Vehicle profile changed to {profile.value}")
        self._emit(SessionEvent.PROFILE_CHANGED)

        if self._phase == TripPhase.ROUTE_READY or self._pending_dropoff is not None:
            self._emit(SessionEvent.ROUTE_REQUESTED)
            return await self._request_route()
        return None

    def reset(self) -> None:
        # Invalidate any request still in flight
        self._generation += 1
        self._phase = TripPhase.AWAITING_PICKUP
        self._pickup = None
        self._dropoff = None
        self._pending_dropoff = None
        self._route = None
        if not self._retain_profile_on_reset:
            self._profile = self._default_profile
        with with_session(self.session_id):
            logger.info("Trip session reset")
        self._emit(SessionEvent.RESET)

    def current_fare(self) -> int | None:
        """Fare for the committed route, priced at the profile that route was fetched for.

        While a profile change is being recomputed the previous route and its
        fare stay in place; both switch together when the new route commits.
        """
        if self._phase != TripPhase.ROUTE_READY or self._route is None:
            return None
        return compute_fare(self._route.distance_meters / 1000, self._route.profile)

    async def capture(self, coordinate: Coordinate) -> RouteArtifact | None:
        """Handle a map click: pickup first, then dropoff, ignored once the route is ready."""
        if self._phase == TripPhase.AWAITING_PICKUP:
            self.set_pickup(coordinate)
            return None
        if self._phase == TripPhase.AWAITING_DROPOFF:
            if self._pending_dropoff is not None:
                logger.debug("Ignoring map click while route request is in flight")
                return None
            return await self.set_dropoff(coordinate)
        return None

    async def use_current_location(
        self, source: PositionSource | None, options: PositionOptions | None = None
    ) -> Coordinate | None:
        """Pre-fill the pickup from the device position. Failures leave the trip untouched."""
        if self._phase != TripPhase.AWAITING_PICKUP:
            return None

        with with_session(self.session_id):
            try:
                coordinate = await locate(source, options)
            except GeolocationError as e:
                logger.info(f"Could not get user location: {e.message}")
                return None

            if self._phase != TripPhase.AWAITING_PICKUP:
                logger.debug("Discarding position fix, pickup already chosen")
                return None

        self.set_pickup(coordinate)
        return coordinate

    def _abandon_request(self) -> None:
        """Release a dropoff whose route request failed so it can be chosen again."""
        self._pending_dropoff = None
        with with_session(self.session_id):
            logger.warning("Route request failed, dropoff released")
        self._emit(SessionEvent.ROUTE_FAILED)

    async def _request_route(self) -> RouteArtifact | None:
        self._generation += 1
        generation = self._generation
        pickup = self._pickup
        dropoff = self._pending_dropoff if self._pending_dropoff is not None else self._dropoff

        async with self._fetch_lock:
            if generation != self._generation:
                return None
            profile = self._profile
            try:
                with (
                    with_session(self.session_id),
                    with_correlation(f"{self.session_id}:{generation}"),
                ):
                    route = await self._provider.fetch_route(pickup, dropoff, profile)
            except BaseException:
                if generation == self._generation:
                    self._abandon_request()
                raise

        if generation != self._generation:
            with with_session(self.session_id):
                logger.debug(f"Discarding stale route from request {generation}")
            return None

        if self._pending_dropoff is not None:
            self._dropoff = self._pending_dropoff
            self._pending_dropoff = None
            self._transition_to(TripPhase.ROUTE_READY)
        self._route = route
        with with_session(self.session_id):
            logger.info(
                f"Route ready: {route.distance_km:.2f} km, {route.duration_minutes:.0f} min "
                f"({'straight line' if route.is_synthetic else 'road network'})"
            )
        self._emit(SessionEvent.ROUTE_READY)
        return route
