"""One-shot device position queries with a hard time bound."""

import asyncio
from datetime import UTC, datetime
from typing import Protocol

from pydantic import BaseModel, Field, field_validator

from minitaxi.core.exceptions import GeolocationTimeout, GeolocationUnavailable
from minitaxi.geo.coordinate import Coordinate


class PositionOptions(BaseModel):
    enable_high_accuracy: bool = True
    timeout_seconds: float = Field(default=10.0, gt=0)
    maximum_age_seconds: float = Field(default=60.0, ge=0)


class Position(BaseModel):
    coordinate: Coordinate
    accuracy_meters: float | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # Sources without zone info report UTC
        if v.tzinfo is None or v.utcoffset() is None:
            return v.replace(tzinfo=UTC)
        return v


class PositionSource(Protocol):
    """Device location capability.

    Implementations raise GeolocationUnavailable when permission is denied
    or no fix can be produced.
    """

    async def current_position(self, options: PositionOptions) -> Position: ...


async def locate(
    source: PositionSource | None, options: PositionOptions | None = None
) -> Coordinate:
    """Query the current position once.

    Raises:
        GeolocationUnavailable: no source, or the fix is older than ``maximum_age_seconds``
        GeolocationTimeout: no fix within ``timeout_seconds``
    """
    if options is None:
        options = PositionOptions()
    if source is None:
        raise GeolocationUnavailable("Geolocation is not supported")

    try:
        position = await asyncio.wait_for(
            source.current_position(options), timeout=options.timeout_seconds
        )
    except TimeoutError as e:
        raise GeolocationTimeout(
            f"No position fix within {options.timeout_seconds}s"
        ) from e

    try:
        age = (datetime.now(UTC) - position.timestamp).total_seconds()
    except (AttributeError, TypeError) as e:
        raise GeolocationUnavailable("Position fix has no usable timestamp") from e
    if age > options.maximum_age_seconds:
        raise GeolocationUnavailable(
            f"Position fix is {age:.0f}s old",
            details={"maximum_age_seconds": options.maximum_age_seconds},
        )

    return position.coordinate
