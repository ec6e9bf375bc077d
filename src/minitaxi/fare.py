"""Deterministic fare calculation from distance and vehicle profile."""

import math

from pydantic import BaseModel

from minitaxi.profiles import VehicleProfile, resolve_profile

BASE_FARE = 30


class FareBreakdown(BaseModel):
    """Components of a fare estimate."""

    profile: VehicleProfile
    distance_km: float
    base_fare: float
    rate_per_km: float
    distance_charge: float
    total_fare: int


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class FareCalculator:
    def __init__(self, base_fare: float = BASE_FARE):
        self.base_fare = base_fare

    def calculate(self, distance_km: float, profile: VehicleProfile | str) -> FareBreakdown:
        """Price a trip. Unknown profiles are charged at the car rate."""
        if distance_km < 0:
            raise ValueError(f"distance_km must be non-negative, got {distance_km}")

        resolved = resolve_profile(profile)
        rate = resolved.rate_per_km
        distance_charge = distance_km * rate

        return FareBreakdown(
            profile=resolved,
            distance_km=distance_km,
            base_fare=self.base_fare,
            rate_per_km=rate,
            distance_charge=distance_charge,
            total_fare=round_half_up(self.base_fare + distance_charge),
        )


def compute_fare(distance_km: float, profile: VehicleProfile | str) -> int:
    """Fare in whole currency units for ``distance_km`` with ``profile``."""
    return FareCalculator().calculate(distance_km, profile).total_fare
