"""Vehicle profiles and their pricing and speed assumptions."""

from enum import Enum


class VehicleProfile(str, Enum):
    """Vehicle categories, valued by their OpenRouteService profile name."""

    CAR = "driving-car"
    BICYCLE = "cycling-regular"
    VAN = "driving-hgv"

    @property
    def rate_per_km(self) -> float:
        return RATE_PER_KM[self]

    @property
    def minutes_per_km(self) -> float:
        return MINUTES_PER_KM[self]


# Currency units per kilometer
RATE_PER_KM: dict[VehicleProfile, float] = {
    VehicleProfile.CAR: 15.0,
    VehicleProfile.BICYCLE: 10.0,
    VehicleProfile.VAN: 20.0,
}

# Average-speed assumption for straight-line estimates; lower is faster
MINUTES_PER_KM: dict[VehicleProfile, float] = {
    VehicleProfile.CAR: 2.0,
    VehicleProfile.BICYCLE: 4.0,
    VehicleProfile.VAN: 2.5,
}

DEFAULT_PROFILE = VehicleProfile.CAR


def resolve_profile(profile: VehicleProfile | str) -> VehicleProfile:
    """Return the matching profile, falling back to the default for unknown names."""
    if isinstance(profile, VehicleProfile):
        return profile
    try:
        return VehicleProfile(profile)
    except ValueError:
        return DEFAULT_PROFILE
