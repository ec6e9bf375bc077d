from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A WGS84 point. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

    @classmethod
    def of(cls, latitude: float, longitude: float) -> "Coordinate":
        return cls(latitude=latitude, longitude=longitude)

    def as_tuple(self) -> tuple[float, float]:
        """Return ``(lat, lon)``."""
        return self.latitude, self.longitude

    def as_lonlat(self) -> list[float]:
        """Return ``[lon, lat]``, the ordering routing services expect."""
        return [self.longitude, self.latitude]

    def __str__(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"
