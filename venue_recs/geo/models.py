from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LatLng(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


class Distance(BaseModel):
    meters: float
    kilometers: float
    miles: float


class LocationBounds(BaseModel):
    north_east: LatLng
    south_west: LatLng

    def contains(self, latitude: float, longitude: float) -> bool:
        return (
            self.south_west.latitude <= latitude <= self.north_east.latitude
            and self.south_west.longitude <= longitude <= self.north_east.longitude
        )


class LocationCluster(BaseModel):
    """A frequently visited area, anchored at the first check-in seen in it."""

    latitude: float
    longitude: float
    weight: float = Field(..., ge=0.0)
    radius_km: float = Field(default=2.0, gt=0.0)
