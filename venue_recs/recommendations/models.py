from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..geo.distance import validate_coordinates
from ..geo.models import LocationCluster
from .config import DEFAULT_RECOMMENDATION_CONFIG

PriceTier = Literal["", "$", "$$", "$$$", "$$$$"]

PRICE_TIERS = [tier for tier in get_args(PriceTier) if tier]

TimeOfDay = Literal["night", "morning", "afternoon", "evening"]


class Venue(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    category_id: int
    subcategory_id: int | None = None
    price_range: PriceTier = Field(default="", description="Empty when unknown")
    average_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    amenities: list[str] = Field(default_factory=list)
    is_featured: bool = False


class ReviewHistoryRow(BaseModel):
    category_id: int
    price_range: str = ""
    amenities: list[str] = Field(default_factory=list)
    rating: float = Field(..., ge=0.0, le=5.0)
    visit_type: str = ""
    count: int = Field(default=1, ge=1)


class CheckinHistoryRow(BaseModel):
    latitude: float
    longitude: float
    hour: int = Field(..., ge=0, le=23)
    count: int = Field(default=1, ge=1)


class UserPreferenceProfile(BaseModel):
    user_id: int
    category_affinity: dict[int, float] = Field(default_factory=dict)
    price_affinity: set[str] = Field(default_factory=set)
    amenity_affinity: set[str] = Field(default_factory=set)
    average_rating_given: float = 0.0
    location_clusters: list[LocationCluster] = Field(default_factory=list)
    active_hours: dict[str, int] = Field(default_factory=dict)
    social_graph: set[int] = Field(default_factory=set)
    unavailable_segments: list[str] = Field(default_factory=list)


class RecommendationContext(BaseModel):
    user_id: int
    latitude: float | None = None
    longitude: float | None = None
    time_of_day: TimeOfDay | None = None
    occasion: str | None = Field(default=None, description="casual, date, business, celebration")
    group_size: int | None = Field(default=None, ge=1)
    max_distance_km: float = Field(
        default=DEFAULT_RECOMMENDATION_CONFIG.default_max_distance_km, gt=0.0,
    )
    limit: int = Field(default=DEFAULT_RECOMMENDATION_CONFIG.default_limit, ge=1)

    @model_validator(mode="after")
    def _check_location(self) -> RecommendationContext:
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        if self.latitude is not None:
            validate_coordinates(self.latitude, self.longitude)
        return self

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class RecommendationResult(BaseModel):
    venue: Venue
    score: float = Field(..., ge=0.0, le=1.0)
    reasons: list[str] = Field(default_factory=list)
