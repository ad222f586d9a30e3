from __future__ import annotations

from typing import Iterable

import pytest

from venue_recs.recommendations.models import (
    CheckinHistoryRow,
    RecommendationContext,
    ReviewHistoryRow,
    UserPreferenceProfile,
    Venue,
)

SF_LAT, SF_LNG = 37.7749, -122.4194


class FakeHistoryRepo:
    """In-memory history collaborator with canned rows per user."""

    def __init__(
        self,
        reviews: dict[int, list[ReviewHistoryRow]] | None = None,
        checkins: dict[int, list[CheckinHistoryRow]] | None = None,
        follows: dict[int, list[int]] | None = None,
        positive_counts: dict[int, int] | None = None,
        known_users: set[int] | None = None,
    ) -> None:
        self.reviews = reviews or {}
        self.checkins = checkins or {}
        self.follows = follows or {}
        self.positive_counts = positive_counts or {}
        self.known_users = known_users

    def user_exists(self, user_id: int) -> bool:
        return self.known_users is None or user_id in self.known_users

    def query_user_review_history(self, user_id: int) -> list[ReviewHistoryRow]:
        return self.reviews.get(user_id, [])

    def query_user_checkin_history(self, user_id: int) -> list[CheckinHistoryRow]:
        return self.checkins.get(user_id, [])

    def query_user_follows(self, user_id: int) -> list[int]:
        return self.follows.get(user_id, [])

    def query_positive_review_count_from_users(self, venue_id: int, user_ids: Iterable[int]) -> int:
        return self.positive_counts.get(venue_id, 0)


class FakeVenueRepo:
    def __init__(self, venues: list[Venue]) -> None:
        self.venues = venues

    def get_venue(self, venue_id: int) -> Venue | None:
        return next((v for v in self.venues if v.id == venue_id), None)

    def query_candidate_venues(self, context, profile) -> list[Venue]:
        return list(self.venues)

    def venues_within(self, latitude: float, longitude: float, radius_km: float) -> list[Venue]:
        return list(self.venues)


def make_venue(**overrides) -> Venue:
    data = {
        "id": 1,
        "name": "Test Venue",
        "category_id": 7,
        "price_range": "$$",
        "average_rating": 3.0,
        "latitude": SF_LAT,
        "longitude": SF_LNG,
        "amenities": [],
        "is_featured": False,
    }
    data.update(overrides)
    return Venue(**data)


@pytest.fixture
def empty_profile() -> UserPreferenceProfile:
    return UserPreferenceProfile(user_id=1)


@pytest.fixture
def full_profile() -> UserPreferenceProfile:
    return UserPreferenceProfile(
        user_id=1,
        category_affinity={7: 1.0},
        price_affinity={"$$"},
        amenity_affinity={"wifi", "parking"},
        average_rating_given=4.2,
    )


@pytest.fixture
def context() -> RecommendationContext:
    return RecommendationContext(user_id=1, limit=10)


@pytest.fixture
def located_context() -> RecommendationContext:
    return RecommendationContext(
        user_id=1, latitude=SF_LAT, longitude=SF_LNG, max_distance_km=10.0, limit=10,
    )
