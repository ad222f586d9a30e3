"""
Collaborator interfaces the recommendation core reads from.

Implementations own storage and query shaping; the core only sees these
methods. ``recommendations.data_store`` ships an in-memory version.
"""
from __future__ import annotations

from typing import Iterable, Protocol

from .models import (
    CheckinHistoryRow,
    RecommendationContext,
    ReviewHistoryRow,
    UserPreferenceProfile,
    Venue,
)


class UserHistoryRepository(Protocol):
    def user_exists(self, user_id: int) -> bool: ...

    def query_user_review_history(self, user_id: int) -> list[ReviewHistoryRow]: ...

    def query_user_checkin_history(self, user_id: int) -> list[CheckinHistoryRow]: ...

    def query_user_follows(self, user_id: int) -> list[int]: ...

    def query_positive_review_count_from_users(
        self, venue_id: int, user_ids: Iterable[int],
    ) -> int: ...


class VenueRepository(Protocol):
    def get_venue(self, venue_id: int) -> Venue | None: ...

    def query_candidate_venues(
        self, context: RecommendationContext, profile: UserPreferenceProfile,
    ) -> list[Venue]: ...

    def venues_within(self, latitude: float, longitude: float, radius_km: float) -> list[Venue]: ...
