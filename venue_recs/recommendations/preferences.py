"""
Preference extraction.

A profile is assembled from three independent segments (reviews,
check-ins, social). Each segment reports whether it succeeded; failed
segments are logged, recorded on the profile and left at their empty
defaults so the remaining segments still contribute.
"""
from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable

from ..geo.clustering import build_clusters, hour_bucket
from .models import UserPreferenceProfile
from .repositories import UserHistoryRepository

logger = logging.getLogger(__name__)

MIN_AFFINITY_COUNT = 2
MAX_RATING = 5.0


@dataclass
class SegmentResult:
    name: str
    data: dict[str, Any] = field(default_factory=dict)
    ok: bool = True
    error: Exception | None = None


class PreferenceExtractor:
    def __init__(self, history_repo: UserHistoryRepository) -> None:
        self.history_repo = history_repo

    def extract(self, user_id: int) -> UserPreferenceProfile:
        segments = [
            self._run_segment("reviews", self._review_segment, user_id),
            self._run_segment("checkins", self._checkin_segment, user_id),
            self._run_segment("social", self._social_segment, user_id),
        ]
        return merge_segments(user_id, segments)

    def _run_segment(
        self,
        name: str,
        extractor: Callable[[int], dict[str, Any]],
        user_id: int,
    ) -> SegmentResult:
        try:
            data = extractor(user_id)
        except Exception as exc:
            logger.warning(
                "Preference segment %r failed for user %s, treating as unavailable",
                name, user_id, exc_info=True,
            )
            return SegmentResult(name=name, ok=False, error=exc)
        logger.debug("Preference segment %r extracted for user %s", name, user_id)
        return SegmentResult(name=name, data=data)

    def _review_segment(self, user_id: int) -> dict[str, Any]:
        rows = self.history_repo.query_user_review_history(user_id)

        category_affinity: dict[int, float] = defaultdict(float)
        price_counts: Counter[str] = Counter()
        amenity_counts: Counter[str] = Counter()
        total_rating = 0.0
        rating_count = 0

        for row in rows:
            # Per-row weight, summed; not (Σ rating·count) / 5
            category_affinity[row.category_id] += row.rating * row.count / MAX_RATING
            if row.price_range:
                price_counts[row.price_range] += row.count
            for amenity in row.amenities:
                amenity_counts[amenity] += row.count
            total_rating += row.rating * row.count
            rating_count += row.count

        return {
            "category_affinity": dict(category_affinity),
            "price_affinity": {p for p, c in price_counts.items() if c >= MIN_AFFINITY_COUNT},
            "amenity_affinity": {a for a, c in amenity_counts.items() if c >= MIN_AFFINITY_COUNT},
            "average_rating_given": total_rating / rating_count if rating_count else 0.0,
        }

    def _checkin_segment(self, user_id: int) -> dict[str, Any]:
        rows = self.history_repo.query_user_checkin_history(user_id)

        active_hours: Counter[str] = Counter()
        for row in rows:
            active_hours[hour_bucket(row.hour)] += row.count

        return {
            "location_clusters": build_clusters((r.latitude, r.longitude, r.count) for r in rows),
            "active_hours": dict(active_hours),
        }

    def _social_segment(self, user_id: int) -> dict[str, Any]:
        return {"social_graph": set(self.history_repo.query_user_follows(user_id))}


def merge_segments(user_id: int, segments: list[SegmentResult]) -> UserPreferenceProfile:
    fields: dict[str, Any] = {}
    unavailable: list[str] = []
    for segment in segments:
        if segment.ok:
            fields.update(segment.data)
        else:
            unavailable.append(segment.name)
    return UserPreferenceProfile(user_id=user_id, unavailable_segments=unavailable, **fields)
