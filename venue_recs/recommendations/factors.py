"""
Scoring factors.

Each factor looks at one aspect of a (venue, profile, context) triple and
returns its weighted contribution plus an optional reason. The scorer
adds contributions in a fixed order, so the reason list follows that
order too.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from ..geo.distance import haversine_km
from .config import DEFAULT_SCORING_WEIGHTS, ScoringWeights
from .models import RecommendationContext, UserPreferenceProfile, Venue
from .repositories import UserHistoryRepository

logger = logging.getLogger(__name__)

REASON_CATEGORY = "Matches your preferred category"
REASON_RATING = "Highly rated venue"
REASON_NEARBY = "Close to your location"
REASON_CLUSTER = "In an area you frequent"
REASON_PRICE = "Matches your price preference"
REASON_AMENITY = "Has amenities you prefer"
REASON_SOCIAL = "Popular with people you follow"
REASON_FEATURED = "Featured venue"


@dataclass(frozen=True)
class FactorScore:
    value: float = 0.0
    reason: str | None = None


NO_SCORE = FactorScore()


class ScoringFactor(Protocol):
    name: str

    def evaluate(
        self,
        venue: Venue,
        profile: UserPreferenceProfile,
        context: RecommendationContext,
    ) -> FactorScore: ...


class CategoryFactor:
    name = "category"

    def __init__(self, weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> None:
        self.weights = weights

    def evaluate(
        self, venue: Venue, profile: UserPreferenceProfile, context: RecommendationContext,
    ) -> FactorScore:
        affinity = profile.category_affinity.get(venue.category_id)
        if affinity is None:
            return NO_SCORE
        return FactorScore(affinity * self.weights.category, REASON_CATEGORY)


class RatingFactor:
    name = "rating"

    def __init__(self, weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> None:
        self.weights = weights

    def evaluate(
        self, venue: Venue, profile: UserPreferenceProfile, context: RecommendationContext,
    ) -> FactorScore:
        w = self.weights
        value = (venue.average_rating / 5.0) * w.rating
        if venue.average_rating >= w.rating_boost_threshold:
            return FactorScore(value * w.rating_boost, REASON_RATING)
        return FactorScore(value)


class ProximityFactor:
    name = "proximity"

    def __init__(self, weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> None:
        self.weights = weights

    def evaluate(
        self, venue: Venue, profile: UserPreferenceProfile, context: RecommendationContext,
    ) -> FactorScore:
        if not context.has_location:
            return NO_SCORE
        distance = haversine_km(context.latitude, context.longitude, venue.latitude, venue.longitude)
        max_distance = context.max_distance_km
        value = max(0.0, (max_distance - distance) / max_distance) * self.weights.proximity
        return FactorScore(value, REASON_NEARBY if distance <= self.weights.nearby_km else None)


class LocationClusterFactor:
    """Bonus for the first frequented cluster containing the venue."""

    name = "location_cluster"

    def __init__(self, weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> None:
        self.weights = weights

    def evaluate(
        self, venue: Venue, profile: UserPreferenceProfile, context: RecommendationContext,
    ) -> FactorScore:
        # Only considered alongside proximity, i.e. when the request is located
        if not context.has_location:
            return NO_SCORE
        for cluster in profile.location_clusters:
            distance = haversine_km(cluster.latitude, cluster.longitude, venue.latitude, venue.longitude)
            if distance <= cluster.radius_km:
                value = (cluster.weight / self.weights.cluster_weight_scale) * self.weights.cluster
                return FactorScore(value, REASON_CLUSTER)
        return NO_SCORE


class PriceFactor:
    name = "price"

    def __init__(self, weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> None:
        self.weights = weights

    def evaluate(
        self, venue: Venue, profile: UserPreferenceProfile, context: RecommendationContext,
    ) -> FactorScore:
        if venue.price_range and venue.price_range in profile.price_affinity:
            return FactorScore(self.weights.price, REASON_PRICE)
        return NO_SCORE


class AmenityFactor:
    name = "amenity"

    def __init__(self, weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> None:
        self.weights = weights

    def evaluate(
        self, venue: Venue, profile: UserPreferenceProfile, context: RecommendationContext,
    ) -> FactorScore:
        if not profile.amenity_affinity:
            return NO_SCORE
        matches = len(profile.amenity_affinity & set(venue.amenities))
        if matches == 0:
            return NO_SCORE
        value = (matches / len(profile.amenity_affinity)) * self.weights.amenity
        return FactorScore(value, REASON_AMENITY)


class SocialFactor:
    """Share of followed users who reviewed the venue positively."""

    name = "social"

    def __init__(
        self,
        history_repo: UserHistoryRepository,
        weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS,
    ) -> None:
        self.history_repo = history_repo
        self.weights = weights

    def evaluate(
        self, venue: Venue, profile: UserPreferenceProfile, context: RecommendationContext,
    ) -> FactorScore:
        if not profile.social_graph:
            return NO_SCORE
        try:
            positive = self.history_repo.query_positive_review_count_from_users(
                venue.id, sorted(profile.social_graph),
            )
        except Exception:
            logger.warning(
                "Social signal lookup failed for venue %s, scoring it as 0", venue.id, exc_info=True,
            )
            return NO_SCORE
        signal = positive / len(profile.social_graph)
        if signal <= 0:
            return NO_SCORE
        return FactorScore(signal * self.weights.social, REASON_SOCIAL)


class FeaturedFactor:
    name = "featured"

    def __init__(self, weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> None:
        self.weights = weights

    def evaluate(
        self, venue: Venue, profile: UserPreferenceProfile, context: RecommendationContext,
    ) -> FactorScore:
        if venue.is_featured:
            return FactorScore(self.weights.featured, REASON_FEATURED)
        return NO_SCORE


class ContextFactor:
    """Time-of-day and group-size nudges. Contributes no reason text."""

    name = "context"

    def __init__(self, weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> None:
        self.weights = weights

    def evaluate(
        self, venue: Venue, profile: UserPreferenceProfile, context: RecommendationContext,
    ) -> FactorScore:
        w = self.weights
        value = 0.0

        if context.time_of_day == "evening" and venue.category_id == w.nightlife_category_id:
            value += w.time_of_day
        elif context.time_of_day == "morning" and venue.category_id == w.cafe_category_id:
            value += w.time_of_day

        if (
            context.group_size is not None
            and context.group_size > w.large_group_size
            and venue.price_range != w.top_price_tier
        ):
            value += w.group

        return FactorScore(value)


def default_factors(
    history_repo: UserHistoryRepository,
    weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS,
) -> list[ScoringFactor]:
    return [
        CategoryFactor(weights),
        RatingFactor(weights),
        ProximityFactor(weights),
        LocationClusterFactor(weights),
        PriceFactor(weights),
        AmenityFactor(weights),
        SocialFactor(history_repo, weights),
        FeaturedFactor(weights),
        ContextFactor(weights),
    ]
