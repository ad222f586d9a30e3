from __future__ import annotations

import logging
import time

from ..errors import UserNotFoundError, VenueNotFoundError
from .cache import ProfileCache
from .config import (
    DEFAULT_RECOMMENDATION_CONFIG,
    DEFAULT_SCORING_WEIGHTS,
    RecommendationConfig,
    ScoringWeights,
)
from .models import RecommendationContext, RecommendationResult, UserPreferenceProfile, Venue
from .preferences import PreferenceExtractor
from .repositories import UserHistoryRepository, VenueRepository
from .scorer import RecommendationScorer, rank
from .similar import find_similar

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """Entry point used by the request-handling layer."""

    def __init__(
        self,
        venue_repo: VenueRepository,
        history_repo: UserHistoryRepository,
        config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
        weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS,
    ) -> None:
        self.venue_repo = venue_repo
        self.history_repo = history_repo
        self.config = config
        self.extractor = PreferenceExtractor(history_repo)
        self.scorer = RecommendationScorer(history_repo, weights)
        self.profile_cache = ProfileCache(ttl=config.profile_cache_ttl)

    def get_user_preferences(self, user_id: int) -> UserPreferenceProfile:
        if not self.history_repo.user_exists(user_id):
            raise UserNotFoundError(f"user {user_id} not found")

        cached = self.profile_cache.get(user_id)
        if cached is not None:
            return cached

        profile = self.extractor.extract(user_id)
        # Degraded profiles are not cached so the next request retries
        if not profile.unavailable_segments:
            self.profile_cache.set(user_id, profile)
        return profile

    def get_personalized_recommendations(
        self, context: RecommendationContext,
    ) -> list[RecommendationResult]:
        start_time = time.time()

        profile = self.get_user_preferences(context.user_id)
        candidates = self.venue_repo.query_candidate_venues(context, profile)
        scored = self.scorer.score_many(
            candidates, profile, context, max_workers=self.config.max_workers,
        )
        results = rank(scored, context.limit)

        elapsed_ms = round((time.time() - start_time) * 1000, 1)
        logger.info(
            "Recommendations for user %s: %d candidates, %d results in %.1f ms",
            context.user_id, len(candidates), len(results), elapsed_ms,
        )
        return results

    def get_similar_venues(self, venue_id: int, limit: int = 10) -> list[Venue]:
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        reference = self.venue_repo.get_venue(venue_id)
        if reference is None:
            raise VenueNotFoundError(f"venue {venue_id} not found")

        radius_km = self.config.similar_radius_km
        candidates = self.venue_repo.venues_within(reference.latitude, reference.longitude, radius_km)
        return find_similar(reference, candidates, limit, radius_km=radius_km)
