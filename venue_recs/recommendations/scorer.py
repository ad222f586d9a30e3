from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from .config import DEFAULT_SCORING_WEIGHTS, ScoringWeights
from .factors import ScoringFactor, default_factors
from .models import RecommendationContext, RecommendationResult, UserPreferenceProfile, Venue
from .repositories import UserHistoryRepository


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


class RecommendationScorer:
    """
    Additive multi-factor scorer.

    The default weights can add up to slightly more than 1.0 (rating boost,
    cluster bonus on top of proximity); totals are clamped to [0, 1] rather
    than renormalised.
    """

    def __init__(
        self,
        history_repo: UserHistoryRepository,
        weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS,
        factors: Sequence[ScoringFactor] | None = None,
    ) -> None:
        self.factors = list(factors) if factors is not None else default_factors(history_repo, weights)

    def score(
        self,
        venue: Venue,
        profile: UserPreferenceProfile,
        context: RecommendationContext,
    ) -> RecommendationResult:
        total = 0.0
        reasons: list[str] = []
        for factor in self.factors:
            result = factor.evaluate(venue, profile, context)
            total += result.value
            if result.reason:
                reasons.append(result.reason)
        return RecommendationResult(venue=venue, score=_clamp(total), reasons=reasons)

    def score_many(
        self,
        venues: Sequence[Venue],
        profile: UserPreferenceProfile,
        context: RecommendationContext,
        max_workers: int = 1,
    ) -> list[RecommendationResult]:
        """Score every venue, preserving input order."""
        if max_workers <= 1 or len(venues) <= 1:
            return [self.score(v, profile, context) for v in venues]
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(lambda v: self.score(v, profile, context), venues))


def rank(results: Sequence[RecommendationResult], limit: int) -> list[RecommendationResult]:
    """Drop non-positive scores, sort descending (stable) and truncate."""
    positive = [r for r in results if r.score > 0]
    positive.sort(key=lambda r: r.score, reverse=True)
    return positive[:limit]
