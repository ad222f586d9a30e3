from __future__ import annotations

import pytest

from venue_recs.geo.models import LocationCluster
from venue_recs.recommendations.factors import (
    REASON_AMENITY,
    REASON_CATEGORY,
    REASON_CLUSTER,
    REASON_FEATURED,
    REASON_NEARBY,
    REASON_PRICE,
    REASON_RATING,
    REASON_SOCIAL,
    FactorScore,
)
from venue_recs.recommendations.models import RecommendationResult, UserPreferenceProfile
from venue_recs.recommendations.scorer import RecommendationScorer, rank

from conftest import SF_LAT, SF_LNG, FakeHistoryRepo, make_venue


class _ConstantFactor:
    name = "constant"

    def __init__(self, value, reason=None):
        self.value = value
        self.reason = reason

    def evaluate(self, venue, profile, context):
        return FactorScore(self.value, self.reason)


class TestScore:
    def test_basic_sum(self, full_profile, context):
        result = RecommendationScorer(FakeHistoryRepo()).score(make_venue(), full_profile, context)
        assert result.score == pytest.approx(0.3 + 0.15 + 0.1)
        assert result.reasons == [REASON_CATEGORY, REASON_PRICE]

    def test_reasons_follow_factor_order(self, located_context):
        profile = UserPreferenceProfile(
            user_id=1,
            category_affinity={7: 0.5},
            price_affinity={"$$"},
            amenity_affinity={"wifi"},
            location_clusters=[LocationCluster(latitude=SF_LAT, longitude=SF_LNG, weight=2)],
            social_graph={2},
        )
        venue = make_venue(average_rating=4.5, amenities=["wifi"], is_featured=True)
        repo = FakeHistoryRepo(positive_counts={venue.id: 1})

        result = RecommendationScorer(repo).score(venue, profile, located_context)

        assert result.reasons == [
            REASON_CATEGORY,
            REASON_RATING,
            REASON_NEARBY,
            REASON_CLUSTER,
            REASON_PRICE,
            REASON_AMENITY,
            REASON_SOCIAL,
            REASON_FEATURED,
        ]
        assert result.score == pytest.approx(0.94)

    def test_clamped_to_one(self, context):
        profile = UserPreferenceProfile(user_id=1, category_affinity={7: 10.0})
        result = RecommendationScorer(FakeHistoryRepo()).score(make_venue(), profile, context)
        assert result.score == 1.0

    def test_clamped_to_zero(self, empty_profile, context):
        scorer = RecommendationScorer(FakeHistoryRepo(), factors=[_ConstantFactor(-0.4, "penalty")])
        result = scorer.score(make_venue(), empty_profile, context)
        assert result.score == 0.0
        assert result.reasons == ["penalty"]

    def test_duplicate_reasons_kept(self, empty_profile, context):
        scorer = RecommendationScorer(
            FakeHistoryRepo(), factors=[_ConstantFactor(0.1, "same"), _ConstantFactor(0.1, "same")],
        )
        assert scorer.score(make_venue(), empty_profile, context).reasons == ["same", "same"]

    def test_deterministic(self, full_profile, located_context):
        scorer = RecommendationScorer(FakeHistoryRepo())
        venue = make_venue(average_rating=4.2, amenities=["wifi"])
        first = scorer.score(venue, full_profile, located_context)
        second = scorer.score(venue, full_profile, located_context)
        assert first.score == second.score
        assert first.reasons == second.reasons

    def test_full_match_beats_poor_venue(self, full_profile, context):
        scorer = RecommendationScorer(FakeHistoryRepo())
        good = make_venue(id=1, average_rating=5.0, amenities=["wifi", "parking"])
        poor = make_venue(id=2, category_id=99, average_rating=1.0, price_range="$")
        assert scorer.score(good, full_profile, context).score > scorer.score(poor, full_profile, context).score

    @pytest.mark.parametrize("rating", [0.0, 1.0, 2.5, 4.0, 5.0])
    def test_score_bounds(self, full_profile, located_context, rating):
        venue = make_venue(average_rating=rating, amenities=["wifi", "parking"], is_featured=True)
        result = RecommendationScorer(FakeHistoryRepo()).score(venue, full_profile, located_context)
        assert 0.0 <= result.score <= 1.0


class TestScoreMany:
    def test_threaded_matches_sequential(self, full_profile, located_context):
        scorer = RecommendationScorer(FakeHistoryRepo())
        venues = [
            make_venue(id=i, average_rating=(i % 5) + 0.5, latitude=SF_LAT + i * 0.01)
            for i in range(20)
        ]
        sequential = scorer.score_many(venues, full_profile, located_context)
        threaded = scorer.score_many(venues, full_profile, located_context, max_workers=4)
        assert [r.venue.id for r in threaded] == [r.venue.id for r in sequential]
        assert [r.score for r in threaded] == [r.score for r in sequential]


class TestRank:
    def _result(self, venue_id, score):
        return RecommendationResult(venue=make_venue(id=venue_id), score=score)

    def test_sorted_and_truncated(self):
        results = [self._result(i, s) for i, s in enumerate([0.2, 0.9, 0.5, 0.7])]
        ranked = rank(results, limit=3)
        assert [r.score for r in ranked] == [0.9, 0.7, 0.5]

    def test_zero_scores_dropped(self):
        ranked = rank([self._result(1, 0.0), self._result(2, 0.3)], limit=10)
        assert [r.venue.id for r in ranked] == [2]

    def test_ties_keep_input_order(self):
        ranked = rank([self._result(1, 0.5), self._result(2, 0.5), self._result(3, 0.5)], limit=10)
        assert [r.venue.id for r in ranked] == [1, 2, 3]
