from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class RecommendationConfig:
    data_dir: Path = Path(
        os.getenv("VENUE_RECS_DATA_DIR", str(Path(__file__).resolve().parent.parent / "data"))
    )
    default_max_distance_km: float = float(os.getenv("VENUE_RECS_MAX_DISTANCE_KM", "10.0"))
    default_limit: int = int(os.getenv("VENUE_RECS_LIMIT", "20"))
    candidate_limit: int = 200
    min_candidate_rating: float = 3.0
    similar_radius_km: float = 50.0
    profile_cache_ttl: float = float(os.getenv("VENUE_RECS_PROFILE_TTL", "300"))
    max_workers: int = int(os.getenv("VENUE_RECS_MAX_WORKERS", "1"))


@dataclass(frozen=True)
class ScoringWeights:
    category: float = 0.30
    rating: float = 0.25
    rating_boost: float = 1.2
    rating_boost_threshold: float = 4.0
    proximity: float = 0.20
    nearby_km: float = 2.0
    cluster: float = 0.10
    cluster_weight_scale: float = 10.0
    price: float = 0.10
    amenity: float = 0.10
    social: float = 0.05
    featured: float = 0.05
    time_of_day: float = 0.10
    group: float = 0.05
    large_group_size: int = 4
    nightlife_category_id: int = 2
    cafe_category_id: int = 3
    top_price_tier: str = "$$$$"


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig()
DEFAULT_SCORING_WEIGHTS = ScoringWeights()
