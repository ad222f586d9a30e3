"""
In-memory repositories backed by pandas DataFrames.

Tables (CSV files in ``RecommendationConfig.data_dir`` or DataFrames passed
directly):

- ``venues``: id, name, category_id, subcategory_id, price_range,
  average_rating, latitude, longitude, amenities, is_featured
  [, is_active]
- ``reviews``: user_id, venue_id, rating, visit_type [, moderation_status]
- ``checkins``: user_id, venue_id, hour (or created_at)
- ``follows``: follower_id, following_id
- ``users``: id (optional; without it every user id is considered known)
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pandas as pd

from ..geo.distance import haversine_km_many
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .models import (
    CheckinHistoryRow,
    RecommendationContext,
    ReviewHistoryRow,
    UserPreferenceProfile,
    Venue,
)

VENUE_COLUMNS = [
    "id",
    "name",
    "category_id",
    "subcategory_id",
    "price_range",
    "average_rating",
    "latitude",
    "longitude",
    "amenities",
    "is_featured",
]
REVIEW_COLUMNS = ["user_id", "venue_id", "rating", "visit_type"]
CHECKIN_COLUMNS = ["user_id", "venue_id", "hour"]
FOLLOW_COLUMNS = ["follower_id", "following_id"]
USER_COLUMNS = ["id"]

POSITIVE_RATING = 4.0


def _read_csv(path: Path, columns: list[str]) -> pd.DataFrame:
    if not path.exists():
        return pd.DataFrame(columns=columns)
    return pd.read_csv(path)


def _split_amenities(value) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [str(a).strip() for a in value if str(a).strip()]
    if pd.isna(value):
        return []
    return [a.strip() for a in str(value).split(",") if a.strip()]


def _prepare_venues(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for col in VENUE_COLUMNS:
        if col not in df.columns:
            df[col] = pd.NA
    if "is_active" in df.columns:
        df = df[df["is_active"].fillna(True).astype(bool)]

    df["name"] = df["name"].fillna("").astype(str)
    df["price_range"] = df["price_range"].fillna("").astype(str)
    df["average_rating"] = pd.to_numeric(df["average_rating"], errors="coerce").fillna(0.0)
    df["is_featured"] = df["is_featured"].fillna(False).astype(bool)
    # Raw string kept for grouping; the list form feeds the Venue model
    df["amenities_key"] = df["amenities"].apply(lambda v: ",".join(_split_amenities(v)))
    df["amenities_list"] = df["amenities"].apply(_split_amenities)
    return df.reset_index(drop=True)


def _prepare_checkins(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    if "hour" not in df.columns and "created_at" in df.columns:
        df["hour"] = pd.to_datetime(df["created_at"]).dt.hour
    return df


def _prepare_reviews(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    if "moderation_status" in df.columns:
        df = df[df["moderation_status"] == "approved"]
    if "visit_type" not in df.columns:
        df["visit_type"] = ""
    df["visit_type"] = df["visit_type"].fillna("").astype(str)
    return df


def _row_to_venue(row: pd.Series) -> Venue:
    subcategory = row["subcategory_id"]
    return Venue(
        id=int(row["id"]),
        name=row["name"],
        category_id=int(row["category_id"]),
        subcategory_id=int(subcategory) if pd.notna(subcategory) else None,
        price_range=row["price_range"],
        average_rating=float(row["average_rating"]),
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        amenities=list(row["amenities_list"]),
        is_featured=bool(row["is_featured"]),
    )


class VenueDataStore:
    """Implements both ``VenueRepository`` and ``UserHistoryRepository``."""

    def __init__(
        self,
        venues: pd.DataFrame,
        reviews: pd.DataFrame | None = None,
        checkins: pd.DataFrame | None = None,
        follows: pd.DataFrame | None = None,
        users: pd.DataFrame | None = None,
        config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
    ) -> None:
        self.config = config
        self.venues = _prepare_venues(venues)
        self.all_reviews = reviews if reviews is not None else pd.DataFrame(columns=REVIEW_COLUMNS)
        # History only counts approved reviews; exclusion and social counts use all of them
        self.reviews = _prepare_reviews(self.all_reviews)
        self.checkins = _prepare_checkins(
            checkins if checkins is not None else pd.DataFrame(columns=CHECKIN_COLUMNS)
        )
        self.follows = follows if follows is not None else pd.DataFrame(columns=FOLLOW_COLUMNS)
        self.user_ids: set[int] | None = (
            {int(u) for u in users["id"]} if users is not None else None
        )

    @classmethod
    def from_csv(
        cls,
        data_dir: Path | None = None,
        config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
    ) -> VenueDataStore:
        data_dir = Path(data_dir or config.data_dir)
        users_path = data_dir / "users.csv"
        return cls(
            venues=_read_csv(data_dir / "venues.csv", VENUE_COLUMNS),
            reviews=_read_csv(data_dir / "reviews.csv", REVIEW_COLUMNS),
            checkins=_read_csv(data_dir / "checkins.csv", CHECKIN_COLUMNS),
            follows=_read_csv(data_dir / "follows.csv", FOLLOW_COLUMNS),
            users=pd.read_csv(users_path) if users_path.exists() else None,
            config=config,
        )

    # ── Venue repository ─────────────────────────────────────────────────

    def get_venue(self, venue_id: int) -> Venue | None:
        rows = self.venues[self.venues["id"] == venue_id]
        if rows.empty:
            return None
        return _row_to_venue(rows.iloc[0])

    def _distance_mask(self, df: pd.DataFrame, latitude: float, longitude: float, radius_km: float) -> pd.Series:
        distances = haversine_km_many(latitude, longitude, df[["latitude", "longitude"]].to_numpy())
        return pd.Series(distances <= radius_km, index=df.index)

    def venues_within(self, latitude: float, longitude: float, radius_km: float) -> list[Venue]:
        if self.venues.empty:
            return []
        nearby = self.venues[self._distance_mask(self.venues, latitude, longitude, radius_km)]
        return [_row_to_venue(row) for _, row in nearby.iterrows()]

    def query_candidate_venues(
        self,
        context: RecommendationContext,
        profile: UserPreferenceProfile,
    ) -> list[Venue]:
        df = self.venues
        if df.empty:
            return []

        mask = df["average_rating"] >= self.config.min_candidate_rating

        if context.has_location:
            mask &= self._distance_mask(df, context.latitude, context.longitude, context.max_distance_km)

        reviewed = set(self.all_reviews.loc[self.all_reviews["user_id"] == context.user_id, "venue_id"])
        if reviewed:
            mask &= ~df["id"].isin(reviewed)

        if profile.category_affinity:
            mask &= df["category_id"].isin(list(profile.category_affinity)) | df["is_featured"]

        candidates = df.loc[mask].head(self.config.candidate_limit)
        return [_row_to_venue(row) for _, row in candidates.iterrows()]

    # ── User history repository ──────────────────────────────────────────

    def user_exists(self, user_id: int) -> bool:
        if self.user_ids is None:
            return True
        return user_id in self.user_ids

    def query_user_review_history(self, user_id: int) -> list[ReviewHistoryRow]:
        reviews = self.reviews[self.reviews["user_id"] == user_id]
        if reviews.empty:
            return []

        joined = reviews.merge(
            self.venues[["id", "category_id", "price_range", "amenities_key"]],
            left_on="venue_id",
            right_on="id",
        )
        grouped = (
            joined.groupby(
                ["category_id", "price_range", "amenities_key", "rating", "visit_type"],
                sort=False,
            )
            .size()
            .reset_index(name="count")
            .sort_values("count", ascending=False, kind="stable")
        )
        return [
            ReviewHistoryRow(
                category_id=int(row["category_id"]),
                price_range=row["price_range"],
                amenities=_split_amenities(row["amenities_key"]),
                rating=float(row["rating"]),
                visit_type=row["visit_type"],
                count=int(row["count"]),
            )
            for _, row in grouped.iterrows()
        ]

    def query_user_checkin_history(self, user_id: int) -> list[CheckinHistoryRow]:
        checkins = self.checkins[self.checkins["user_id"] == user_id]
        if checkins.empty:
            return []

        joined = checkins.merge(
            self.venues[["id", "latitude", "longitude"]],
            left_on="venue_id",
            right_on="id",
        )
        grouped = (
            joined.groupby(["latitude", "longitude", "hour"], sort=False)
            .size()
            .reset_index(name="count")
            .sort_values("count", ascending=False, kind="stable")
        )
        return [
            CheckinHistoryRow(
                latitude=float(row["latitude"]),
                longitude=float(row["longitude"]),
                hour=int(row["hour"]),
                count=int(row["count"]),
            )
            for _, row in grouped.iterrows()
        ]

    def query_user_follows(self, user_id: int) -> list[int]:
        follows = self.follows[self.follows["follower_id"] == user_id]
        return [int(f) for f in follows["following_id"]]

    def query_positive_review_count_from_users(self, venue_id: int, user_ids: Iterable[int]) -> int:
        ids = list(user_ids)
        if not ids:
            return 0
        mask = (
            (self.all_reviews["venue_id"] == venue_id)
            & self.all_reviews["user_id"].isin(ids)
            & (self.all_reviews["rating"] >= POSITIVE_RATING)
        )
        return int(mask.sum())
