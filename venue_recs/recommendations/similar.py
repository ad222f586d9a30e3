from __future__ import annotations

from typing import Sequence

from ..geo.distance import haversine_km_many
from .models import Venue

SIMILAR_RADIUS_KM = 50.0


def _is_related(reference: Venue, venue: Venue) -> bool:
    if venue.category_id == reference.category_id:
        return True
    return reference.subcategory_id is not None and venue.subcategory_id == reference.subcategory_id


def find_similar(
    reference: Venue,
    candidates: Sequence[Venue],
    limit: int,
    radius_km: float = SIMILAR_RADIUS_KM,
) -> list[Venue]:
    """
    Venues sharing the reference's category or subcategory within *radius_km*.

    Ordered by same category first, then same price tier, then rating
    (highest first), then distance (closest first).
    """
    related = [v for v in candidates if v.id != reference.id and _is_related(reference, v)]
    if not related:
        return []

    distances = haversine_km_many(
        reference.latitude,
        reference.longitude,
        [(v.latitude, v.longitude) for v in related],
    )
    nearby = [(v, float(d)) for v, d in zip(related, distances) if d <= radius_km]

    nearby.sort(
        key=lambda item: (
            item[0].category_id != reference.category_id,
            item[0].price_range != reference.price_range,
            -item[0].average_rating,
            item[1],
        )
    )
    return [v for v, _ in nearby[:limit]]
