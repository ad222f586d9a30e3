from __future__ import annotations

from typing import Iterable

from .models import LocationCluster

CLUSTER_RADIUS_KM = 2.0
MIN_CLUSTER_WEIGHT = 2.0


def cluster_key(latitude: float, longitude: float) -> str:
    # ~1.1 km cells at the equator, narrower in longitude towards the poles
    return f"{latitude:.2f},{longitude:.2f}"


def hour_bucket(hour: int) -> str:
    if hour < 6:
        return "night"
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    return "evening"


def build_clusters(
    checkins: Iterable[tuple[float, float, int]],
    min_weight: float = MIN_CLUSTER_WEIGHT,
    radius_km: float = CLUSTER_RADIUS_KM,
) -> list[LocationCluster]:
    """Group ``(lat, lng, count)`` visits into rounded cells, keeping busy ones."""
    clusters: dict[str, LocationCluster] = {}
    for lat, lng, count in checkins:
        key = cluster_key(lat, lng)
        cluster = clusters.get(key)
        if cluster is None:
            clusters[key] = LocationCluster(
                latitude=lat, longitude=lng, weight=float(count), radius_km=radius_km,
            )
        else:
            cluster.weight += count

    return [c for c in clusters.values() if c.weight >= min_weight]
