from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np
from sklearn.metrics.pairwise import haversine_distances

from ..errors import InvalidCoordinatesError
from .models import Distance, LatLng, LocationBounds

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = 6371000.0
METERS_PER_MILE = 1609.344
KM_PER_DEGREE = 111.0

MIN_MEETING_RADIUS_KM = 5.0
MEETING_RADIUS_BUFFER = 1.2


def _central_angle(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres between two degree coordinates."""
    return EARTH_RADIUS_KM * _central_angle(lat1, lng1, lat2, lng2)


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> Distance:
    meters = EARTH_RADIUS_M * _central_angle(lat1, lng1, lat2, lng2)
    return Distance(
        meters=meters,
        kilometers=meters / 1000,
        miles=meters / METERS_PER_MILE,
    )


def haversine_km_many(
    latitude: float,
    longitude: float,
    points: Sequence[tuple[float, float]] | np.ndarray,
) -> np.ndarray:
    """Distances in km from one coordinate to each ``(lat, lng)`` in *points*."""
    coords = np.asarray(points, dtype=float)
    if coords.size == 0:
        return np.zeros(0)
    origin = np.radians([[latitude, longitude]])
    return haversine_distances(origin, np.radians(coords.reshape(-1, 2)))[0] * EARTH_RADIUS_KM


def validate_coordinates(latitude: float, longitude: float) -> None:
    if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
        raise InvalidCoordinatesError(
            f"invalid coordinates: latitude={latitude}, longitude={longitude}"
        )


def get_bounds(center_lat: float, center_lng: float, radius_km: float) -> LocationBounds:
    """Approximate bounding box around a point (not accurate near the poles)."""
    lat_offset = radius_km / KM_PER_DEGREE
    lng_offset = radius_km / (KM_PER_DEGREE * math.cos(math.radians(center_lat)))
    return LocationBounds(
        north_east=LatLng(latitude=center_lat + lat_offset, longitude=center_lng + lng_offset),
        south_west=LatLng(latitude=center_lat - lat_offset, longitude=center_lng - lng_offset),
    )


def meeting_point(points: Iterable[LatLng]) -> tuple[LatLng, float]:
    """
    Return the centroid of *points* and a radius that covers all of them.

    The radius is the largest centroid distance plus a 20% buffer, and
    never less than 5 km.
    """
    pts = list(points)
    if not pts:
        raise ValueError("no locations provided")

    center = LatLng(
        latitude=sum(p.latitude for p in pts) / len(pts),
        longitude=sum(p.longitude for p in pts) / len(pts),
    )
    max_distance = max(
        haversine_km(center.latitude, center.longitude, p.latitude, p.longitude) for p in pts
    )
    return center, max(max_distance * MEETING_RADIUS_BUFFER, MIN_MEETING_RADIUS_KM)
