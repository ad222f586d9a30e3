"""Exceptions raised by the recommendation core."""

from __future__ import annotations


class VenueRecsError(Exception):
    """Base class for recommendation errors."""

    detail: str = "venue_recs_error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class NotFoundError(VenueRecsError, LookupError):
    """A referenced user or venue does not exist."""

    detail = "not_found"


class UserNotFoundError(NotFoundError):
    detail = "user_not_found"


class VenueNotFoundError(NotFoundError):
    detail = "venue_not_found"


class InvalidCoordinatesError(VenueRecsError, ValueError):
    """Latitude or longitude outside the valid range."""

    detail = "invalid_coordinates"
