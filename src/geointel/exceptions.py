"""Error kinds raised by the geospatial services."""

from __future__ import annotations

from typing import Any, Sequence


class GeoIntelError(Exception):
    """Base class for all geospatial service errors."""


class UnsupportedRegion(GeoIntelError, ValueError):
    """Country code is unknown; raised before any provider call."""

    def __init__(self, country_code: str) -> None:
        super().__init__(f"Unsupported country code '{country_code}'.")
        self.country_code = country_code


class ValidationFailed(GeoIntelError, ValueError):
    """Address had no confident match. Carries the candidate suggestions."""

    def __init__(self, address: str, suggestions: Sequence[Any] = ()) -> None:
        super().__init__(f"Address '{address}' could not be validated.")
        self.address = address
        self.suggestions = list(suggestions)


class NoMatchFound(GeoIntelError, LookupError):
    """Reverse geocoding returned no results."""


class RouteNotFound(GeoIntelError, LookupError):
    """Provider could not connect the requested points."""


class InvalidGeometry(GeoIntelError, ValueError):
    """Polygon ring fails the closure or vertex-count invariant."""


class GeofenceNotFound(GeoIntelError, LookupError):
    def __init__(self, geofence_id: str) -> None:
        super().__init__(f"Geofence '{geofence_id}' not found.")
        self.geofence_id = geofence_id


class ServiceUnavailable(GeoIntelError, ConnectionError):
    """Mapping provider timed out, failed, or refused the request."""
