"""HTTP client for the Google Maps web services."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Sequence

import httpx

from ...config import settings
from ...exceptions import ServiceUnavailable
from ...models.domain import Coordinate
from .base import Location

# Statuses that mean "no match" rather than a failure
EMPTY_STATUSES = frozenset({"ZERO_RESULTS", "NOT_FOUND"})

logger = logging.getLogger(__name__)


def format_location(value: Location) -> str:
    if isinstance(value, Coordinate):
        return value.as_param()
    return str(value)


class GoogleMapsClient:
    """One request per call, bounded by ``timeout``. No retry loop at this layer."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.maps_api_key
        if not self.api_key:
            raise ValueError("Maps API key is not configured.")
        self.base_url = (base_url or settings.maps_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds

    def _get_client(self) -> httpx.Client:
        # A client per call keeps the object safe to share across worker threads
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)))

    def _request(self, endpoint: str, params: dict[str, Any]) -> dict:
        url = f"{self.base_url}/{endpoint}/json"
        query = {key: value for key, value in params.items() if value is not None}
        query["key"] = self.api_key

        client = self._get_client()
        try:
            response = client.get(url, params=query)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            logger.warning(f"Maps {endpoint} request timed out after {self.timeout:.1f}s")
            raise ServiceUnavailable(f"Maps {endpoint} request timed out.") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning(f"Maps {endpoint} request failed with HTTP {exc.response.status_code}")
            raise ServiceUnavailable(
                f"Maps {endpoint} request failed with HTTP {exc.response.status_code}."
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Maps {endpoint} request failed: {exc}")
            raise ServiceUnavailable(f"Maps {endpoint} request failed: {exc}") from exc
        finally:
            client.close()

        status = data.get("status", "UNKNOWN_ERROR")
        if status == "OK" or status in EMPTY_STATUSES:
            return data
        message = data.get("error_message") or "no details"
        logger.error(f"Maps {endpoint} returned status {status}: {message}")
        raise ServiceUnavailable(f"Maps {endpoint} returned status {status}.")

    def geocode(
        self,
        address: str,
        *,
        country: str | None = None,
        bounds: tuple[Coordinate, Coordinate] | None = None,
    ) -> list[dict]:
        params = {
            "address": address,
            "region": country.lower() if country else None,
            "components": f"country:{country}" if country else None,
            "bounds": "|".join(corner.as_param() for corner in bounds) if bounds else None,
        }
        return self._request("geocode", params).get("results", [])

    def reverse_geocode(self, location: Coordinate) -> list[dict]:
        return self._request("geocode", {"latlng": location.as_param()}).get("results", [])

    def places_nearby(
        self,
        location: Coordinate,
        *,
        radius: int,
        place_type: str | None = None,
    ) -> list[dict]:
        params = {"location": location.as_param(), "radius": radius, "type": place_type}
        return self._request("place/nearbysearch", params).get("results", [])

    def directions(
        self,
        origin: Location,
        destination: Location,
        *,
        waypoints: Sequence[Location] = (),
        optimize: bool = False,
        departure_time: datetime | None = None,
        traffic_model: str | None = None,
    ) -> list[dict]:
        waypoint_param = None
        if waypoints:
            parts = [format_location(waypoint) for waypoint in waypoints]
            if optimize:
                parts.insert(0, "optimize:true")
            waypoint_param = "|".join(parts)
        params = {
            "origin": format_location(origin),
            "destination": format_location(destination),
            "waypoints": waypoint_param,
            "mode": "driving",
            "departure_time": _epoch(departure_time),
            "traffic_model": traffic_model if departure_time else None,
        }
        return self._request("directions", params).get("routes", [])

    def distance_matrix(
        self,
        origins: Sequence[Location],
        destinations: Sequence[Location],
        *,
        departure_time: datetime | None = None,
        traffic_model: str | None = None,
    ) -> dict:
        if not origins or not destinations:
            raise ValueError("Distance matrix needs at least one origin and one destination.")
        params = {
            "origins": "|".join(format_location(origin) for origin in origins),
            "destinations": "|".join(format_location(dest) for dest in destinations),
            "mode": "driving",
            "departure_time": _epoch(departure_time),
            "traffic_model": traffic_model if departure_time else None,
        }
        return self._request("distancematrix", params)


def _epoch(value: datetime | None) -> int | None:
    return int(value.timestamp()) if value is not None else None


def decode_polyline(polyline: str) -> list[Coordinate]:
    """Decode an encoded polyline string into coordinates.

    Args:
        polyline: Encoded polyline string (precision 5)

    Returns:
        List of Coordinate points along the path
    """
    coordinates: list[Coordinate] = []
    index = 0
    lat = 0
    lng = 0

    while index < len(polyline):
        deltas = []
        for _ in range(2):
            shift = 0
            result = 0
            while True:
                b = ord(polyline[index]) - 63
                index += 1
                result |= (b & 0x1F) << shift
                shift += 5
                if b < 0x20:
                    break
            deltas.append(~(result >> 1) if (result & 1) else (result >> 1))
        lat += deltas[0]
        lng += deltas[1]
        coordinates.append(Coordinate(lat / 1e5, lng / 1e5))

    return coordinates
