from datetime import datetime
from typing import Any, Callable, Optional

import pytest

from geointel.exceptions import ServiceUnavailable
from geointel.models.domain import Coordinate


def geocode_result(
    formatted_address: str,
    lat: float,
    lng: float,
    *,
    location_type: str = "ROOFTOP",
    partial_match: bool = False,
    components: Optional[list[dict]] = None,
    place_id: str = "place-1",
) -> dict:
    result = {
        "formatted_address": formatted_address,
        "place_id": place_id,
        "geometry": {"location": {"lat": lat, "lng": lng}, "location_type": location_type},
        "address_components": components or [],
    }
    if partial_match:
        result["partial_match"] = True
    return result


def leg(distance_m: float, duration_s: float, start: tuple, end: tuple, steps: Optional[list] = None) -> dict:
    return {
        "distance": {"value": distance_m, "text": f"{distance_m / 1000:.1f} km"},
        "duration": {"value": duration_s, "text": f"{round(duration_s / 60)} mins"},
        "start_location": {"lat": start[0], "lng": start[1]},
        "end_location": {"lat": end[0], "lng": end[1]},
        "steps": steps or [],
    }


class FakeMapsProvider:
    """In-memory stand-in for the mapping provider.

    Responses are looked up by key, or produced by a callable; any response
    that is an exception instance is raised instead.
    """

    def __init__(self) -> None:
        self.geocode_responses: dict[str, Any] = {}
        self.reverse_results: Any = []
        self.nearby_results: Any = []
        self.directions_results: Any = []
        self.matrix_by_hour: dict[int, Any] = {}
        self.calls: list[tuple[str, Any]] = []
        self.geocode_bounds: list[Any] = []

    @staticmethod
    def _resolve(response: Any, *args: Any) -> Any:
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(*args)
        return response

    def geocode(
        self,
        address: str,
        *,
        country: Optional[str] = None,
        bounds: Optional[tuple[Coordinate, Coordinate]] = None,
    ) -> list[dict]:
        self.calls.append(("geocode", (address, country)))
        self.geocode_bounds.append(bounds)
        return self._resolve(self.geocode_responses.get(address, []), address)

    def reverse_geocode(self, location: Coordinate) -> list[dict]:
        self.calls.append(("reverse_geocode", location))
        return self._resolve(self.reverse_results, location)

    def places_nearby(self, location: Coordinate, *, radius: int, place_type: Optional[str] = None) -> list[dict]:
        self.calls.append(("places_nearby", (location, radius, place_type)))
        return self._resolve(self.nearby_results, location)

    def directions(self, origin, destination, *, waypoints=(), optimize=False, departure_time=None, traffic_model=None):
        self.calls.append(("directions", (origin, destination, list(waypoints), optimize)))
        return self._resolve(self.directions_results, origin, destination)

    def distance_matrix(self, origins, destinations, *, departure_time: Optional[datetime] = None, traffic_model=None):
        self.calls.append(("distance_matrix", (list(origins), list(destinations), departure_time)))
        response = self.matrix_by_hour.get(departure_time.hour if departure_time else None)
        if response is None:
            raise ServiceUnavailable("no canned matrix for this departure")
        return self._resolve(response, origins, destinations)

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)


def matrix_row(*durations_in_traffic: Optional[float], free_flow: Optional[float] = None) -> dict:
    elements = []
    for value in durations_in_traffic:
        if value is None:
            elements.append({"status": "NOT_FOUND"})
            continue
        elements.append(
            {
                "status": "OK",
                "duration": {"value": free_flow if free_flow is not None else value},
                "duration_in_traffic": {"value": value},
                "distance": {"value": 1000},
            }
        )
    return {"status": "OK", "rows": [{"elements": elements}]}


@pytest.fixture
def provider() -> FakeMapsProvider:
    return FakeMapsProvider()


@pytest.fixture
def square() -> list[Coordinate]:
    return [
        Coordinate(0, 0),
        Coordinate(0, 1),
        Coordinate(1, 1),
        Coordinate(1, 0),
        Coordinate(0, 0),
    ]


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    from datetime import timezone

    return lambda: datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
