"""Contract for the external mapping provider."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence, Union

from ...models.domain import Coordinate

Location = Union[str, Coordinate]


class MappingProvider(Protocol):
    """Narrow view of the mapping provider used by every engine.

    Payloads follow the Google Maps web-service JSON shapes. Methods return
    an empty list when the provider has no match and raise
    ``ServiceUnavailable`` on transport or quota failures.
    """

    def geocode(
        self,
        address: str,
        *,
        country: str | None = None,
        bounds: tuple[Coordinate, Coordinate] | None = None,
    ) -> list[dict]:
        ...

    def reverse_geocode(self, location: Coordinate) -> list[dict]:
        ...

    def places_nearby(
        self,
        location: Coordinate,
        *,
        radius: int,
        place_type: str | None = None,
    ) -> list[dict]:
        ...

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
        ...

    def distance_matrix(
        self,
        origins: Sequence[Location],
        destinations: Sequence[Location],
        *,
        departure_time: datetime | None = None,
        traffic_model: str | None = None,
    ) -> dict:
        ...
