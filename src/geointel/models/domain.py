"""Domain models shared by the address, routing and geofencing services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CustomerTier(str, Enum):
    STANDARD = "standard"
    PREMIUM = "premium"


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A WGS84 point. Immutable, compared by value."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude {self.lat} is outside [-90, 90].")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Longitude {self.lng} is outside [-180, 180].")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Coordinate":
        """Build from a provider payload such as ``{"lat": .., "lng": ..}``."""
        lat = data.get("lat", data.get("latitude"))
        lng = data.get("lng", data.get("longitude"))
        if lat is None or lng is None:
            raise ValueError(f"Mapping {dict(data)!r} has no lat/lng.")
        return cls(float(lat), float(lng))

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"

    def as_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True, slots=True)
class DeliveryStop:
    """Input to route optimization. Never mutated by the optimizer."""

    id: str
    location: Coordinate
    time_window: Optional[datetime] = None
    customer_tier: CustomerTier = CustomerTier.STANDARD
    value: Optional[Decimal] = None


@dataclass(frozen=True, slots=True)
class DeliveryRecord:
    """A historical delivery used for hotspot analysis."""

    location: Coordinate
    timestamp: datetime


@dataclass(slots=True)
class Geofence:
    """A named closed polygon ring with its derived center and area.

    ``center`` is the arithmetic mean of the ring vertices (closing vertex
    counted once), not the area-weighted centroid. ``area`` is in squared degrees.
    """

    id: str
    name: str
    coordinates: list[Coordinate]
    center: Coordinate
    area: float
    active: bool = True
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class Cluster:
    """A delivery hotspot derived from historical records."""

    label: int
    center: Coordinate
    points: list[Coordinate]
    radius_m: float
    popular_times: list[int] = field(default_factory=lambda: [0] * 24)
    nearby_places: list[dict] = field(default_factory=list)
    total_deliveries: int = 0
    enrichment_error: Optional[str] = None
