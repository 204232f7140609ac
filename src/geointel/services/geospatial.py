"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from shapely.geometry import Point, Polygon

from ..exceptions import InvalidGeometry
from ..models.domain import Coordinate

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = EARTH_RADIUS_KM * 1000.0
MIN_RING_POINTS = 4


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(a: Coordinate, b: Coordinate) -> float:
    return haversine_km(a.lat, a.lng, b.lat, b.lng)


def distance_m(a: Coordinate, b: Coordinate) -> float:
    return distance_km(a, b) * 1000.0


def is_within_radius(point: Coordinate, center: Coordinate, radius_m: float) -> bool:
    return distance_m(point, center) <= radius_m


def validate_ring(coordinates: Sequence[Coordinate]) -> None:
    """Raise InvalidGeometry unless the ring is closed and has at least four points."""

    if len(coordinates) < MIN_RING_POINTS:
        raise InvalidGeometry(
            f"Polygon ring needs at least {MIN_RING_POINTS} points including the closing vertex, "
            f"got {len(coordinates)}."
        )
    if coordinates[0] != coordinates[-1]:
        raise InvalidGeometry("Polygon ring is not closed: first and last vertices differ.")


def mean_center(points: Iterable[Coordinate]) -> Coordinate:
    """Arithmetic mean of the given points."""

    points = list(points)
    if not points:
        raise ValueError("Cannot compute the center of an empty point set.")
    lat = sum(point.lat for point in points) / len(points)
    lng = sum(point.lng for point in points) / len(points)
    return Coordinate(lat, lng)


def ring_center(ring: Sequence[Coordinate]) -> Coordinate:
    """Vertex mean of a closed ring, closing vertex counted once.

    This approximates the centroid and is not area-weighted, so it drifts
    for strongly concave rings. Kept as the documented geofence center.
    """

    return mean_center(ring[:-1] if len(ring) > 1 and ring[0] == ring[-1] else ring)


def to_polygon(ring: Sequence[Coordinate]) -> Polygon:
    """Shapely polygon in (x = lng, y = lat) order."""

    return Polygon([(point.lng, point.lat) for point in ring])


def polygon_area(coordinates: Sequence[Coordinate]) -> float:
    """Planar area in squared degrees, independent of winding."""

    return float(to_polygon(coordinates).area)


def point_in_polygon(point: Coordinate, ring: Sequence[Coordinate]) -> bool:
    """True when ``point`` lies strictly inside the ring; boundary points are outside."""

    return bool(to_polygon(ring).contains(Point(point.lng, point.lat)))
