"""Geofence management, membership tests and delivery hotspot analysis."""

from __future__ import annotations

import logging
import threading
import uuid
import weakref
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from shapely.geometry import Point

from ...config import settings
from ...exceptions import GeoIntelError, GeofenceNotFound, InvalidGeometry, ServiceUnavailable
from ...models.domain import Cluster, Coordinate, DeliveryRecord, Geofence, as_utc
from ..geospatial import point_in_polygon, polygon_area, ring_center, to_polygon, validate_ring
from ..hotspots.analysis import build_clusters, filter_by_timeframe, popular_times
from ..hotspots.base import Clusterer
from ..hotspots.dispatcher import get_clusterer
from ..maps.base import MappingProvider
from .store import GeofenceRepository, InMemoryGeofenceRepository

CoordinateInput = Union[Coordinate, Mapping[str, Any], tuple[float, float]]

HEALTH_CHECK_RING = (
    Coordinate(0, 0),
    Coordinate(0, 1),
    Coordinate(1, 1),
    Coordinate(1, 0),
    Coordinate(0, 0),
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_ring(coordinates: Sequence[CoordinateInput]) -> list[Coordinate]:
    """Coerce and validate a polygon ring, raising InvalidGeometry on any problem."""
    ring: list[Coordinate] = []
    for value in coordinates:
        try:
            if isinstance(value, Coordinate):
                ring.append(value)
            elif isinstance(value, (tuple, list)):
                lat, lng = value
                ring.append(Coordinate(float(lat), float(lng)))
            else:
                ring.append(Coordinate.from_mapping(value))
        except (AttributeError, TypeError, ValueError) as exc:
            raise InvalidGeometry(f"Invalid ring vertex {value!r}: {exc}") from exc
    validate_ring(ring)
    return ring


class GeofenceEngine:
    """Creates and queries geofences; clusters delivery history into hotspots.

    Create and update are serialized per geofence id. Everything else is
    read-only and safe to call concurrently.
    """

    def __init__(
        self,
        provider: MappingProvider | None = None,
        *,
        repository: GeofenceRepository | None = None,
        clusterer: Clusterer | None = None,
        hotspot_radius_m: float | None = None,
        nearby_radius_m: int | None = None,
        nearby_limit: int | None = None,
        place_type: str | None = None,
        max_parallel_requests: int | None = None,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.provider = provider
        self.repository = repository or InMemoryGeofenceRepository()
        self.clusterer = clusterer or get_clusterer("dbscan")
        self.hotspot_radius_m = hotspot_radius_m or getattr(
            self.clusterer, "eps_meters", settings.hotspot_eps_meters
        )
        self.nearby_radius_m = nearby_radius_m or settings.hotspot_nearby_radius_m
        self.nearby_limit = nearby_limit if nearby_limit is not None else settings.hotspot_nearby_limit
        self.place_type = place_type or settings.hotspot_place_type
        self.max_parallel_requests = max_parallel_requests or settings.max_parallel_requests
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._clock = clock
        # Entries vanish once no caller holds or waits on the lock
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _lock_for(self, geofence_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(geofence_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[geofence_id] = lock
            return lock

    @staticmethod
    def _check_name(name: str) -> str:
        if not name or not name.strip():
            raise ValueError("Geofence name must not be empty.")
        return name.strip()

    def create_geofence(self, coordinates: Sequence[CoordinateInput], name: str) -> Geofence:
        ring = build_ring(coordinates)
        name = self._check_name(name)
        geofence_id = self._id_factory()
        now = self._clock()
        with self._lock_for(geofence_id):
            if self.repository.get(geofence_id) is not None:
                raise ValueError(f"Geofence id '{geofence_id}' already exists.")
            geofence = Geofence(
                id=geofence_id,
                name=name,
                coordinates=ring,
                center=ring_center(ring),
                area=polygon_area(ring),
                created_at=now,
                updated_at=now,
            )
            self.repository.save(geofence)
        logger.info(f"Created geofence '{name}' ({geofence_id}) with {len(ring)} vertices")
        return geofence

    def get_geofence(self, geofence_id: str, *, include_inactive: bool = False) -> Geofence:
        geofence = self.repository.get(geofence_id)
        if geofence is None or (not geofence.active and not include_inactive):
            raise GeofenceNotFound(geofence_id)
        return geofence

    def list_geofences(self, *, include_inactive: bool = False) -> list[Geofence]:
        return self.repository.list(include_inactive=include_inactive)

    def update_geofence(
        self,
        geofence_id: str,
        coordinates: Sequence[CoordinateInput],
        name: str,
        *,
        expected_version: int | None = None,
    ) -> Geofence:
        """Replace ring and name; center and area are recomputed.

        ``expected_version`` enables optimistic concurrency for callers that
        read, edit and write back.
        """
        ring = build_ring(coordinates)
        name = self._check_name(name)
        with self._lock_for(geofence_id):
            current = self.get_geofence(geofence_id)
            if expected_version is not None and current.version != expected_version:
                raise ValueError(
                    f"Geofence '{geofence_id}' is at version {current.version}, expected {expected_version}."
                )
            updated = replace(
                current,
                name=name,
                coordinates=ring,
                center=ring_center(ring),
                area=polygon_area(ring),
                version=current.version + 1,
                updated_at=self._clock(),
            )
            self.repository.save(updated)
        logger.info(f"Updated geofence {geofence_id} to version {updated.version}")
        return updated

    def deactivate_geofence(self, geofence_id: str) -> Geofence:
        with self._lock_for(geofence_id):
            current = self.get_geofence(geofence_id)
            updated = replace(
                current,
                active=False,
                version=current.version + 1,
                updated_at=self._clock(),
            )
            self.repository.save(updated)
        logger.info(f"Deactivated geofence {geofence_id}")
        return updated

    def is_point_in_delivery_area(self, point: Coordinate, geofence_id: str) -> bool:
        geofence = self.get_geofence(geofence_id)
        return point_in_polygon(point, geofence.coordinates)

    def analyze_delivery_hotspots(
        self,
        delivery_history: Sequence[DeliveryRecord],
        timeframe: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Cluster]:
        records = filter_by_timeframe(delivery_history, timeframe, start=start, end=end)
        clusters = build_clusters(records, self.clusterer, radius_m=self.hotspot_radius_m)
        logger.info(
            f"Hotspot analysis ({timeframe}): {len(records)} of {len(delivery_history)} records, "
            f"{len(clusters)} clusters"
        )
        if clusters and self.provider is not None and self.nearby_limit > 0:
            self._enrich_clusters(clusters)
        return clusters

    def _enrich_clusters(self, clusters: list[Cluster]) -> None:
        def _enrich(cluster: Cluster) -> None:
            try:
                places = self.provider.places_nearby(
                    cluster.center,
                    radius=self.nearby_radius_m,
                    place_type=self.place_type,
                )
            except ServiceUnavailable as exc:
                logger.warning(f"Nearby places unavailable for hotspot {cluster.label}: {exc}")
                cluster.enrichment_error = str(exc)
                return
            cluster.nearby_places = places[: self.nearby_limit]

        workers = min(self.max_parallel_requests, len(clusters))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            list(executor.map(_enrich, clusters))

    def analyze_timeframe(
        self,
        delivery_history: Sequence[DeliveryRecord],
        geofence_id: str,
        start: datetime,
        end: datetime,
    ) -> dict:
        """Count deliveries inside a geofence between ``start`` and ``end``.

        Naive datetimes are read as UTC.
        """
        lower, upper = as_utc(start), as_utc(end)
        if upper < lower:
            raise ValueError("Timeframe end must not be before its start.")
        geofence = self.get_geofence(geofence_id)
        polygon = to_polygon(geofence.coordinates)
        events = [
            record
            for record in delivery_history
            if lower <= as_utc(record.timestamp) <= upper
            and polygon.contains(Point(record.location.lng, record.location.lat))
        ]
        return {
            "geofence_id": geofence_id,
            "start_time": start,
            "end_time": end,
            "total_events": len(events),
            "popular_times": popular_times(events),
        }

    def check_health(self) -> str:
        try:
            ring = build_ring(HEALTH_CHECK_RING)
            polygon_area(ring)
            point_in_polygon(ring_center(ring), ring)
            return "healthy"
        except (GeoIntelError, ValueError) as exc:
            logger.error(f"Geofence engine health check failed: {exc}")
            return "unhealthy"
