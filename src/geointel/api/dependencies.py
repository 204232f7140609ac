"""Shared engine instances for the HTTP layer.

Each factory is cached so every request shares one engine; tests replace them
through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import HTTPException, status

from ..config import settings
from ..persistence.time_windows import SupabaseTimeWindowCache
from ..services.addresses import AddressResolver
from ..services.geofencing import GeofenceEngine
from ..services.health import HealthMonitor
from ..services.hotspots import get_clusterer
from ..services.maps import GoogleMapsClient, MappingProvider
from ..services.routing.engine import RouteEngine


@lru_cache
def _maps_client(timeout: float) -> Optional[GoogleMapsClient]:
    if not settings.maps_api_key:
        return None
    return GoogleMapsClient(timeout=timeout)


def get_maps_provider() -> MappingProvider:
    client = _maps_client(settings.request_timeout_seconds)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Mapping provider is not configured (set GEOINTEL_MAPS_API_KEY).",
        )
    return client


def get_address_resolver() -> AddressResolver:
    return AddressResolver(get_maps_provider())


def get_route_engine() -> RouteEngine:
    # Delivery ordering is coordinate math; provider-backed calls report 503 themselves.
    return RouteEngine(_maps_client(settings.request_timeout_seconds), cache=SupabaseTimeWindowCache())


@lru_cache
def get_geofence_engine() -> GeofenceEngine:
    # Geofences live in memory for the process lifetime; the provider is only
    # needed for hotspot enrichment and is optional.
    return GeofenceEngine(
        _maps_client(settings.request_timeout_seconds),
        clusterer=get_clusterer(
            "dbscan",
            eps_meters=settings.hotspot_eps_meters,
            min_points=settings.hotspot_min_points,
        ),
    )


@lru_cache
def get_health_monitor() -> HealthMonitor:
    """Monitor whose checks run on a separate, shorter-timeout provider client."""
    checks = {"geofence_engine": get_geofence_engine().check_health}
    check_client = _maps_client(settings.health_check_timeout_seconds)
    if check_client is not None:
        checks["address_resolver"] = AddressResolver(check_client).check_health
        checks["route_engine"] = RouteEngine(check_client).check_health
    return HealthMonitor(checks, interval_seconds=settings.health_check_interval_seconds)
