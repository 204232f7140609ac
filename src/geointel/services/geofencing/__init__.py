"""Geofence services."""

from .engine import GeofenceEngine, build_ring
from .store import GeofenceRepository, InMemoryGeofenceRepository

__all__ = ["GeofenceEngine", "GeofenceRepository", "InMemoryGeofenceRepository", "build_ring"]
