"""Geofence storage."""

from __future__ import annotations

import threading
from typing import Optional, Protocol

from ...models.domain import Geofence


class GeofenceRepository(Protocol):
    def get(self, geofence_id: str) -> Optional[Geofence]:
        ...

    def save(self, geofence: Geofence) -> None:
        ...

    def list(self, *, include_inactive: bool = False) -> list[Geofence]:
        ...


class InMemoryGeofenceRepository:
    """Process-local geofence store, safe to share between threads."""

    def __init__(self) -> None:
        self._items: dict[str, Geofence] = {}
        self._lock = threading.Lock()

    def get(self, geofence_id: str) -> Optional[Geofence]:
        with self._lock:
            return self._items.get(geofence_id)

    def save(self, geofence: Geofence) -> None:
        with self._lock:
            self._items[geofence.id] = geofence

    def list(self, *, include_inactive: bool = False) -> list[Geofence]:
        with self._lock:
            items = list(self._items.values())
        return [item for item in items if include_inactive or item.active]
