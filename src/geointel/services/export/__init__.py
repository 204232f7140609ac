"""Export services."""

from .geojson import (
    cluster_to_feature,
    clusters_to_geojson,
    geofence_to_feature,
    geofences_to_geojson,
)

__all__ = [
    "cluster_to_feature",
    "clusters_to_geojson",
    "geofence_to_feature",
    "geofences_to_geojson",
]
