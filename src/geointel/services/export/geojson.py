"""GeoJSON export utilities for geofences and delivery hotspots."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from shapely.geometry import MultiPoint, mapping

from ...models.domain import Cluster, Geofence
from ..geospatial import to_polygon


def generate_zone_color(index: int) -> str:
    """Generate distinct colors for map layers."""
    colors = [
        "#02d8e0", "#e0003e", "#38e000", "#0000c1", "#e0e005",
        "#611cc7", "#e0af00", "#13aae0", "#a4d819", "#00e0bb",
    ]
    return colors[index % len(colors)]


def geofence_to_feature(geofence: Geofence) -> Dict[str, Any]:
    """Convert a geofence to a GeoJSON Polygon feature (lng, lat order)."""
    polygon = to_polygon(geofence.coordinates)
    return {
        "type": "Feature",
        "id": geofence.id,
        "geometry": mapping(polygon),
        "properties": {
            "name": geofence.name,
            "active": geofence.active,
            "version": geofence.version,
            "area": geofence.area,
            "center": geofence.center.as_dict(),
        },
    }


def cluster_to_feature(cluster: Cluster) -> Dict[str, Any]:
    """Convert a hotspot to a feature whose geometry is the convex hull of its points.

    Degenerate clusters (one location, or collinear points) produce a Point or
    LineString hull.
    """
    hull = MultiPoint([(point.lng, point.lat) for point in cluster.points]).convex_hull
    return {
        "type": "Feature",
        "id": f"hotspot-{cluster.label}",
        "geometry": mapping(hull),
        "properties": {
            "center": cluster.center.as_dict(),
            "radius_m": round(cluster.radius_m, 1),
            "total_deliveries": cluster.total_deliveries,
            "popular_times": list(cluster.popular_times),
            "color": generate_zone_color(cluster.label),
        },
    }


def to_feature_collection(features: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    feature_list: List[Dict[str, Any]] = list(features)
    return {"type": "FeatureCollection", "features": feature_list}


def geofences_to_geojson(geofences: Iterable[Geofence]) -> Dict[str, Any]:
    return to_feature_collection(geofence_to_feature(geofence) for geofence in geofences)


def clusters_to_geojson(clusters: Iterable[Cluster]) -> Dict[str, Any]:
    return to_feature_collection(cluster_to_feature(cluster) for cluster in clusters)
