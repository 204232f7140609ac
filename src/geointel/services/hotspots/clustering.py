"""Density-based clustering of delivery locations."""

from __future__ import annotations

from typing import Sequence

import numpy as np
from sklearn.cluster import DBSCAN

from ...models.domain import Coordinate
from ..geospatial import EARTH_RADIUS_M
from .base import ClusteringResult, Clusterer


class DBSCANClusterer(Clusterer):
    """DBSCAN over great-circle distances.

    Points with at least ``min_points`` neighbours (themselves included)
    within ``eps_meters`` are core points. Points reachable from a core point
    join its cluster, everything else is noise.
    """

    def __init__(self, *, eps_meters: float, min_points: int) -> None:
        if eps_meters <= 0:
            raise ValueError("eps_meters must be > 0")
        if min_points < 1:
            raise ValueError("min_points must be >= 1")
        self.eps_meters = eps_meters
        self.min_points = min_points

    def cluster(self, *, points: Sequence[Coordinate]) -> ClusteringResult:
        metadata = {
            "strategy": "dbscan",
            "eps_meters": self.eps_meters,
            "min_points": self.min_points,
        }
        if not points:
            return ClusteringResult([], metadata=metadata)

        # The haversine metric works on [lat, lng] in radians and unit-sphere distances
        coordinates = np.radians(np.array([[point.lat, point.lng] for point in points]))
        model = DBSCAN(
            eps=self.eps_meters / EARTH_RADIUS_M,
            min_samples=self.min_points,
            metric="haversine",
            algorithm="ball_tree",
        )
        labels = model.fit_predict(coordinates)

        metadata["core_points"] = int(len(model.core_sample_indices_))
        return ClusteringResult([int(label) for label in labels], metadata=metadata)
