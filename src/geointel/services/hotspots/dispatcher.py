"""Factory for hotspot clusterers based on configuration."""

from __future__ import annotations

from typing import Any

from ...config import settings
from .base import Clusterer
from .clustering import DBSCANClusterer


def get_clusterer(method: str = "dbscan", **kwargs: Any) -> Clusterer:
    match method:
        case "dbscan":
            return DBSCANClusterer(
                eps_meters=kwargs.get("eps_meters", settings.hotspot_eps_meters),
                min_points=kwargs.get("min_points", settings.hotspot_min_points),
            )
        case _:
            raise ValueError(f"Unknown clustering method '{method}'.")
