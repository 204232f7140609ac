"""Delivery hotspot clustering."""

from .analysis import TIMEFRAMES, build_clusters, filter_by_timeframe, popular_times
from .base import NOISE_LABEL, Clusterer, ClusteringResult
from .clustering import DBSCANClusterer
from .dispatcher import get_clusterer

__all__ = [
    "TIMEFRAMES",
    "NOISE_LABEL",
    "Clusterer",
    "ClusteringResult",
    "DBSCANClusterer",
    "build_clusters",
    "filter_by_timeframe",
    "get_clusterer",
    "popular_times",
]
