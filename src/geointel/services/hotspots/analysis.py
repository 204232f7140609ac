"""Hotspot derivation from historical delivery records."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from ...models.domain import Cluster, DeliveryRecord, as_utc
from ..geospatial import distance_m, mean_center
from .base import Clusterer

TIMEFRAME_SPANS: dict[str, timedelta] = {
    "daily": timedelta(days=1),
    "weekly": timedelta(days=7),
    "monthly": timedelta(days=30),
}
TIMEFRAMES = (*TIMEFRAME_SPANS, "custom")


def filter_by_timeframe(
    records: Sequence[DeliveryRecord],
    timeframe: str,
    *,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list[DeliveryRecord]:
    """Keep records inside the timeframe.

    Rolling timeframes are anchored on the newest record in the batch, so the
    result does not depend on the wall clock. ``custom`` keeps records between
    the optional ``start`` and ``end`` bounds (inclusive). Naive timestamps and
    bounds are read as UTC.
    """
    if timeframe not in TIMEFRAMES:
        raise ValueError(f"Unknown timeframe '{timeframe}'. Expected one of {', '.join(TIMEFRAMES)}.")
    if not records:
        return []

    if timeframe == "custom":
        lower = as_utc(start) if start is not None else None
        upper = as_utc(end) if end is not None else None
        return [
            record
            for record in records
            if (lower is None or as_utc(record.timestamp) >= lower)
            and (upper is None or as_utc(record.timestamp) <= upper)
        ]

    newest = max(as_utc(record.timestamp) for record in records)
    cutoff = newest - TIMEFRAME_SPANS[timeframe]
    return [record for record in records if as_utc(record.timestamp) >= cutoff]


def popular_times(records: Sequence[DeliveryRecord]) -> list[int]:
    histogram = [0] * 24
    for record in records:
        histogram[record.timestamp.hour] += 1
    return histogram


def build_clusters(
    records: Sequence[DeliveryRecord],
    clusterer: Clusterer,
    *,
    radius_m: float,
) -> list[Cluster]:
    """Cluster the records and describe each surviving cluster.

    The popularity histogram counts members lying within ``radius_m`` of the
    cluster center. Clusters come back largest first.
    """
    if not records:
        return []

    result = clusterer.cluster(points=[record.location for record in records])
    groups = sorted(result.groups().values(), key=lambda indices: (-len(indices), indices[0]))

    clusters: list[Cluster] = []
    for label, indices in enumerate(groups):
        members = [records[index] for index in indices]
        center = mean_center(member.location for member in members)
        distances = [distance_m(member.location, center) for member in members]
        clusters.append(
            Cluster(
                label=label,
                center=center,
                points=[member.location for member in members],
                radius_m=max(distances),
                popular_times=popular_times(
                    [member for member, dist in zip(members, distances) if dist <= radius_m]
                ),
                total_deliveries=len(members),
            )
        )
    return clusters
