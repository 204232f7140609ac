"""Day-part traffic estimation helpers for delivery time windows."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Mapping, Optional, Sequence

from ...models.domain import as_utc
from .models import DestinationEstimate, TimeWindowEstimate

# Representative departure hour for each day-part label, read in the
# timezone of the reference time (UTC unless the caller passes a local one)
INTERVAL_HOURS: dict[str, int] = {
    "morning": 8,
    "midday": 12,
    "evening": 18,
    "night": 22,
}

LIGHT_TRAFFIC_RATIO = 1.1
MODERATE_TRAFFIC_RATIO = 1.3


def next_departure(interval: str, now: datetime) -> datetime:
    """Next occurrence of the interval's departure hour strictly after ``now``.

    The hour is taken in ``now``'s own timezone, so pass a zone-aware local
    time to get regional day-parts. Naive values are treated as UTC.
    """
    now = as_utc(now) if now.tzinfo is None else now
    try:
        hour = INTERVAL_HOURS[interval]
    except KeyError as exc:
        raise ValueError(f"Unknown time-window interval '{interval}'.") from exc
    departure = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if departure <= now:
        departure += timedelta(days=1)
    return departure


def parse_matrix_estimates(destinations: Sequence[str], data: dict) -> list[DestinationEstimate]:
    """Align the first distance-matrix row with the requested destinations."""
    rows = data.get("rows") or [{}]
    elements = rows[0].get("elements", [])
    estimates: list[DestinationEstimate] = []
    for index, destination in enumerate(destinations):
        element = elements[index] if index < len(elements) else {"status": "MISSING"}
        status = element.get("status", "UNKNOWN_ERROR")
        if status != "OK":
            estimates.append(DestinationEstimate(destination=destination, status=status))
            continue
        estimates.append(
            DestinationEstimate(
                destination=destination,
                status=status,
                duration_s=_value(element.get("duration")),
                duration_in_traffic_s=_value(element.get("duration_in_traffic")),
                distance_m=_value(element.get("distance")),
            )
        )
    return estimates


def _value(field: Optional[dict]) -> Optional[float]:
    if not field or field.get("value") is None:
        return None
    return float(field["value"])


def classify_traffic(estimates: Sequence[DestinationEstimate]) -> dict:
    """Summarize congestion as the in-traffic to free-flow duration ratio."""
    pairs = [
        (estimate.duration_in_traffic_s, estimate.duration_s)
        for estimate in estimates
        if estimate.duration_in_traffic_s is not None and estimate.duration_s
    ]
    if not pairs:
        return {"level": "unknown", "ratio": None, "samples": 0}
    ratio = sum(in_traffic for in_traffic, _ in pairs) / sum(free for _, free in pairs)
    if ratio < LIGHT_TRAFFIC_RATIO:
        level = "light"
    elif ratio < MODERATE_TRAFFIC_RATIO:
        level = "moderate"
    else:
        level = "heavy"
    return {"level": level, "ratio": round(ratio, 3), "samples": len(pairs)}


def summarize_interval(
    interval: str,
    departure_time: datetime,
    estimates: list[DestinationEstimate],
) -> TimeWindowEstimate:
    durations = [
        estimate.effective_duration_s
        for estimate in estimates
        if estimate.status == "OK" and estimate.effective_duration_s is not None
    ]
    return TimeWindowEstimate(
        interval=interval,
        departure_time=departure_time,
        estimates=estimates,
        estimated_duration=sum(durations) / len(durations) if durations else None,
        traffic_conditions=classify_traffic(estimates),
        failed_destinations=[
            estimate.destination
            for estimate in estimates
            if estimate.status != "OK" or estimate.effective_duration_s is None
        ],
    )


def select_optimal_window(averages: Mapping[str, Optional[float]]) -> tuple[Optional[str], Optional[float]]:
    """Interval with the lowest average duration; earlier intervals win ties."""
    optimal: Optional[str] = None
    minimum: Optional[float] = None
    for interval, average in averages.items():
        if average is None:
            continue
        if minimum is None or average < minimum:
            optimal, minimum = interval, average
    return optimal, minimum
