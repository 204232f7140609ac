"""Weighted nearest-neighbour ordering of delivery stops.

Starting from the driver, the next stop is the unvisited one with the lowest
``travel_km - bonus(stop)``. The bonus rewards imminent or overdue time
windows, premium customers and high order values. Ties break on stop id, so
identical inputs always give the same order. This is a heuristic, not an
exact TSP solution.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from ...config import settings
from ...models.domain import Coordinate, CustomerTier, DeliveryStop, as_utc
from ..geospatial import distance_km
from .models import OptimizedDeliveryRoute, OptimizedStop, SkippedStop


@dataclass(frozen=True, slots=True)
class WeightingPolicy:
    """Bonus weights, all expressed in km of travel the optimizer will trade for them."""

    time_window_weight: float = 0.05
    premium_bonus: float = 2.0
    value_weight: float = 0.01
    urgency_horizon_minutes: float = 60.0
    average_speed_kmh: float = 40.0

    @classmethod
    def from_settings(cls) -> "WeightingPolicy":
        return cls(
            time_window_weight=settings.route_time_window_weight,
            premium_bonus=settings.route_premium_bonus,
            value_weight=settings.route_value_weight,
            urgency_horizon_minutes=settings.route_urgency_horizon_minutes,
            average_speed_kmh=settings.route_average_speed_kmh,
        )

    def travel_minutes(self, km: float) -> float:
        return km / self.average_speed_kmh * 60.0


def time_urgency(deadline: datetime, arrival: datetime, horizon_minutes: float) -> float:
    """Urgency in minutes: grows as the deadline approaches and keeps growing once missed."""
    minutes_left = (as_utc(deadline) - as_utc(arrival)).total_seconds() / 60.0
    if minutes_left < 0:
        return abs(minutes_left) + horizon_minutes
    return max(0.0, horizon_minutes - minutes_left)


def stop_bonus(stop: DeliveryStop, arrival: datetime, policy: WeightingPolicy) -> float:
    bonus = 0.0
    if stop.time_window is not None:
        bonus += policy.time_window_weight * time_urgency(
            stop.time_window, arrival, policy.urgency_horizon_minutes
        )
    if stop.customer_tier == CustomerTier.PREMIUM:
        bonus += policy.premium_bonus
    if stop.value is not None:
        bonus += policy.value_weight * float(stop.value)
    return bonus


def _reject_reason(stop: DeliveryStop, seen_ids: set[str]) -> Optional[str]:
    if stop.id in seen_ids:
        return "duplicate stop id"
    if stop.value is not None and not math.isfinite(float(stop.value)):
        return "order value is not a finite number"
    return None


def optimize_stop_order(
    driver_location: Coordinate,
    stops: Sequence[DeliveryStop],
    *,
    policy: WeightingPolicy | None = None,
    now: datetime | None = None,
) -> OptimizedDeliveryRoute:
    """Order stops with the weighted nearest-neighbour heuristic.

    Distances are great-circle km and ETAs assume ``policy.average_speed_kmh``.
    Stops that cannot be scored are reported in ``skipped`` instead of
    failing the whole batch.
    """
    policy = policy or WeightingPolicy.from_settings()
    start = as_utc(now or datetime.now(timezone.utc))

    pending: list[DeliveryStop] = []
    skipped: list[SkippedStop] = []
    seen_ids: set[str] = set()
    for stop in stops:
        reason = _reject_reason(stop, seen_ids)
        if reason:
            skipped.append(SkippedStop(stop_id=stop.id, reason=reason))
            continue
        seen_ids.add(stop.id)
        pending.append(stop)

    ordered: list[OptimizedStop] = []
    current = driver_location
    cumulative_km = 0.0
    cumulative_min = 0.0

    while pending:
        best_key: tuple[float, str] | None = None
        best: tuple[DeliveryStop, float, float] | None = None
        for stop in pending:
            leg_km = distance_km(current, stop.location)
            leg_min = policy.travel_minutes(leg_km)
            arrival = start + timedelta(minutes=cumulative_min + leg_min)
            key = (leg_km - stop_bonus(stop, arrival, policy), stop.id)
            if best_key is None or key < best_key:
                best_key = key
                best = (stop, leg_km, leg_min)

        stop, leg_km, leg_min = best
        pending.remove(stop)
        cumulative_km += leg_km
        cumulative_min += leg_min
        ordered.append(
            OptimizedStop(
                stop=stop,
                sequence=len(ordered) + 1,
                score=best_key[0],
                leg_distance_km=leg_km,
                cumulative_distance_km=cumulative_km,
                leg_duration_min=leg_min,
                cumulative_duration_min=cumulative_min,
                eta=start + timedelta(minutes=cumulative_min),
            )
        )
        current = stop.location

    return OptimizedDeliveryRoute(
        driver_location=driver_location,
        stops=ordered,
        total_distance_km=cumulative_km,
        total_duration_min=cumulative_min,
        skipped=skipped,
    )
