"""Route calculation, delivery ordering and time-window estimation."""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Optional, Sequence

from ...config import settings
from ...exceptions import GeoIntelError, RouteNotFound, ServiceUnavailable
from ...models.domain import Coordinate, DeliveryStop
from ..maps.base import Location, MappingProvider
from ..maps.google_client import decode_polyline, format_location
from .models import (
    DeliveryTimeWindowReport,
    OptimizedDeliveryRoute,
    Route,
    RouteBatchItem,
    RouteRequest,
    RouteStep,
    TimeWindowEstimate,
)
from .optimizer import WeightingPolicy, optimize_stop_order
from .time_windows import (
    INTERVAL_HOURS,
    next_departure,
    parse_matrix_estimates,
    select_optimal_window,
    summarize_interval,
)

if TYPE_CHECKING:
    from ...persistence.time_windows import TimeWindowCache

# Provider limit on intermediate waypoints per directions request
MAX_WAYPOINTS = 25
HEALTH_CHECK_ROUTE = ("Lilongwe, Malawi", "Blantyre, Malawi")

_HTML_TAG = re.compile(r"<[^>]+>")

logger = logging.getLogger(__name__)


def _leg_coordinate(leg: dict, key: str) -> Optional[Coordinate]:
    location = leg.get(key)
    if not location:
        return None
    return Coordinate.from_mapping(location)


def build_route(payload: dict, traffic_model: Optional[str] = None) -> Route:
    """Convert a provider route payload into a Route, summing all legs."""
    legs = payload.get("legs") or []
    if not legs:
        raise RouteNotFound("Provider route has no legs.")

    distance_m = sum(float(leg.get("distance", {}).get("value", 0)) for leg in legs)
    duration_s = sum(float(leg.get("duration", {}).get("value", 0)) for leg in legs)
    if len(legs) == 1:
        distance_text = legs[0].get("distance", {}).get("text")
        duration_text = legs[0].get("duration", {}).get("text")
    else:
        distance_text = f"{distance_m / 1000:.1f} km"
        duration_text = f"{round(duration_s / 60)} mins"

    steps = [
        RouteStep(
            instruction=_HTML_TAG.sub("", step.get("html_instructions", "")),
            distance_m=float(step.get("distance", {}).get("value", 0)),
            duration_s=float(step.get("duration", {}).get("value", 0)),
            start=_leg_coordinate(step, "start_location"),
        )
        for leg in legs
        for step in leg.get("steps", [])
    ]
    polyline = payload.get("overview_polyline", {}).get("points", "")

    return Route(
        origin=_leg_coordinate(legs[0], "start_location"),
        destination=_leg_coordinate(legs[-1], "end_location"),
        waypoints=[
            coordinate
            for coordinate in (_leg_coordinate(leg, "end_location") for leg in legs[:-1])
            if coordinate is not None
        ],
        distance_m=distance_m,
        duration_s=duration_s,
        distance_text=distance_text,
        duration_text=duration_text,
        polyline=polyline,
        path=decode_polyline(polyline) if polyline else [],
        steps=steps,
        traffic_model=traffic_model,
        waypoint_order=list(payload.get("waypoint_order", [])),
    )


class RouteEngine:
    """Operates purely on coordinates or provider-resolvable place strings.

    Without a provider only straight-line delivery ordering works; every
    provider-backed call fails with ServiceUnavailable.
    """

    def __init__(
        self,
        provider: MappingProvider | None = None,
        *,
        policy: WeightingPolicy | None = None,
        traffic_model: str | None = None,
        intervals: Sequence[str] | None = None,
        max_parallel_requests: int | None = None,
        cache: Optional["TimeWindowCache"] = None,
    ) -> None:
        self.provider = provider
        self.policy = policy or WeightingPolicy.from_settings()
        self.traffic_model = traffic_model or settings.traffic_model
        self.intervals = tuple(intervals or settings.time_window_intervals)
        unknown = [interval for interval in self.intervals if interval not in INTERVAL_HOURS]
        if unknown:
            raise ValueError(f"Unknown time-window intervals: {unknown}")
        self.max_parallel_requests = max_parallel_requests or settings.max_parallel_requests
        self.cache = cache

    def _require_provider(self) -> MappingProvider:
        if self.provider is None:
            raise ServiceUnavailable("Mapping provider is not configured.")
        return self.provider

    def calculate_route(
        self,
        origin: Location,
        destination: Location,
        waypoints: Sequence[Location] | None = None,
        *,
        departure_time: datetime | None = None,
    ) -> Route:
        waypoints = list(waypoints or [])
        if len(waypoints) > MAX_WAYPOINTS:
            raise ValueError(f"At most {MAX_WAYPOINTS} waypoints are supported, got {len(waypoints)}.")

        provider = self._require_provider()
        traffic_model = self.traffic_model if departure_time else None
        routes = provider.directions(
            origin,
            destination,
            waypoints=waypoints,
            optimize=bool(waypoints),
            departure_time=departure_time,
            traffic_model=traffic_model,
        )
        if not routes:
            raise RouteNotFound(
                f"No route found from '{format_location(origin)}' to '{format_location(destination)}'."
            )
        return build_route(routes[0], traffic_model)

    def calculate_routes_batch(self, requests: Sequence[RouteRequest]) -> list[RouteBatchItem]:
        """Independent route lookups in parallel; each item reports its own error."""
        if not requests:
            return []
        self._require_provider()

        def _calculate(indexed: tuple[int, RouteRequest]) -> RouteBatchItem:
            index, request = indexed
            try:
                route = self.calculate_route(request.origin, request.destination, request.waypoints)
            except (GeoIntelError, ValueError) as exc:
                logger.warning(f"Route {index} in batch failed: {exc}")
                return RouteBatchItem(index=index, success=False, error=str(exc))
            return RouteBatchItem(index=index, success=True, route=route)

        workers = min(self.max_parallel_requests, len(requests))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(_calculate, enumerate(requests)))

    def optimize_multiple_deliveries(
        self,
        driver_location: Coordinate,
        deliveries: Sequence[DeliveryStop],
        *,
        policy: WeightingPolicy | None = None,
        now: datetime | None = None,
        refine_with_provider: bool = False,
    ) -> OptimizedDeliveryRoute:
        if refine_with_provider:
            self._require_provider()
        result = optimize_stop_order(
            driver_location,
            deliveries,
            policy=policy or self.policy,
            now=now,
        )
        logger.info(
            f"Ordered {len(result.stops)} deliveries ({len(result.skipped)} skipped), "
            f"{result.total_distance_km:.2f} km estimated"
        )
        if refine_with_provider and result.stops:
            self._refine_with_provider(result)
        return result

    def _refine_with_provider(self, result: OptimizedDeliveryRoute) -> None:
        """Replace straight-line legs with provider legs for the chosen order, in place."""
        stops = result.stops
        if len(stops) - 1 > MAX_WAYPOINTS:
            result.refinement_error = f"Too many stops to refine (max {MAX_WAYPOINTS + 1})."
            return
        try:
            routes = self.provider.directions(
                result.driver_location,
                stops[-1].stop.location,
                waypoints=[item.stop.location for item in stops[:-1]],
                optimize=False,
            )
            if not routes:
                raise RouteNotFound("Provider could not connect the delivery stops.")
            legs = routes[0].get("legs") or []
            if len(legs) != len(stops):
                raise RouteNotFound(f"Provider returned {len(legs)} legs for {len(stops)} stops.")
        except (ServiceUnavailable, RouteNotFound) as exc:
            logger.warning(f"Keeping straight-line estimates, provider refinement failed: {exc}")
            result.refinement_error = str(exc)
            return

        start = stops[0].eta - timedelta(minutes=stops[0].cumulative_duration_min)
        cumulative_km = 0.0
        cumulative_min = 0.0
        refined = []
        for item, leg in zip(stops, legs):
            leg_km = float(leg.get("distance", {}).get("value", 0)) / 1000.0
            leg_min = float(leg.get("duration", {}).get("value", 0)) / 60.0
            cumulative_km += leg_km
            cumulative_min += leg_min
            refined.append(
                replace(
                    item,
                    leg_distance_km=leg_km,
                    cumulative_distance_km=cumulative_km,
                    leg_duration_min=leg_min,
                    cumulative_duration_min=cumulative_min,
                    eta=start + timedelta(minutes=cumulative_min),
                )
            )
        result.stops = refined
        result.total_distance_km = cumulative_km
        result.total_duration_min = cumulative_min
        result.polyline = routes[0].get("overview_polyline", {}).get("points")
        result.refined = True

    def calculate_delivery_time_windows(
        self,
        origin: Location,
        destinations: Sequence[Location],
        *,
        now: datetime | None = None,
    ) -> DeliveryTimeWindowReport:
        if not destinations:
            raise ValueError("At least one destination is required.")
        provider = self._require_provider()
        now = now or datetime.now(timezone.utc)
        labels = [format_location(destination) for destination in destinations]

        def _estimate(interval: str) -> TimeWindowEstimate:
            departure = next_departure(interval, now)
            try:
                data = provider.distance_matrix(
                    [origin],
                    list(destinations),
                    departure_time=departure,
                    traffic_model=self.traffic_model,
                )
            except ServiceUnavailable as exc:
                logger.warning(f"Time-window estimate for '{interval}' failed: {exc}")
                window = summarize_interval(interval, departure, [])
                window.failed_destinations = list(labels)
                window.error = str(exc)
                return window
            return summarize_interval(interval, departure, parse_matrix_estimates(labels, data))

        workers = min(self.max_parallel_requests, len(self.intervals))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            windows = list(executor.map(_estimate, self.intervals))

        if all(window.estimated_duration is None for window in windows):
            raise ServiceUnavailable("All destination lookups failed for every time window.")

        optimal, minimum = select_optimal_window(
            {window.interval: window.estimated_duration for window in windows}
        )
        report = DeliveryTimeWindowReport(
            origin=format_location(origin),
            windows=windows,
            optimal_window=optimal,
            min_average_duration=minimum,
            partial=any(window.failed_destinations for window in windows),
        )
        logger.info(f"Optimal delivery window from {report.origin}: {optimal}")
        if self.cache is not None:
            self.cache.store(report)
        return report

    def check_health(self) -> str:
        origin, destination = HEALTH_CHECK_ROUTE
        try:
            self.calculate_route(origin, destination)
            return "healthy"
        except (GeoIntelError, ValueError) as exc:
            logger.error(f"Route engine health check failed: {exc}")
            return "unhealthy"
