"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Union

from ...models.domain import Coordinate, DeliveryStop


@dataclass(slots=True)
class RouteStep:
    instruction: str
    distance_m: float
    duration_s: float
    start: Optional[Coordinate]


@dataclass(slots=True)
class Route:
    origin: Optional[Coordinate]
    destination: Optional[Coordinate]
    waypoints: List[Coordinate]
    distance_m: float
    duration_s: float
    distance_text: Optional[str]
    duration_text: Optional[str]
    polyline: str
    path: List[Coordinate]
    steps: List[RouteStep]
    traffic_model: Optional[str] = None
    waypoint_order: List[int] = field(default_factory=list)


@dataclass(slots=True)
class RouteRequest:
    origin: Union[str, Coordinate]
    destination: Union[str, Coordinate]
    waypoints: Sequence[Union[str, Coordinate]] = ()


@dataclass(slots=True)
class RouteBatchItem:
    index: int
    success: bool
    route: Optional[Route] = None
    error: Optional[str] = None


@dataclass(slots=True)
class OptimizedStop:
    stop: DeliveryStop
    sequence: int
    score: float
    leg_distance_km: float
    cumulative_distance_km: float
    leg_duration_min: float
    cumulative_duration_min: float
    eta: datetime


@dataclass(slots=True)
class SkippedStop:
    stop_id: str
    reason: str


@dataclass(slots=True)
class OptimizedDeliveryRoute:
    driver_location: Coordinate
    stops: List[OptimizedStop]
    total_distance_km: float
    total_duration_min: float
    skipped: List[SkippedStop] = field(default_factory=list)
    polyline: Optional[str] = None
    refined: bool = False
    refinement_error: Optional[str] = None


@dataclass(slots=True)
class DestinationEstimate:
    destination: str
    status: str
    duration_s: Optional[float] = None
    duration_in_traffic_s: Optional[float] = None
    distance_m: Optional[float] = None

    @property
    def effective_duration_s(self) -> Optional[float]:
        if self.duration_in_traffic_s is not None:
            return self.duration_in_traffic_s
        return self.duration_s


@dataclass(slots=True)
class TimeWindowEstimate:
    interval: str
    departure_time: datetime
    estimates: List[DestinationEstimate]
    estimated_duration: Optional[float]
    traffic_conditions: dict
    failed_destinations: List[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass(slots=True)
class DeliveryTimeWindowReport:
    origin: str
    windows: List[TimeWindowEstimate]
    optimal_window: Optional[str]
    min_average_duration: Optional[float]
    partial: bool = False
