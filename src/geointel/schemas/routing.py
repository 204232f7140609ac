"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import CustomerTier, DeliveryStop
from .common import CoordinateModel, LocationInput, to_location


class RouteCalculationRequest(BaseModel):
    origin: LocationInput
    destination: LocationInput
    waypoints: List[LocationInput] = Field(default_factory=list)
    departure_time: Optional[datetime] = Field(
        default=None, description="Departure time for traffic-aware durations."
    )

    def locations(self) -> tuple:
        return (
            to_location(self.origin),
            to_location(self.destination),
            [to_location(waypoint) for waypoint in self.waypoints],
        )


class BatchRouteRequest(BaseModel):
    routes: List[RouteCalculationRequest] = Field(..., min_length=1)


class DeliveryStopModel(BaseModel):
    id: str = Field(..., min_length=1)
    location: CoordinateModel
    time_window: Optional[datetime] = Field(default=None, description="Delivery deadline.")
    customer_tier: CustomerTier = CustomerTier.STANDARD
    value: Optional[Decimal] = None

    def to_domain(self) -> DeliveryStop:
        return DeliveryStop(
            id=self.id,
            location=self.location.to_domain(),
            time_window=self.time_window,
            customer_tier=self.customer_tier,
            value=self.value,
        )


class WeightingOverrides(BaseModel):
    time_window_weight: Optional[float] = Field(None, ge=0)
    premium_bonus: Optional[float] = Field(None, ge=0)
    value_weight: Optional[float] = Field(None, ge=0)
    urgency_horizon_minutes: Optional[float] = Field(None, gt=0)
    average_speed_kmh: Optional[float] = Field(None, gt=0)


class OptimizeDeliveriesRequest(BaseModel):
    driver_location: CoordinateModel
    deliveries: List[DeliveryStopModel] = Field(..., min_length=1)
    weights: Optional[WeightingOverrides] = None
    refine_with_provider: bool = Field(
        default=False, description="Replace straight-line legs with provider road legs."
    )


class DeliveryTimeWindowRequest(BaseModel):
    origin: LocationInput
    destinations: List[LocationInput] = Field(..., min_length=1)
    reference_time: Optional[datetime] = Field(
        None,
        description="Local time with UTC offset; day-part hours are read in its timezone. Defaults to now in UTC.",
    )


class RouteStepModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    instruction: str
    distance_m: float
    duration_s: float
    start: Optional[CoordinateModel]


class RouteModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    origin: Optional[CoordinateModel]
    destination: Optional[CoordinateModel]
    waypoints: List[CoordinateModel]
    distance_m: float
    duration_s: float
    distance_text: Optional[str]
    duration_text: Optional[str]
    polyline: str
    path: List[CoordinateModel]
    steps: List[RouteStepModel]
    traffic_model: Optional[str]
    waypoint_order: List[int]


class RouteBatchItemModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    index: int
    success: bool
    route: Optional[RouteModel]
    error: Optional[str]


class OptimizedStopModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stop_id: str
    location: CoordinateModel
    sequence: int
    score: float
    leg_distance_km: float
    cumulative_distance_km: float
    leg_duration_min: float
    cumulative_duration_min: float
    eta: datetime


class SkippedStopModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stop_id: str
    reason: str


class OptimizedDeliveryRouteModel(BaseModel):
    driver_location: CoordinateModel
    stops: List[OptimizedStopModel]
    total_distance_km: float
    total_duration_min: float
    skipped: List[SkippedStopModel]
    polyline: Optional[str]
    refined: bool
    refinement_error: Optional[str]


class DestinationEstimateModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    destination: str
    status: str
    duration_s: Optional[float]
    duration_in_traffic_s: Optional[float]
    distance_m: Optional[float]


class TimeWindowEstimateModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    interval: str
    departure_time: datetime
    estimates: List[DestinationEstimateModel]
    estimated_duration: Optional[float]
    traffic_conditions: dict
    failed_destinations: List[str]
    error: Optional[str]


class DeliveryTimeWindowReportModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    origin: str
    windows: List[TimeWindowEstimateModel]
    optimal_window: Optional[str]
    min_average_duration: Optional[float]
    partial: bool
