"""Routing endpoints."""

from __future__ import annotations

from dataclasses import replace

from fastapi import APIRouter, Depends, status

from ...schemas.common import CoordinateModel, to_location
from ...schemas.routing import (
    BatchRouteRequest,
    DeliveryTimeWindowReportModel,
    DeliveryTimeWindowRequest,
    OptimizedDeliveryRouteModel,
    OptimizedStopModel,
    OptimizeDeliveriesRequest,
    RouteBatchItemModel,
    RouteCalculationRequest,
    RouteModel,
    SkippedStopModel,
)
from ...services.routing.engine import RouteEngine
from ...services.routing.models import OptimizedDeliveryRoute, RouteRequest
from ..dependencies import get_route_engine

router = APIRouter(prefix="/routes", tags=["routes"])


def _to_response(result: OptimizedDeliveryRoute) -> OptimizedDeliveryRouteModel:
    return OptimizedDeliveryRouteModel(
        driver_location=CoordinateModel.model_validate(result.driver_location),
        stops=[
            OptimizedStopModel(
                stop_id=item.stop.id,
                location=CoordinateModel.model_validate(item.stop.location),
                sequence=item.sequence,
                score=item.score,
                leg_distance_km=round(item.leg_distance_km, 3),
                cumulative_distance_km=round(item.cumulative_distance_km, 3),
                leg_duration_min=round(item.leg_duration_min, 2),
                cumulative_duration_min=round(item.cumulative_duration_min, 2),
                eta=item.eta,
            )
            for item in result.stops
        ],
        total_distance_km=round(result.total_distance_km, 3),
        total_duration_min=round(result.total_duration_min, 2),
        skipped=[SkippedStopModel.model_validate(item) for item in result.skipped],
        polyline=result.polyline,
        refined=result.refined,
        refinement_error=result.refinement_error,
    )


@router.post("/calculate", response_model=RouteModel, status_code=status.HTTP_200_OK)
def calculate_route(
    payload: RouteCalculationRequest,
    engine: RouteEngine = Depends(get_route_engine),
) -> RouteModel:
    origin, destination, waypoints = payload.locations()
    route = engine.calculate_route(
        origin, destination, waypoints, departure_time=payload.departure_time
    )
    return RouteModel.model_validate(route)


@router.post("/batch", response_model=list[RouteBatchItemModel], status_code=status.HTTP_200_OK)
def calculate_routes_batch(
    payload: BatchRouteRequest,
    engine: RouteEngine = Depends(get_route_engine),
) -> list[RouteBatchItemModel]:
    requests = [RouteRequest(*item.locations()) for item in payload.routes]
    return [RouteBatchItemModel.model_validate(item) for item in engine.calculate_routes_batch(requests)]


@router.post("/optimize", response_model=OptimizedDeliveryRouteModel, status_code=status.HTTP_200_OK)
def optimize_deliveries(
    payload: OptimizeDeliveriesRequest,
    engine: RouteEngine = Depends(get_route_engine),
) -> OptimizedDeliveryRouteModel:
    policy = engine.policy
    if payload.weights is not None:
        policy = replace(policy, **payload.weights.model_dump(exclude_none=True))
    result = engine.optimize_multiple_deliveries(
        payload.driver_location.to_domain(),
        [stop.to_domain() for stop in payload.deliveries],
        policy=policy,
        refine_with_provider=payload.refine_with_provider,
    )
    return _to_response(result)


@router.post(
    "/time-windows",
    response_model=DeliveryTimeWindowReportModel,
    status_code=status.HTTP_200_OK,
)
def calculate_delivery_time_windows(
    payload: DeliveryTimeWindowRequest,
    engine: RouteEngine = Depends(get_route_engine),
) -> DeliveryTimeWindowReportModel:
    report = engine.calculate_delivery_time_windows(
        to_location(payload.origin),
        [to_location(destination) for destination in payload.destinations],
        now=payload.reference_time,
    )
    return DeliveryTimeWindowReportModel.model_validate(report)
