"""Geofence endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ...schemas.geofences import (
    DeliveryAreaRequest,
    DeliveryAreaResponse,
    GeofenceCreateRequest,
    GeofenceModel,
    GeofenceUpdateRequest,
)
from ...services.export import geofence_to_feature, geofences_to_geojson
from ...services.geofencing import GeofenceEngine
from ..dependencies import get_geofence_engine

router = APIRouter(prefix="/geofences", tags=["geofences"])


@router.post("", response_model=GeofenceModel, status_code=status.HTTP_201_CREATED)
def create_geofence(
    payload: GeofenceCreateRequest,
    engine: GeofenceEngine = Depends(get_geofence_engine),
) -> GeofenceModel:
    geofence = engine.create_geofence(
        [point.to_domain() for point in payload.coordinates], payload.name
    )
    return GeofenceModel.model_validate(geofence)


@router.get("", response_model=list[GeofenceModel], status_code=status.HTTP_200_OK)
def list_geofences(
    include_inactive: bool = Query(default=False),
    engine: GeofenceEngine = Depends(get_geofence_engine),
) -> list[GeofenceModel]:
    return [GeofenceModel.model_validate(item) for item in engine.list_geofences(include_inactive=include_inactive)]


@router.get("/geojson", status_code=status.HTTP_200_OK)
def export_geofences(
    include_inactive: bool = Query(default=False),
    engine: GeofenceEngine = Depends(get_geofence_engine),
) -> dict:
    """All geofences as a GeoJSON FeatureCollection."""
    return geofences_to_geojson(engine.list_geofences(include_inactive=include_inactive))


@router.get("/{geofence_id}", response_model=GeofenceModel, status_code=status.HTTP_200_OK)
def get_geofence(
    geofence_id: str,
    engine: GeofenceEngine = Depends(get_geofence_engine),
) -> GeofenceModel:
    return GeofenceModel.model_validate(engine.get_geofence(geofence_id))


@router.get("/{geofence_id}/geojson", status_code=status.HTTP_200_OK)
def export_geofence(
    geofence_id: str,
    engine: GeofenceEngine = Depends(get_geofence_engine),
) -> dict:
    return geofence_to_feature(engine.get_geofence(geofence_id))


@router.put("/{geofence_id}", response_model=GeofenceModel, status_code=status.HTTP_200_OK)
def update_geofence(
    geofence_id: str,
    payload: GeofenceUpdateRequest,
    engine: GeofenceEngine = Depends(get_geofence_engine),
) -> GeofenceModel:
    geofence = engine.update_geofence(
        geofence_id,
        [point.to_domain() for point in payload.coordinates],
        payload.name,
        expected_version=payload.expected_version,
    )
    return GeofenceModel.model_validate(geofence)


@router.delete("/{geofence_id}", response_model=GeofenceModel, status_code=status.HTTP_200_OK)
def deactivate_geofence(
    geofence_id: str,
    engine: GeofenceEngine = Depends(get_geofence_engine),
) -> GeofenceModel:
    return GeofenceModel.model_validate(engine.deactivate_geofence(geofence_id))


@router.post(
    "/{geofence_id}/contains",
    response_model=DeliveryAreaResponse,
    status_code=status.HTTP_200_OK,
)
def is_point_in_delivery_area(
    geofence_id: str,
    payload: DeliveryAreaRequest,
    engine: GeofenceEngine = Depends(get_geofence_engine),
) -> DeliveryAreaResponse:
    inside = engine.is_point_in_delivery_area(payload.point.to_domain(), geofence_id)
    return DeliveryAreaResponse(geofence_id=geofence_id, inside=inside)
