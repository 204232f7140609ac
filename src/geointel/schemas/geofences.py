"""Geofence request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import CoordinateModel


class GeofenceCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    coordinates: List[CoordinateModel] = Field(
        ..., description="Closed ring: at least four points, first equal to last."
    )


class GeofenceUpdateRequest(GeofenceCreateRequest):
    expected_version: Optional[int] = Field(
        default=None, ge=1, description="Reject the update if the stored version differs."
    )


class DeliveryAreaRequest(BaseModel):
    point: CoordinateModel


class DeliveryAreaResponse(BaseModel):
    geofence_id: str
    inside: bool


class GeofenceModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    coordinates: List[CoordinateModel]
    center: CoordinateModel
    area: float
    active: bool
    version: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
