"""Shared request/response schemas."""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import Coordinate


class CoordinateModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def to_domain(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)


LocationInput = Union[CoordinateModel, str]


def to_location(value: LocationInput) -> Union[Coordinate, str]:
    return value.to_domain() if isinstance(value, CoordinateModel) else value
