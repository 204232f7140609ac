"""Pydantic request/response models for address endpoints."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..services.addresses.models import Confidence, ValidationStatus
from .common import CoordinateModel


class AddressValidationRequest(BaseModel):
    address: str = Field(..., min_length=1)
    country_code: str = Field(..., min_length=2, max_length=3, description="ISO 3166-1 alpha-2 or alpha-3.")


class MultipleAddressValidationRequest(BaseModel):
    addresses: List[str] = Field(..., min_length=1)
    country_code: str = Field(..., min_length=2, max_length=3)


class ReverseGeocodeRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class AddressCandidateModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    formatted_address: Optional[str]
    place_id: Optional[str]
    coordinate: Optional[CoordinateModel]
    components: dict[str, str]
    location_type: Optional[str]
    partial_match: bool


class ValidationResultModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: ValidationStatus
    confidence: Optional[Confidence]
    formatted_address: Optional[str]
    components: dict[str, str]
    coordinate: Optional[CoordinateModel]
    place_id: Optional[str]
    location_type: Optional[str]
    partial_match: bool
    original_address: Optional[str]
    suggestions: List[AddressCandidateModel]
    alternatives: List[AddressCandidateModel]
    message: Optional[str]


class AddressBatchItemModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    address: str
    success: bool
    result: Optional[ValidationResultModel]
    error: Optional[str]


class MultipleAddressValidationResponse(BaseModel):
    country_code: str
    results: List[AddressBatchItemModel]
