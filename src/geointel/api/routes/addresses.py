"""Address validation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...schemas.addresses import (
    AddressBatchItemModel,
    AddressValidationRequest,
    MultipleAddressValidationRequest,
    MultipleAddressValidationResponse,
    ReverseGeocodeRequest,
    ValidationResultModel,
)
from ...schemas.common import CoordinateModel
from ...services.addresses import AddressResolver
from ..dependencies import get_address_resolver

router = APIRouter(prefix="/addresses", tags=["addresses"])


@router.post("/validate", response_model=ValidationResultModel, status_code=status.HTTP_200_OK)
def validate_address(
    payload: AddressValidationRequest,
    resolver: AddressResolver = Depends(get_address_resolver),
) -> ValidationResultModel:
    result = resolver.validate_address(payload.address, payload.country_code)
    return ValidationResultModel.model_validate(result)


@router.post(
    "/validate/batch",
    response_model=MultipleAddressValidationResponse,
    status_code=status.HTTP_200_OK,
)
def validate_multiple_addresses(
    payload: MultipleAddressValidationRequest,
    resolver: AddressResolver = Depends(get_address_resolver),
) -> MultipleAddressValidationResponse:
    items = resolver.validate_multiple_addresses(payload.addresses, payload.country_code)
    return MultipleAddressValidationResponse(
        country_code=payload.country_code,
        results=[AddressBatchItemModel.model_validate(item) for item in items],
    )


@router.post("/reverse", response_model=ValidationResultModel, status_code=status.HTTP_200_OK)
def reverse_geocode(
    payload: ReverseGeocodeRequest,
    resolver: AddressResolver = Depends(get_address_resolver),
) -> ValidationResultModel:
    return ValidationResultModel.model_validate(resolver.reverse_geocode(payload.lat, payload.lng))


@router.post("/resolve", response_model=CoordinateModel, status_code=status.HTTP_200_OK)
def resolve_coordinate(
    payload: AddressValidationRequest,
    resolver: AddressResolver = Depends(get_address_resolver),
) -> CoordinateModel:
    """Coordinate of a confidently matched address; 422 with suggestions otherwise."""
    coordinate = resolver.resolve_coordinate(payload.address, payload.country_code)
    return CoordinateModel.model_validate(coordinate)
