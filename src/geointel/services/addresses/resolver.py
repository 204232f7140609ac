"""Free-text address validation and reverse geocoding."""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from ...config import settings
from ...data.countries import CountrySchema, get_country
from ...exceptions import GeoIntelError, NoMatchFound, ValidationFailed
from ...models.domain import Coordinate
from ..maps.base import MappingProvider
from .models import (
    AddressBatchItem,
    AddressCandidate,
    Confidence,
    ValidationResult,
    ValidationStatus,
)

# Apartment/unit/suite/floor designators and the token that follows them
_UNIT_PATTERN = re.compile(
    r"[\s,]*(?:\b(?:apt|apartment|unit|suite|ste|floor|flat|fl)\b\.?|#)\s*[\w-]+",
    re.IGNORECASE,
)
_WHITESPACE = re.compile(r"\s+")

HEALTH_CHECK_ADDRESS = ("test", "MWI")

logger = logging.getLogger(__name__)


def extract_main_components(address: str) -> str:
    """Strip unit-level tokens so the provider can match the building."""
    simplified = _UNIT_PATTERN.sub("", address)
    return _WHITESPACE.sub(" ", simplified).strip(" ,")


def determine_confidence(result: dict) -> Confidence:
    location_type = result.get("geometry", {}).get("location_type")
    partial_match = bool(result.get("partial_match", False))
    if location_type == "ROOFTOP" and not partial_match:
        return Confidence.HIGH
    if location_type in ("RANGE_INTERPOLATED", "GEOMETRIC_CENTER"):
        return Confidence.MEDIUM
    return Confidence.LOW


def _coordinate_of(result: dict) -> Optional[Coordinate]:
    location = result.get("geometry", {}).get("location")
    if not location:
        return None
    try:
        return Coordinate.from_mapping(location)
    except ValueError:
        return None


def format_candidate(result: dict, schema: Optional[CountrySchema] = None) -> AddressCandidate:
    """Convert a provider result, keeping only the components the country schema knows."""
    wanted = schema.component_types if schema else None
    components: dict[str, str] = {}
    for component in result.get("address_components", []):
        for component_type in component.get("types", []):
            if wanted is None or component_type in wanted:
                components[component_type] = component.get("long_name", "")

    return AddressCandidate(
        formatted_address=result.get("formatted_address") or result.get("vicinity"),
        place_id=result.get("place_id"),
        coordinate=_coordinate_of(result),
        components=components,
        location_type=result.get("geometry", {}).get("location_type"),
        partial_match=bool(result.get("partial_match", False)),
    )


class AddressResolver:
    """Turns free-text addresses and coordinates into confidence-scored locations."""

    def __init__(
        self,
        provider: MappingProvider,
        *,
        nearby_radius_m: int | None = None,
        max_suggestions: int | None = None,
        max_alternatives: int | None = None,
        max_parallel_requests: int | None = None,
    ) -> None:
        self.provider = provider
        self.nearby_radius_m = nearby_radius_m or settings.nearby_suggestion_radius_m
        self.max_suggestions = max_suggestions if max_suggestions is not None else settings.max_suggestions
        self.max_alternatives = (
            max_alternatives if max_alternatives is not None else settings.max_reverse_alternatives
        )
        self.max_parallel_requests = max_parallel_requests or settings.max_parallel_requests

    def validate_address(self, address: str, country_code: str) -> ValidationResult:
        schema = get_country(country_code)
        if not address or not address.strip():
            raise ValueError("Address must not be empty.")

        results = self.provider.geocode(address, country=schema.alpha2, bounds=schema.bounds)
        if not results:
            simplified = extract_main_components(address)
            logger.warning(
                f"No exact match for address in {schema.code}; retrying with simplified form '{simplified}'"
            )
            fuzzy_results = self.provider.geocode(simplified, country=schema.alpha2, bounds=schema.bounds)
            return ValidationResult(
                status=ValidationStatus.INVALID,
                original_address=address,
                suggestions=[
                    format_candidate(result, schema)
                    for result in fuzzy_results[: self.max_suggestions]
                ],
                message="Address not found. Consider the suggested alternatives.",
            )

        main_result = results[0]
        confidence = determine_confidence(main_result)
        candidate = format_candidate(main_result, schema)

        suggestions: list[AddressCandidate] = []
        if confidence is not Confidence.HIGH and candidate.coordinate is not None:
            suggestions = self._nearby_addresses(candidate.coordinate)

        return ValidationResult(
            status=ValidationStatus.VALID,
            confidence=confidence,
            formatted_address=candidate.formatted_address,
            components=candidate.components,
            coordinate=candidate.coordinate,
            place_id=candidate.place_id,
            location_type=candidate.location_type,
            partial_match=candidate.partial_match,
            original_address=address,
            suggestions=suggestions,
        )

    def validate_multiple_addresses(
        self, addresses: Sequence[str], country_code: str
    ) -> list[AddressBatchItem]:
        """Validate each address independently; one failure never aborts the batch."""
        get_country(country_code)
        if not addresses:
            return []

        def _validate(address: str) -> AddressBatchItem:
            try:
                result = self.validate_address(address, country_code)
            except (GeoIntelError, ValueError) as exc:
                logger.warning(f"Address validation failed for batch item: {exc}")
                return AddressBatchItem(address=address, success=False, error=str(exc))
            return AddressBatchItem(address=address, success=result.is_valid, result=result)

        workers = min(self.max_parallel_requests, len(addresses))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            items = list(executor.map(_validate, addresses))

        succeeded = sum(1 for item in items if item.success)
        logger.info(f"Validated {len(items)} addresses in {country_code}: {succeeded} valid")
        return items

    def reverse_geocode(self, lat: float, lng: float) -> ValidationResult:
        location = Coordinate(lat, lng)
        results = self.provider.reverse_geocode(location)
        if not results:
            raise NoMatchFound(f"No address found for coordinates {location.as_param()}.")

        main_result = results[0]
        candidate = format_candidate(main_result)
        return ValidationResult(
            status=ValidationStatus.VALID,
            confidence=determine_confidence(main_result),
            formatted_address=candidate.formatted_address,
            components=candidate.components,
            coordinate=candidate.coordinate,
            place_id=candidate.place_id,
            location_type=candidate.location_type,
            partial_match=candidate.partial_match,
            alternatives=[
                format_candidate(result) for result in results[1 : 1 + self.max_alternatives]
            ],
        )

    def resolve_coordinate(self, address: str, country_code: str) -> Coordinate:
        """Return the coordinate of a valid match or raise ValidationFailed."""
        result = self.validate_address(address, country_code)
        if not result.is_valid or result.coordinate is None:
            raise ValidationFailed(address, result.suggestions)
        return result.coordinate

    def check_health(self) -> str:
        address, country = HEALTH_CHECK_ADDRESS
        try:
            self.validate_address(address, country)
            return "healthy"
        except (GeoIntelError, ValueError) as exc:
            logger.error(f"Address resolver health check failed: {exc}")
            return "unhealthy"

    def _nearby_addresses(self, location: Coordinate) -> list[AddressCandidate]:
        places = self.provider.places_nearby(
            location, radius=self.nearby_radius_m, place_type="street_address"
        )
        return [format_candidate(place) for place in places[: self.max_suggestions]]
