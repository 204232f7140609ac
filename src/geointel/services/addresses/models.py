"""Address resolution result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ...models.domain import Coordinate


class ValidationStatus(str, Enum):
    VALID = "VALID"
    INVALID = "INVALID"


class Confidence(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(slots=True)
class AddressCandidate:
    """A formatted provider match, used for suggestions and alternatives."""

    formatted_address: Optional[str]
    place_id: Optional[str]
    coordinate: Optional[Coordinate]
    components: dict[str, str] = field(default_factory=dict)
    location_type: Optional[str] = None
    partial_match: bool = False


@dataclass(slots=True)
class ValidationResult:
    status: ValidationStatus
    confidence: Optional[Confidence] = None
    formatted_address: Optional[str] = None
    components: dict[str, str] = field(default_factory=dict)
    coordinate: Optional[Coordinate] = None
    place_id: Optional[str] = None
    location_type: Optional[str] = None
    partial_match: bool = False
    original_address: Optional[str] = None
    suggestions: list[AddressCandidate] = field(default_factory=list)
    alternatives: list[AddressCandidate] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.status is ValidationStatus.VALID


@dataclass(slots=True)
class AddressBatchItem:
    address: str
    success: bool
    result: Optional[ValidationResult] = None
    error: Optional[str] = None
