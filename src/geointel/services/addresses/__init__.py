"""Address validation services."""

from .models import AddressBatchItem, AddressCandidate, Confidence, ValidationResult, ValidationStatus
from .resolver import AddressResolver

__all__ = [
    "AddressResolver",
    "AddressBatchItem",
    "AddressCandidate",
    "Confidence",
    "ValidationResult",
    "ValidationStatus",
]
