"""Mapping provider clients."""

from .base import Location, MappingProvider
from .google_client import GoogleMapsClient, decode_polyline

__all__ = ["Location", "MappingProvider", "GoogleMapsClient", "decode_polyline"]
