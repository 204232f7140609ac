"""Route group exports."""

from . import addresses, geofences, health, hotspots, routes

__all__ = ["addresses", "geofences", "health", "hotspots", "routes"]
